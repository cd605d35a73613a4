import logging
import math
from typing import Any, Dict, List, Tuple

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import OutOfRange, ValidationError
from app.models import (
    DEFAULT_SENSOR_ID,
    DEFAULT_SENSOR_NAME,
    DEFAULT_THRESHOLD_HUMIDITY,
    DEFAULT_THRESHOLD_TEMP,
    Threshold,
)
from app.utils.payload import request_fields
from app.utils.timestamps import format_timestamp

logger = logging.getLogger(__name__)
router = APIRouter()

THRESHOLD_BOUNDS = (0.0, 100.0)


def _ordered_thresholds(db: Session) -> List[Threshold]:
    return list(db.execute(select(Threshold).order_by(Threshold.sensor_id)).scalars().all())


def get_all_thresholds(db: Session) -> List[Threshold]:
    """Every threshold row by sensor id. An empty table is seeded with the default sensor first."""
    rows = _ordered_thresholds(db)
    if rows:
        return rows
    db.add(
        Threshold(
            sensor_id=DEFAULT_SENSOR_ID,
            sensor_name=DEFAULT_SENSOR_NAME,
            threshold_temp=DEFAULT_THRESHOLD_TEMP,
            threshold_humidity=DEFAULT_THRESHOLD_HUMIDITY,
        )
    )
    try:
        db.commit()
        logger.info("Seeded default threshold for sensor %s", DEFAULT_SENSOR_ID)
    except IntegrityError:
        # a concurrent reader seeded it first
        db.rollback()
    return _ordered_thresholds(db)


def fetch_sensor_threshold(db: Session, sensor_id: int = DEFAULT_SENSOR_ID) -> Tuple[float, float] | None:
    row = db.execute(
        select(Threshold.threshold_temp, Threshold.threshold_humidity).where(Threshold.sensor_id == sensor_id)
    ).first()
    return (row[0], row[1]) if row else None


def default_or(store_result: Any) -> Tuple[float, float, str]:
    """
    Map a store lookup to ``(temp, humidity, status)``.
    ``store_result`` is a ``(temp, humidity)`` pair, ``None`` when no row exists,
    or the exception raised by the lookup.
    """
    if isinstance(store_result, BaseException):
        return DEFAULT_THRESHOLD_TEMP, DEFAULT_THRESHOLD_HUMIDITY, 'error'
    if store_result is None:
        return DEFAULT_THRESHOLD_TEMP, DEFAULT_THRESHOLD_HUMIDITY, 'default'
    temp, humidity = store_result
    return float(temp), float(humidity), 'success'


def get_sensor_threshold(db: Session, sensor_id: int = DEFAULT_SENSOR_ID) -> Tuple[float, float, str]:
    try:
        result: Any = fetch_sensor_threshold(db, sensor_id)
    except SQLAlchemyError as exc:
        logger.warning("Threshold lookup for sensor %s failed, serving defaults: %s", sensor_id, exc)
        result = exc
    return default_or(result)


def validate_thresholds(temp: float, humidity: float) -> None:
    low, high = THRESHOLD_BOUNDS
    if not (math.isfinite(temp) and low <= temp <= high):
        raise OutOfRange('Temperature threshold must be between 0°C and 100°C')
    if not (math.isfinite(humidity) and low <= humidity <= high):
        raise OutOfRange('Humidity threshold must be between 0% and 100%')


def _upsert_statement(dialect: str, values: Dict[str, Any]):
    update_cols = ('threshold_temp', 'threshold_humidity', 'timestamp')
    if dialect == 'mysql':
        from sqlalchemy.dialects.mysql import insert as mysql_insert

        stmt = mysql_insert(Threshold).values(**values)
        return stmt.on_duplicate_key_update({col: stmt.inserted[col] for col in update_cols})
    if dialect in ('sqlite', 'postgresql'):
        if dialect == 'sqlite':
            from sqlalchemy.dialects.sqlite import insert as conflict_insert
        else:
            from sqlalchemy.dialects.postgresql import insert as conflict_insert

        stmt = conflict_insert(Threshold).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=[Threshold.sensor_id],
            set_={col: stmt.excluded[col] for col in update_cols},
        )
    return None


def upsert_threshold(db: Session, sensor_id: int, temp: float, humidity: float) -> bool:
    """Insert or update the threshold for ``sensor_id``. Returns True when a new row was created."""
    validate_thresholds(temp, humidity)
    created = fetch_sensor_threshold(db, sensor_id) is None
    values = {
        'sensor_id': sensor_id,
        'sensor_name': DEFAULT_SENSOR_NAME,
        'threshold_temp': temp,
        'threshold_humidity': humidity,
        'timestamp': func.now(),
    }
    stmt = _upsert_statement(db.get_bind().dialect.name, values)
    if stmt is not None:
        db.execute(stmt)
    elif created:
        db.add(Threshold(**values))
    else:
        row = db.get(Threshold, sensor_id)
        row.threshold_temp = temp
        row.threshold_humidity = humidity
        row.timestamp = func.now()
    db.commit()
    logger.info(
        "%s threshold for sensor %s: temp=%s humidity=%s",
        'Created' if created else 'Updated',
        sensor_id,
        temp,
        humidity,
    )
    return created


def _field(fields: Dict[str, Any], name: str, default: Any, cast):
    raw = fields.get(name)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    try:
        return cast(raw.strip() if isinstance(raw, str) else raw)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f'Invalid value for {name}')


def _as_int(value: Any) -> int:
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(value)
    return int(value)


def _serialize(row: Threshold) -> Dict[str, Any]:
    return {
        'sensor_id': int(row.sensor_id),
        'sensor_name': row.sensor_name,
        'threshold_temp': float(row.threshold_temp),
        'threshold_humidity': float(row.threshold_humidity),
        'timestamp': format_timestamp(row.timestamp),
    }


@router.get("/api/thresholds")
@router.get("/get_threshold.php", include_in_schema=False)
def api_thresholds(db: Session = Depends(get_db)) -> Dict[str, Any]:
    return {'status': 'success', 'data': [_serialize(row) for row in get_all_thresholds(db)]}


@router.post("/api/thresholds")
@router.post("/update_threshold.php", include_in_schema=False)
def api_update_threshold(
    fields: Dict[str, Any] = Depends(request_fields),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    sensor_id = _field(fields, 'sensor_id', DEFAULT_SENSOR_ID, _as_int)
    temp = _field(fields, 'threshold_temp', DEFAULT_THRESHOLD_TEMP, float)
    humidity = _field(fields, 'threshold_humidity', DEFAULT_THRESHOLD_HUMIDITY, float)
    created = upsert_threshold(db, sensor_id, temp, humidity)
    return {
        'status': 'success',
        'message': 'Threshold created successfully' if created else 'Threshold updated successfully',
        'sensor_id': sensor_id,
        'threshold_temp': temp,
        'threshold_humidity': humidity,
    }


@router.api_route("/update_threshold.php", methods=["GET", "PUT", "DELETE", "PATCH"], include_in_schema=False)
def api_update_threshold_invalid_method() -> Dict[str, Any]:
    return {'status': 'error', 'message': 'Invalid request method'}


@router.get("/api/thresholds/arduino")
@router.get("/get_threshold_for_arduino.php", include_in_schema=False)
def api_threshold_for_arduino(db: Session = Depends(get_db)) -> Dict[str, Any]:
    temp, humidity, status = get_sensor_threshold(db, DEFAULT_SENSOR_ID)
    return {
        'temp_threshold': temp,
        'humidity_threshold': humidity,
        'status': status,
    }
