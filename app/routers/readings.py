import logging
from typing import Any, Dict, List, Tuple

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.database import get_db
from app.models import SensorReading
from app.utils.timestamps import format_timestamp

logger = logging.getLogger(__name__)
router = APIRouter()

DEFAULT_LIMIT = 50
MAX_LIMIT = 500


def effective_limit(limit: Any) -> int:
    """
    Resolve the ``limit`` query value.
    Missing, unparseable or non-positive values fall back to the default, large ones are capped.
    """
    try:
        value = int(str(limit).strip())
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    if value < 1:
        return DEFAULT_LIMIT
    return min(value, MAX_LIMIT)


def list_readings(db: Session, limit: int) -> Tuple[List[SensorReading], int]:
    total = db.execute(select(func.count()).select_from(SensorReading)).scalar_one()
    stmt = (
        select(SensorReading)
        .order_by(SensorReading.timestamp.desc(), SensorReading.id.desc())
        .limit(limit)
    )
    newest_first = db.execute(stmt).scalars().all()
    return list(reversed(newest_first)), int(total)


def _serialize(row: SensorReading) -> Dict[str, Any]:
    return {
        'id': row.id,
        'temperature': float(row.temperature),
        'humidity': float(row.humidity),
        'timestamp': format_timestamp(row.timestamp),
        'relay_status': row.relay_status,
    }


@router.get("/api/sensor-data")
@router.get("/get_sensor_data.php", include_in_schema=False)
def api_sensor_data(limit: str | None = None, db: Session = Depends(get_db)) -> Dict[str, Any]:
    resolved = effective_limit(limit)
    readings, total = list_readings(db, resolved)
    logger.debug("Served %s of %s readings (limit=%s)", len(readings), total, resolved)
    return {
        'status': 'success',
        'data': [_serialize(row) for row in readings],
        'count': len(readings),
        'total_records': total,
        'limit': resolved,
    }
