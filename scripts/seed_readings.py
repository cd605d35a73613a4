"""
Insert synthetic DHT11 readings between two datetimes for local development.

Usage:
  python -m scripts.seed_readings --start 2026-10-01 --end 2026-10-02 --step-minutes 10

Defaults:
  start: 24 hours before end
  end: now
  step: 10 minutes
"""

from __future__ import annotations

import argparse
import logging
import random
from datetime import datetime, timedelta
from typing import Dict, Iterator, List

from app.database import SessionLocal, init_db
from app.logging_setup import configure_logging
from app.models import DEFAULT_THRESHOLD_HUMIDITY, DEFAULT_THRESHOLD_TEMP, SensorReading

logger = logging.getLogger(__name__)

TEMP_BASELINE = 24.0
TEMP_VARIANCE = 3.0
HUMIDITY_BASELINE = 62.0
HUMIDITY_VARIANCE = 10.0


def parse_dt(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def build_reading(ts: datetime, rng: random.Random) -> Dict[str, object]:
    temperature = round(rng.uniform(TEMP_BASELINE - TEMP_VARIANCE, TEMP_BASELINE + TEMP_VARIANCE), 1)
    humidity = round(_clamp(rng.uniform(HUMIDITY_BASELINE - HUMIDITY_VARIANCE, HUMIDITY_BASELINE + HUMIDITY_VARIANCE), 0.0, 100.0), 1)
    # relay trips when either default threshold is exceeded, like the controller does
    relay_on = temperature > DEFAULT_THRESHOLD_TEMP or humidity > DEFAULT_THRESHOLD_HUMIDITY
    return {
        'temperature': temperature,
        'humidity': humidity,
        'timestamp': ts,
        'relay_status': 'ON' if relay_on else 'OFF',
    }


def iter_timestamps(start: datetime, end: datetime, step: timedelta) -> Iterator[datetime]:
    ts = start
    while ts <= end:
        yield ts
        ts += step


def seed_readings(session, start: datetime, end: datetime, step: timedelta, seed: int | None = None) -> int:
    rng = random.Random(seed)
    rows: List[SensorReading] = [
        SensorReading(**build_reading(ts, rng)) for ts in iter_timestamps(start, end, step)
    ]
    session.add_all(rows)
    session.commit()
    return len(rows)


def main():
    parser = argparse.ArgumentParser(description="Insert synthetic DHT11 readings into tbl_dht.")
    parser.add_argument("--end", type=parse_dt, default=datetime.now(), help="ISO datetime end (default now)")
    parser.add_argument("--start", type=parse_dt, default=None, help="ISO datetime start (default 24h before end)")
    parser.add_argument("--step-minutes", type=int, default=10, help="Step in minutes (default 10)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable data")
    args = parser.parse_args()

    configure_logging()
    end = args.end
    start = args.start or end - timedelta(hours=24)
    step = timedelta(minutes=max(1, args.step_minutes))

    init_db()
    with SessionLocal() as session:
        inserted = seed_readings(session, start, end, step, seed=args.seed)

    logger.info("Seed complete: inserted=%s, start=%s, end=%s, step_minutes=%s", inserted, start, end, args.step_minutes)


if __name__ == "__main__":
    main()
