import random
from datetime import datetime, timedelta

from app.routers.readings import list_readings
from scripts.seed_readings import build_reading, seed_readings


def test_seed_readings_inserts_one_row_per_step(db_session):
    start = datetime(2026, 10, 1)
    end = start + timedelta(hours=24)

    inserted = seed_readings(db_session, start, end, timedelta(hours=1), seed=7)

    rows, total = list_readings(db_session, 500)
    assert inserted == total == 25
    assert rows[0].timestamp == start
    assert rows[-1].timestamp == end


def test_build_reading_relay_follows_default_thresholds():
    rng = random.Random(3)
    for _ in range(50):
        reading = build_reading(datetime(2026, 10, 1), rng)
        tripped = reading['temperature'] > 26.0 or reading['humidity'] > 70.0
        assert reading['relay_status'] == ('ON' if tripped else 'OFF')
        assert 0.0 <= reading['humidity'] <= 100.0
