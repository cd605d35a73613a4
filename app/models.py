from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Integer,
    String,
)
from sqlalchemy.sql import func

from .database import Base

# seed values shared by the threshold list, update and constrained-client paths
DEFAULT_SENSOR_ID = 1
DEFAULT_SENSOR_NAME = "dht11"
DEFAULT_THRESHOLD_TEMP = 26.0
DEFAULT_THRESHOLD_HUMIDITY = 70.0


class SensorReading(Base):
    __tablename__ = "tbl_dht"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    temperature = Column(Float, nullable=False)
    humidity = Column(Float, nullable=False)
    timestamp = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    relay_status = Column(String(32), nullable=True)  # written by the relay controller as-is


class Threshold(Base):
    __tablename__ = "tbl_threshold_relay"

    sensor_id = Column(Integer, primary_key=True, autoincrement=False)
    sensor_name = Column(String(64), nullable=False, default=DEFAULT_SENSOR_NAME)
    threshold_temp = Column(Float, nullable=False)
    threshold_humidity = Column(Float, nullable=False)
    timestamp = Column(DateTime, nullable=False, server_default=func.now())


class UserLogin(Base):
    __tablename__ = "user_login"

    tbl_id = Column(Integer, primary_key=True, autoincrement=True)
    tbl_email = Column(String(255), nullable=False, unique=True, index=True)
    tbl_password = Column(String(255), nullable=False)
