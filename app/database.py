# app/database.py

import logging
import os
from dataclasses import dataclass
from typing import Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, URL, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "true").lower() not in {"0", "false", "no"}


@dataclass(frozen=True)
class DatabaseConfig:
    username: str
    password: str
    host: str
    port: int
    database: str
    driver: str = "mysql+mysqlconnector"
    url_override: str | None = None
    connect_timeout: int = 10
    pool_recycle: int = 3600
    echo: bool = False

    @property
    def url(self) -> URL:
        if self.url_override:
            return make_url(self.url_override)
        return URL.create(
            drivername=self.driver,
            username=self.username,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
        )

    @property
    def is_mysql(self) -> bool:
        return self.url.get_backend_name() == "mysql"

    @classmethod
    def from_env(
        cls,
        prefix: str = "MYSQL",
        defaults: Dict[str, str] | None = None,
    ) -> "DatabaseConfig":
        defaults = defaults or {}
        def _env(name: str, fallback: str) -> str:
            return os.getenv(f"{prefix}_{name}", defaults.get(name, fallback))

        return cls(
            username=_env("USER", "root"),
            password=_env("PASSWORD", ""),
            host=_env("HOST", "localhost"),
            port=int(_env("PORT", "3306")),
            database=_env("DB", "sensor_db"),
            driver=_env("DRIVER", "mysql+mysqlconnector"),
            url_override=os.getenv("DATABASE_URL") or None,
            connect_timeout=int(_env("CONNECT_TIMEOUT", "10")),
            pool_recycle=int(_env("POOL_RECYCLE", "3600")),
            echo=os.getenv("SQL_ECHO", "false").lower() in {"1", "true", "yes"},
        )


ENGINE_REGISTRY: Dict[str, Engine] = {}


def get_engine(
    config: DatabaseConfig,
    *,
    label: str | None = None,
    pool_pre_ping: bool = True,
) -> Engine:
    key = label or config.url.render_as_string(hide_password=True)
    if key not in ENGINE_REGISTRY:
        kwargs = {}
        if config.is_mysql:
            # mysql-connector takes the connect timeout in seconds
            kwargs["connect_args"] = {"connection_timeout": config.connect_timeout}
            kwargs["pool_recycle"] = config.pool_recycle
        ENGINE_REGISTRY[key] = create_engine(
            config.url,
            pool_pre_ping=pool_pre_ping,
            echo=config.echo,
            **kwargs,
        )
    return ENGINE_REGISTRY[key]


DEFAULT_DB_CONFIG = DatabaseConfig.from_env()

engine = get_engine(DEFAULT_DB_CONFIG)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create any missing tables. Existing tables are left untouched."""
    # models register themselves on Base.metadata at import
    from app import models  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.info("Ensured tables %s exist", sorted(Base.metadata.tables))
