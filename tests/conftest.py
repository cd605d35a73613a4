import os

# must be set before the app modules read their configuration
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", "")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import get_db, init_db
from main import app


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    with session_factory() as session:
        yield session


def _client_for(factory):
    def override_get_db():
        db = factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def client(session_factory):
    yield _client_for(session_factory)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client(tmp_path):
    """Client whose store cannot be opened, so every query raises OperationalError."""
    eng = create_engine(f"sqlite:///{tmp_path / 'missing' / 'store.db'}")
    yield _client_for(sessionmaker(bind=eng))
    app.dependency_overrides.clear()
    eng.dispose()
