"""
Pytest fixtures for testing
"""
import os
import uuid

# subtracker.main builds its module-level app from the environment on import
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RUN_MIGRATIONS", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from subtracker.config import Settings
from subtracker.infrastructure.db.session import Base
from subtracker.infrastructure.db import models  # noqa: F401
from subtracker.main import create_app


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across threads (TestClient runs sync routes in a threadpool)"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def settings() -> Settings:
    return Settings(DATABASE_URL="sqlite://", RUN_MIGRATIONS=False, APP_ENV="dev")


@pytest.fixture
def client(settings, db_engine):
    """Test client для FastAPI поверх in-memory БД"""
    app = create_app(settings=settings, engine=db_engine)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def user_id() -> str:
    return str(uuid.uuid4())
