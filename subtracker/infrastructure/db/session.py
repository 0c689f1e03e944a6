"""
Database session management (SQLAlchemy)

Engine создаётся явно при старте приложения и хранится в app.state,
сессии выдаются по одной на запрос.
"""
from typing import Generator

from fastapi import Request
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from subtracker.config import Settings


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for all ORM models
    """
    pass


def create_db_engine(settings: Settings) -> Engine:
    """Build the process-wide engine (connection pool) from settings"""
    url = settings.get_sqlalchemy_url()
    if url.startswith("sqlite"):
        # SQLite (local dev): no pool sizing, allow use across threadpool workers
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency для FastAPI - создает session и автоматически закрывает

    Usage:
        @router.get("/subscriptions")
        def list_subscriptions(db: Session = Depends(get_db)):
            ...
    """
    SessionLocal = request.app.state.session_factory
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection(engine: Engine) -> None:
    """
    Health check - проверка доступности БД

    Raises:
        sqlalchemy.exc.OperationalError: если БД недоступна
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
