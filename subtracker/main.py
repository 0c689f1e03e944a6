"""
FastAPI application factory
"""
import logging
import time
import traceback
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import Engine
from starlette.middleware.base import BaseHTTPMiddleware

from subtracker.api.v1 import subscriptions
from subtracker.config import Settings, get_settings
from subtracker.domain.subscription import (
    SubscriptionNotFoundError,
    SubscriptionStoreError,
    SubscriptionValidationError,
)
from subtracker.infrastructure.db.migrate import run_migrations
from subtracker.infrastructure.db.session import (
    check_db_connection,
    create_db_engine,
    create_session_factory,
)
from subtracker.logging_config import setup_logging

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access log + X-Request-ID; catches ALL exceptions including sync routes
    """

    async def dispatch(self, request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            tb_str = traceback.format_exc()
            logger.error(f"\n{'='*60}\nERROR on {request.method} {request.url.path} [{request_id}]\n{tb_str}{'='*60}")
            response = JSONResponse({"error": "internal error"}, status_code=500)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed_ms:.1f} ms) [{request_id}]"
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown: engine (connection pool) and migrations"""
    settings: Settings = app.state.settings
    owns_engine = app.state.engine is None

    if owns_engine:
        engine = create_db_engine(settings)
        check_db_connection(engine)
        logger.info("db connected")
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)

    if settings.RUN_MIGRATIONS:
        run_migrations(app.state.engine)

    yield

    logger.info("shutting down...")
    if owns_engine:
        app.state.engine.dispose()
        app.state.engine = None


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(SubscriptionValidationError)
    async def validation_error_handler(request: Request, exc: SubscriptionValidationError):
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"{request.method} {request.url.path} invalid body: {exc.errors()}")
        return JSONResponse({"error": "invalid request body"}, status_code=400)

    @app.exception_handler(SubscriptionNotFoundError)
    async def not_found_handler(request: Request, exc: SubscriptionNotFoundError):
        logger.warning(f"subscription not found id={exc.subscription_id}")
        return JSONResponse({"error": str(exc)}, status_code=404)

    @app.exception_handler(SubscriptionStoreError)
    async def store_error_handler(request: Request, exc: SubscriptionStoreError):
        logger.error(f"{request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse({"error": "internal error"}, status_code=500)


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    """
    Application factory - создаёт и настраивает FastAPI приложение

    Args:
        settings: настройки (по умолчанию get_settings())
        engine: готовый SQLAlchemy engine; если не передан, создаётся при старте

    Returns:
        Настроенный FastAPI app
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="Subscription Tracker",
        debug=not settings.is_prod,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine) if engine is not None else None

    app.add_middleware(RequestLoggingMiddleware)
    register_error_handlers(app)

    app.include_router(subscriptions.router, prefix=settings.API_PREFIX)

    # Health checks
    @app.get("/healthz", response_class=PlainTextResponse, tags=["system"])
    def healthz():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (проверяет доступность БД)"""
        check_db_connection(app.state.engine)
        return "ok"

    return app


# Create app instance
app = create_app()


def run() -> None:
    """Console entrypoint: uvicorn with graceful shutdown"""
    import uvicorn

    settings = get_settings()
    logger.info(f"http starting on {settings.HTTP_HOST}:{settings.HTTP_PORT}")
    uvicorn.run(
        "subtracker.main:app",
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        timeout_keep_alive=60,
        timeout_graceful_shutdown=10,
    )


if __name__ == "__main__":
    run()
