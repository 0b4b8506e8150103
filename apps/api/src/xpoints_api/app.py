from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from xpoints_api.core.settings import settings
from xpoints_api.db.session import async_session, create_schema
from .api.routes import api_router
from .core.logging import configure_logging
from .jobs import sync_exchange_rates
from .observability.tracing import configure_tracing
from .workers import ExchangeRateSyncWorker


APP_VERSION = "0.1.0"
SERVICE_NAME = "xpoints-api"


def _session_factory():
    return async_session()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.database_auto_create:
        await create_schema()
        logger.info("Database schema ensured", database_url=settings.database_url.split("://", 1)[0])

    if settings.exchange_rate_sync_on_startup:
        summary = await sync_exchange_rates(session_factory=_session_factory)
        logger.info("Published exchange rates seeded", pairs=summary["pairs"])

    sync_worker = ExchangeRateSyncWorker(
        session_factory=_session_factory,
        interval_seconds=settings.exchange_rate_sync_interval_seconds,
    )
    app.state.exchange_rate_sync_worker = sync_worker

    worker_enabled = settings.exchange_rate_sync_worker_enabled
    if worker_enabled:
        sync_worker.start()
        logger.info(
            "Exchange rate sync worker enabled",
            interval_seconds=sync_worker.interval_seconds,
        )
    else:
        logger.info(
            "Exchange rate sync worker disabled",
            reason="exchange_rate_sync_worker_enabled is false",
        )

    try:
        yield
    finally:
        if worker_enabled and sync_worker.is_running:
            await sync_worker.stop()


def create_app() -> FastAPI:
    """Application factory for the xPoints exchange API."""
    configure_logging(
        service_name=SERVICE_NAME,
        environment=settings.environment,
        version=APP_VERSION,
    )

    app = FastAPI(
        title="xPoints Exchange API",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    configure_tracing(
        app,
        service_name=SERVICE_NAME,
        service_version=APP_VERSION,
        environment=settings.environment,
        enabled=settings.tracing_enabled,
    )

    app.include_router(api_router)

    return app
