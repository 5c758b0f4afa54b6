"""FastAPI application entry point for the Blue Carbon registry.

Start-up configures logging, hydrates the record store from the hosted
tables (or starts offline) and starts the outbox worker. Shutdown stops
the worker; undelivered entries stay visible in /v1/sync until then.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from structlog import get_logger

from bluecarbon import __version__
from bluecarbon.api.middleware import LoggingMiddleware, MetricsMiddleware
from bluecarbon.api.routes.config import router as config_router
from bluecarbon.api.routes.credits import router as credits_router
from bluecarbon.api.routes.dashboard import router as dashboard_router
from bluecarbon.api.routes.health import router as health_router
from bluecarbon.api.routes.metrics import router as metrics_router
from bluecarbon.api.routes.submissions import router as submissions_router
from bluecarbon.api.routes.sync import router as sync_router
from bluecarbon.api.routes.users import router as users_router
from bluecarbon.bootstrap.registry import (
    get_integration_settings,
    get_persistence_outbox,
    get_registry_sync_service,
)
from bluecarbon.infrastructure.monitoring.metrics import get_metrics_collector
from bluecarbon.infrastructure.observability import configure_structlog

SERVICE_NAME = "bluecarbon-api"

logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_integration_settings()
    configure_structlog(settings.environment)
    get_metrics_collector().record_startup(SERVICE_NAME)

    hydration = await get_registry_sync_service().hydrate()
    outbox = get_persistence_outbox()
    await outbox.start()
    logger.info(
        "registry_started",
        mode=hydration.mode,
        submissions=hydration.submissions,
        credits=hydration.credits,
        oracle_configured=settings.oracle_configured,
        maps_configured=settings.maps_configured,
    )
    try:
        yield
    finally:
        await outbox.stop()
        logger.info("registry_stopped", pending=outbox.summary().pending)


app = FastAPI(
    title="Blue Carbon Registry API",
    description="Coastal restoration evidence, review and carbon credit registry",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(MetricsMiddleware)
app.add_middleware(LoggingMiddleware)

app.include_router(health_router)
app.include_router(metrics_router)
app.include_router(config_router)
app.include_router(users_router)
app.include_router(submissions_router)
app.include_router(credits_router)
app.include_router(dashboard_router)
app.include_router(sync_router)
