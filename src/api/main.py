"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from infrastructure.database.dependencies import (
    check_database,
    close_database_connections,
)
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe
from infrastructure.settings import get_registration_settings, get_settings
from infrastructure.version import __version__
from registration.dependencies import close_http_clients
from registration.presentation import router as registration_router


@asynccontextmanager
async def registrar_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Database engine lifecycle (created lazily, disposed on shutdown)
    - Shared HTTP clients for the configuration and Events services
    """
    configure_logging()
    probe = DefaultStartupProbe()
    probe.application_started(
        version=__version__,
        dispatch_on_create=get_registration_settings().dispatch_on_create,
    )

    yield

    await close_http_clients()
    await close_database_connections()
    probe.application_stopped()


app = FastAPI(
    title=get_settings().app_name,
    description="Registers AAD groups and tracks their provisioning status",
    version=__version__,
    lifespan=registrar_lifespan,
)

# Include Registration bounded context routes
app.include_router(registration_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/health/db")
async def health_db():
    """Check database connection health.

    Returns 503 when the registration store cannot be reached.
    """
    if await check_database():
        return {"status": "ok", "connected": True}
    return JSONResponse(
        status_code=503,
        content={"status": "unhealthy", "connected": False},
    )
