"""EcoTracker FastAPI Application."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from ecotracker import __version__
from ecotracker.config import settings, validate_secret_key
from ecotracker.core.errors import register_error_handlers
from ecotracker.database import Database
from ecotracker.logging_config import get_logger, setup_logging
from ecotracker.middleware import (
    CorrelationIdMiddleware,
    limiter,
    rate_limit_exceeded_handler,
)
from ecotracker.routers import (
    alerts,
    auth,
    devices,
    esp,
    health,
    predictions,
    sensors,
    stream,
)
from ecotracker.services.broadcaster import ReadingBroadcaster
from ecotracker.services.scheduler import start_scheduler, stop_scheduler

setup_logging(
    log_format=settings.log_format,
    log_level=settings.log_level,
    service_name=settings.service_name,
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    validate_secret_key()

    # Migrations are run by alembic before uvicorn starts
    database = Database.from_settings(settings)
    app.state.database = database
    logger.info("EcoTracker API started")

    start_scheduler(database, settings)

    yield

    logger.info("Shutting down EcoTracker API...")
    stop_scheduler()
    await database.close()
    logger.info("EcoTracker API shutdown complete")


app = FastAPI(
    title="EcoTracker API",
    description="IoT environmental monitoring API",
    version=__version__,
    lifespan=lifespan,
)

app.state.broadcaster = ReadingBroadcaster()
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
register_error_handlers(app)

# Middleware (order matters: first added = last executed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(devices.router)
app.include_router(sensors.router)
app.include_router(esp.router)
app.include_router(alerts.router)
app.include_router(predictions.router)
app.include_router(stream.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "name": "EcoTracker API",
        "version": __version__,
        "docs": "/docs",
    }
