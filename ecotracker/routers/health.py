"""Health check endpoints for container orchestration."""

from typing import Any

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from ecotracker import __version__
from ecotracker.database import Database, get_database

router = APIRouter(tags=["Health"])


def _database_status_response(
    connected: bool, ok_status: str, failed_status: str
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK if connected else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": ok_status if connected else failed_status,
            "database": "connected" if connected else "disconnected",
            "version": __version__,
        },
    )


@router.get("/health", response_model=None)
async def health_check(database: Database = Depends(get_database)) -> Response:
    """Health check endpoint with database status.

    Returns 200 "healthy" when the database answers, 503 "degraded"
    otherwise. Used by Docker health checks and load balancers.
    """
    connected = await database.check_connection()
    return _database_status_response(connected, "healthy", "degraded")


@router.get("/health/live")
async def liveness_probe() -> dict[str, Any]:
    """Liveness probe: the process is up. Never touches the database."""
    return {"status": "alive"}


@router.get("/health/ready", response_model=None)
async def readiness_probe(database: Database = Depends(get_database)) -> Response:
    """Readiness probe: the service can reach its database."""
    connected = await database.check_connection()
    return _database_status_response(connected, "ready", "not_ready")
