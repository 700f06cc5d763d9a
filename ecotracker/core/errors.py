"""Domain error taxonomy and the FastAPI handlers that render it.

Services raise these; routers let them propagate and the handlers below
turn them into JSON responses with the matching status code.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ecotracker.logging_config import get_logger

logger = get_logger(__name__)


class EcoTrackerError(Exception):
    """Base class for errors surfaced to API callers."""


class SensorValidationError(EcoTrackerError):
    """A sensor payload field is missing its type or outside physical range."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class StorageError(EcoTrackerError):
    """Persistence is unavailable or a constraint was violated."""

    def __init__(self, message: str, *, constraint: bool = False):
        super().__init__(message)
        self.message = message
        self.constraint = constraint


class NotFoundError(EcoTrackerError):
    """A referenced device, alert or prediction does not exist."""

    def __init__(self, resource: str, identifier: object):
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.identifier = identifier


async def sensor_validation_error_handler(
    request: Request, exc: SensorValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Invalid sensor data",
            "field": exc.field,
            "reason": exc.reason,
        },
    )


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    if exc.constraint:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": exc.message},
        )

    logger.error(
        "Storage unavailable",
        path=request.url.path,
        error=exc.message,
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage unavailable, please retry later"},
    )


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": f"{exc.resource.capitalize()} not found"},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach handlers for the domain error taxonomy."""
    app.add_exception_handler(SensorValidationError, sensor_validation_error_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
