"""Device ingestion router.

Sensor boards POST their readings here, identified by a MAC address
header rather than a user session.
"""

import json
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ecotracker.config import settings
from ecotracker.core.errors import SensorValidationError
from ecotracker.logging_config import get_logger
from ecotracker.middleware.rate_limit import limiter
from ecotracker.schemas.sensor import IngestResponse, SensorReadingResponse
from ecotracker.services.pipeline import SensorPipeline, get_pipeline

logger = get_logger(__name__)

router = APIRouter(prefix="/api/esp", tags=["esp"])

MAC_HEADERS = ("macaddress", "mac-address")


def _mac_from_headers(request: Request) -> str | None:
    for header in MAC_HEADERS:
        value = request.headers.get(header)
        if value and value.strip():
            return value.strip()
    return None


def decode_body(body: bytes) -> Any:
    """Decode the posted JSON. An empty body is an empty payload."""
    if not body:
        return {}
    try:
        return json.loads(body)
    except ValueError:
        raise SensorValidationError(field="body", reason="Malformed JSON") from None


@router.post(
    "/data",
    response_model=IngestResponse,
    responses={
        400: {"description": "Invalid sensor data or missing MAC header"},
        404: {"description": "No device registered for this MAC address"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(settings.esp_rate_limit)
async def receive_sensor_data(
    request: Request,
    pipeline: SensorPipeline = Depends(get_pipeline),
) -> IngestResponse:
    """Store a reading, raise threshold alerts and push it to live subscribers."""
    mac_address = _mac_from_headers(request)
    if mac_address is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="MAC address required",
        )

    raw = decode_body(await request.body())

    result = await pipeline.ingest(mac_address, raw)

    logger.debug(
        "Sensor data accepted",
        device_id=str(result.reading.device_id),
        alerts_created=len(result.alerts),
        subscribers=result.delivered,
    )

    return IngestResponse(
        reading=SensorReadingResponse.model_validate(result.reading),
        alerts_created=len(result.alerts),
    )
