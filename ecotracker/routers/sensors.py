"""Sensor reading router.

Latest value, history window and CSV export for a device owned by the
current user.
"""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ecotracker.core.auth import CurrentUser
from ecotracker.schemas.sensor import LatestReadingResponse, SensorReadingResponse
from ecotracker.services.export import export_filename, readings_to_csv
from ecotracker.services.storage import SensorStorage, get_storage
from ecotracker.services.thresholds import air_quality_color, air_quality_status

router = APIRouter(prefix="/api/sensors", tags=["sensors"])

DEFAULT_HISTORY_WINDOW = timedelta(hours=24)

StartDate = Annotated[datetime | None, Query(alias="startDate")]
EndDate = Annotated[datetime | None, Query(alias="endDate")]


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def resolve_range(
    start: datetime | None, end: datetime | None
) -> tuple[datetime, datetime]:
    """Fill in the default window (last 24 hours ending now).

    Naive datetimes are taken as UTC.

    Raises:
        HTTPException 400: If start is after end.
    """
    end = _as_utc(end) if end is not None else datetime.now(UTC)
    start = _as_utc(start) if start is not None else end - DEFAULT_HISTORY_WINDOW
    if start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="startDate must not be after endDate",
        )
    return start, end


@router.get("/{device_id}/latest", response_model=LatestReadingResponse | None)
async def get_latest_reading(
    device_id: uuid.UUID,
    user: CurrentUser,
    storage: SensorStorage = Depends(get_storage),
) -> LatestReadingResponse | None:
    """Most recent reading, or null if the device has never reported."""
    await storage.get_owned_device(device_id, user.id)
    reading = await storage.latest_reading(device_id)
    if reading is None:
        return None

    response = LatestReadingResponse.model_validate(reading)
    if reading.air_quality is not None:
        response.air_quality_status = air_quality_status(reading.air_quality)
        response.air_quality_color = air_quality_color(reading.air_quality)
    return response


@router.get("/{device_id}/history", response_model=list[SensorReadingResponse])
async def get_reading_history(
    device_id: uuid.UUID,
    user: CurrentUser,
    start_date: StartDate = None,
    end_date: EndDate = None,
    storage: SensorStorage = Depends(get_storage),
) -> list[SensorReadingResponse]:
    """Readings between startDate and endDate (inclusive), newest first."""
    await storage.get_owned_device(device_id, user.id)
    start, end = resolve_range(start_date, end_date)
    readings = await storage.readings_in_range(device_id, start, end)
    return [SensorReadingResponse.model_validate(r) for r in readings]


@router.get("/{device_id}/export")
async def export_reading_history(
    device_id: uuid.UUID,
    user: CurrentUser,
    start_date: StartDate = None,
    end_date: EndDate = None,
    storage: SensorStorage = Depends(get_storage),
) -> Response:
    """Same window as /history, as a CSV download."""
    await storage.get_owned_device(device_id, user.id)
    start, end = resolve_range(start_date, end_date)
    readings = await storage.readings_in_range(device_id, start, end)
    return Response(
        content=readings_to_csv(readings),
        media_type="text/csv",
        headers={
            "Content-Disposition": (
                f'attachment; filename="{export_filename(start, end)}"'
            )
        },
    )
