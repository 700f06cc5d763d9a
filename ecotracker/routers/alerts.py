"""Threshold alerts router.

Unread alerts per device and marking an alert as read.
"""

import uuid

from fastapi import APIRouter, Depends

from ecotracker.core.auth import CurrentUser
from ecotracker.schemas.alert import AlertResponse
from ecotracker.services.storage import SensorStorage, get_storage

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get("/{device_id}", response_model=list[AlertResponse])
async def get_unread_alerts(
    device_id: uuid.UUID,
    user: CurrentUser,
    storage: SensorStorage = Depends(get_storage),
) -> list[AlertResponse]:
    """Up to 10 unread alerts for the device, newest first."""
    await storage.get_owned_device(device_id, user.id)
    alerts = await storage.unread_alerts(device_id)
    return [AlertResponse.model_validate(alert) for alert in alerts]


@router.patch(
    "/{alert_id}/read",
    response_model=AlertResponse,
    responses={404: {"description": "Alert not found"}},
)
async def mark_alert_read(
    alert_id: uuid.UUID,
    user: CurrentUser,
    storage: SensorStorage = Depends(get_storage),
) -> AlertResponse:
    alert = await storage.mark_alert_read(alert_id, user.id)
    return AlertResponse.model_validate(alert)
