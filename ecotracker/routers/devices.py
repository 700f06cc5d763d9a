"""Device registration router.

Lists and registers the sensor boards belonging to the current user.
"""

from fastapi import APIRouter, Depends, status

from ecotracker.core.auth import CurrentUser
from ecotracker.logging_config import get_logger
from ecotracker.schemas.device import DeviceCreate, DeviceResponse
from ecotracker.services.storage import SensorStorage, get_storage

logger = get_logger(__name__)

router = APIRouter(prefix="/api/devices", tags=["devices"])


@router.get("", response_model=list[DeviceResponse])
async def list_devices(
    user: CurrentUser,
    storage: SensorStorage = Depends(get_storage),
) -> list[DeviceResponse]:
    devices = await storage.list_devices(user.id)
    return [DeviceResponse.model_validate(device) for device in devices]


@router.post(
    "",
    response_model=DeviceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "MAC address already registered"}},
)
async def register_device(
    body: DeviceCreate,
    user: CurrentUser,
    storage: SensorStorage = Depends(get_storage),
) -> DeviceResponse:
    """Register a sensor board for the current user.

    A MAC address can be registered only once across all users; a
    duplicate answers 409.
    """
    device = await storage.create_device(
        user_id=user.id,
        name=body.name,
        mac_address=body.mac_address,
        ip_address=body.ip_address,
        firmware=body.firmware,
    )
    logger.info(
        "Device registered",
        user_id=str(user.id),
        device_id=str(device.id),
        mac_address=device.mac_address,
    )
    return DeviceResponse.model_validate(device)
