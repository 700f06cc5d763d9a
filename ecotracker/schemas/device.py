"""Device registration and listing schemas."""

import uuid

from pydantic import Field

from ecotracker.schemas.common import CamelModel, UtcDatetime

MAC_ADDRESS_PATTERN = r"^[0-9A-Fa-f]{2}([:-][0-9A-Fa-f]{2}){5}$"


class DeviceCreate(CamelModel):
    """Request schema for registering a sensor board."""

    name: str = Field(..., min_length=1, max_length=255)
    mac_address: str | None = Field(default=None, pattern=MAC_ADDRESS_PATTERN)
    ip_address: str | None = Field(default=None, max_length=64)
    firmware: str | None = Field(default=None, max_length=50)


class DeviceResponse(CamelModel):
    id: uuid.UUID
    name: str
    mac_address: str | None = None
    ip_address: str | None = None
    firmware: str | None = None
    is_online: bool
    last_seen: UtcDatetime | None = None
    created_at: UtcDatetime
