"""Sensor reading schemas."""

import uuid

from ecotracker.schemas.common import CamelModel, UtcDatetime


class SensorReadingResponse(CamelModel):
    """A stored reading. Metrics the device did not report are null."""

    id: uuid.UUID
    device_id: uuid.UUID
    temperature: float | None = None
    humidity: float | None = None
    air_quality: int | None = None
    timestamp: UtcDatetime


class LatestReadingResponse(SensorReadingResponse):
    """Latest reading enriched with the AQI classification."""

    air_quality_status: str | None = None
    air_quality_color: str | None = None


class IngestResponse(CamelModel):
    """Response to a device posting a reading."""

    message: str = "Data received successfully"
    reading: SensorReadingResponse
    alerts_created: int = 0
