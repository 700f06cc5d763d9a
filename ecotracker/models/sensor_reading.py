"""Sensor reading model.

Readings are append-only. Each metric is nullable because a single sensor
on the board can fail while the others keep reporting.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ecotracker.models.base import Base, utc_now


class SensorReading(Base):
    """One temperature / humidity / air quality sample from a device."""

    __tablename__ = "sensor_readings"

    __table_args__ = (
        # Index for querying recent readings for a device
        Index("ix_sensor_readings_device_timestamp", "device_id", "timestamp"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    device_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("devices.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Degrees Celsius
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Relative humidity, percent
    humidity: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Air quality index (0-1000 on this sensor's scale)
    air_quality: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Server receive time; the board has no reliable clock
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    device = relationship("Device", back_populates="readings")

    def __repr__(self) -> str:
        return (
            f"<SensorReading(device_id={self.device_id}, t={self.temperature}, "
            f"h={self.humidity}, aqi={self.air_quality}, timestamp={self.timestamp})>"
        )
