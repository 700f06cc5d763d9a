"""ESP8266 device model.

A device belongs to one user and is identified on ingestion by its
hardware (MAC) address.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ecotracker.models.base import Base, utc_now


class Device(Base):
    """A registered sensor board."""

    __tablename__ = "devices"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Normalized to upper case; NULL allowed for boards not yet flashed
    mac_address: Mapped[str | None] = mapped_column(
        String(17),
        nullable=True,
        unique=True,
    )

    firmware: Mapped[str | None] = mapped_column(String(50), nullable=True)

    is_online: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    last_seen: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    user = relationship("User", back_populates="devices")
    readings = relationship(
        "SensorReading",
        back_populates="device",
        cascade="all, delete-orphan",
    )
    alerts = relationship(
        "Alert",
        back_populates="device",
        cascade="all, delete-orphan",
    )
    predictions = relationship(
        "Prediction",
        back_populates="device",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return (
            f"<Device(name={self.name}, mac={self.mac_address}, "
            f"online={self.is_online})>"
        )
