"""Threshold alert model.

Stores alerts raised when a reading crosses one of the fixed metric bands.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ecotracker.models.base import Base, utc_now


class MetricType(str, enum.Enum):
    """Sensor metric an alert refers to."""

    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    AIR_QUALITY = "air_quality"


class AlertSeverity(str, enum.Enum):
    """Severity level shown in the dashboard."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class Alert(Base):
    """Stores threshold-based alerts.

    Each alert records the triggering value and the threshold it crossed,
    and whether the user has read it. Alerts are never deleted.
    """

    __tablename__ = "alerts"

    __table_args__ = (
        Index("ix_alerts_device_read_created", "device_id", "is_read", "created_at"),
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

    metric_type: Mapped[MetricType] = mapped_column(
        Enum(
            MetricType,
            name="metrictype",
            native_enum=False,
            length=20,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )

    severity: Mapped[AlertSeverity] = mapped_column(
        Enum(
            AlertSeverity,
            name="alertseverity",
            native_enum=False,
            length=20,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    message: Mapped[str] = mapped_column(Text, nullable=False)

    value: Mapped[float] = mapped_column(Float, nullable=False)

    threshold: Mapped[float] = mapped_column(Float, nullable=False)

    is_read: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    device = relationship("Device", back_populates="alerts")

    def __repr__(self) -> str:
        return (
            f"<Alert(type={self.metric_type.value}, "
            f"severity={self.severity.value}, "
            f"value={self.value}, threshold={self.threshold})>"
        )
