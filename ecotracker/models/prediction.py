"""Forecast prediction model.

Predictions are append-only: a later forecast run adds rows for the same
future hours instead of overwriting, and readers take the newest.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ecotracker.models.base import Base, utc_now


class Prediction(Base):
    """One hourly point estimate produced by the forecaster."""

    __tablename__ = "predictions"

    __table_args__ = (
        Index(
            "ix_predictions_device_type_created",
            "device_id",
            "prediction_type",
            "created_at",
        ),
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

    # 'air_quality', 'temperature', 'humidity' or any caller-supplied type
    prediction_type: Mapped[str] = mapped_column(String(50), nullable=False)

    predicted_value: Mapped[float] = mapped_column(Float, nullable=False)

    confidence: Mapped[float] = mapped_column(Float, nullable=False)

    prediction_for: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    model_version: Mapped[str] = mapped_column(String(20), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    device = relationship("Device", back_populates="predictions")

    def __repr__(self) -> str:
        return (
            f"<Prediction(type={self.prediction_type}, "
            f"value={self.predicted_value}, for={self.prediction_for})>"
        )
