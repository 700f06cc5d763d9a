"""Ingestion and forecast orchestration.

SensorPipeline wires the pure components (validation, threshold
evaluation, forecasting) to storage and live fan-out. It holds no state of
its own beyond its collaborators; every call is a single transaction.
"""

import random
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import Depends

from ecotracker.core.errors import NotFoundError
from ecotracker.logging_config import get_logger
from ecotracker.models.alert import Alert
from ecotracker.models.prediction import Prediction
from ecotracker.models.sensor_reading import SensorReading
from ecotracker.services.broadcaster import ReadingBroadcaster, get_broadcaster
from ecotracker.services.forecasting import DEFAULT_HORIZON_HOURS, forecast
from ecotracker.services.sensor_validation import require_valid_reading
from ecotracker.services.storage import SensorStorage, get_storage
from ecotracker.services.thresholds import evaluate_thresholds

logger = get_logger(__name__)

# History consulted for a forecast
FORECAST_HISTORY_DAYS = 7


@dataclass
class IngestResult:
    """What one accepted reading produced."""

    reading: SensorReading
    alerts: list[Alert] = field(default_factory=list)
    delivered: int = 0


class SensorPipeline:
    """Validate -> persist -> evaluate -> fan out, and on-demand forecasts."""

    def __init__(
        self,
        storage: SensorStorage,
        broadcaster: ReadingBroadcaster | None = None,
        rng: random.Random | None = None,
    ):
        self.storage = storage
        self.broadcaster = broadcaster
        self.rng = rng

    async def ingest(self, mac_address: str, raw: Any) -> IngestResult:
        """Accept one reading posted by a device.

        Args:
            mac_address: MAC header sent by the device.
            raw: JSON-decoded request body.

        Returns:
            IngestResult with the stored reading and any alerts raised.

        Raises:
            NotFoundError: No device is registered under ``mac_address``.
            SensorValidationError: The payload failed validation; nothing
                is written.
            StorageError: Persistence failed.
        """
        device = await self.storage.get_device_by_mac(mac_address)
        if device is None:
            logger.warning("Reading from unregistered device", mac_address=mac_address)
            raise NotFoundError("device", mac_address)

        payload = require_valid_reading(raw)
        now = datetime.now(UTC)

        await self.storage.mark_device_seen(device, now)
        reading = await self.storage.add_reading(device.id, payload, now)
        alerts = await self.storage.add_alerts(evaluate_thresholds(device.id, payload))
        await self.storage.commit()

        if alerts:
            logger.info(
                "Threshold alerts raised",
                device_id=str(device.id),
                count=len(alerts),
                metrics=[a.metric_type.value for a in alerts],
            )

        delivered = 0
        if self.broadcaster is not None:
            try:
                delivered = await self.broadcaster.publish(
                    device.id,
                    {**payload.as_dict(), "timestamp": now.isoformat()},
                )
            except Exception as e:
                # The reading is already committed; fan-out is best effort
                logger.warning(
                    "Live fan-out failed",
                    device_id=str(device.id),
                    error=str(e),
                )

        return IngestResult(reading=reading, alerts=alerts, delivered=delivered)

    async def generate_forecast(
        self,
        device_id: uuid.UUID,
        prediction_type: str,
        horizon_hours: int = DEFAULT_HORIZON_HOURS,
        history_days: int = FORECAST_HISTORY_DAYS,
    ) -> list[Prediction]:
        """Forecast the next ``horizon_hours`` hours and persist the points.

        Args:
            device_id: Device to forecast for.
            prediction_type: Metric label, e.g. 'air_quality'.
            horizon_hours: Number of hourly points.
            history_days: How far back to read history.

        Returns:
            The stored Prediction rows, ordered by prediction_for.
        """
        now = datetime.now(UTC)
        history = await self.storage.readings_in_range(
            device_id,
            now - timedelta(days=history_days),
            now,
        )

        candidates = forecast(
            device_id,
            prediction_type,
            history,
            horizon_hours=horizon_hours,
            now=now,
            rng=self.rng,
        )
        predictions = await self.storage.add_predictions(candidates)
        await self.storage.commit()

        logger.info(
            "Forecast generated",
            device_id=str(device_id),
            prediction_type=prediction_type,
            points=len(predictions),
            history_size=len(history),
        )
        return predictions


def get_pipeline(
    storage: SensorStorage = Depends(get_storage),
    broadcaster: ReadingBroadcaster = Depends(get_broadcaster),
) -> SensorPipeline:
    """FastAPI dependency building a pipeline over the request session."""
    return SensorPipeline(storage, broadcaster)
