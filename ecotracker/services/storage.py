"""Persistence client for devices, readings, alerts and predictions.

One SensorStorage wraps one AsyncSession. Every database failure is
translated into StorageError (constraint violations flagged as such) so
callers never see raw SQLAlchemy exceptions. Writes are flushed
immediately; the caller decides when to commit.
"""

import uuid
from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import Depends
from sqlalchemy import and_, desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ecotracker.core.errors import NotFoundError, StorageError
from ecotracker.database import get_db
from ecotracker.logging_config import get_logger
from ecotracker.models.alert import Alert
from ecotracker.models.device import Device
from ecotracker.models.prediction import Prediction
from ecotracker.models.sensor_reading import SensorReading
from ecotracker.services.forecasting import PredictionCandidate
from ecotracker.services.sensor_validation import SensorPayload
from ecotracker.services.thresholds import AlertCandidate

logger = get_logger(__name__)

# Unread alerts returned to the dashboard per device
UNREAD_ALERT_LIMIT = 10

# Predictions returned per device and type (one day of hourly points)
LATEST_PREDICTION_LIMIT = 24


def normalize_mac(mac_address: str) -> str:
    """Canonical MAC form: upper case, colon separated."""
    return mac_address.strip().upper().replace("-", ":")


class SensorStorage:
    """Typed create/query/update operations over one database session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _guard(self, action: str) -> AsyncGenerator[None, None]:
        try:
            yield
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("Storage constraint violated", action=action, error=str(e.orig))
            raise StorageError(f"Constraint violated while trying to {action}", constraint=True) from e
        except (SQLAlchemyError, OSError) as e:
            await self.session.rollback()
            logger.error("Storage operation failed", action=action, error=str(e))
            raise StorageError(f"Failed to {action}") from e

    async def commit(self) -> None:
        async with self._guard("commit"):
            await self.session.commit()

    # ── Devices ──

    async def create_device(
        self,
        user_id: uuid.UUID,
        name: str,
        mac_address: str | None = None,
        ip_address: str | None = None,
        firmware: str | None = None,
    ) -> Device:
        device = Device(
            user_id=user_id,
            name=name,
            mac_address=normalize_mac(mac_address) if mac_address else None,
            ip_address=ip_address,
            firmware=firmware,
            is_online=False,
            created_at=datetime.now(UTC),
        )
        async with self._guard("create device"):
            self.session.add(device)
            await self.session.commit()
        return device

    async def list_devices(self, user_id: uuid.UUID) -> list[Device]:
        async with self._guard("list devices"):
            result = await self.session.execute(
                select(Device)
                .where(Device.user_id == user_id)
                .order_by(Device.created_at)
            )
            return list(result.scalars().all())

    async def list_online_devices(self) -> list[Device]:
        async with self._guard("list online devices"):
            result = await self.session.execute(
                select(Device).where(Device.is_online.is_(True))
            )
            return list(result.scalars().all())

    async def get_device_by_mac(self, mac_address: str) -> Device | None:
        async with self._guard("look up device"):
            result = await self.session.execute(
                select(Device).where(Device.mac_address == normalize_mac(mac_address))
            )
            return result.scalar_one_or_none()

    async def get_owned_device(self, device_id: uuid.UUID, user_id: uuid.UUID) -> Device:
        """Return the device if it exists and belongs to ``user_id``.

        Raises:
            NotFoundError: For unknown devices and devices owned by someone
                else alike.
        """
        async with self._guard("look up device"):
            result = await self.session.execute(
                select(Device).where(
                    and_(Device.id == device_id, Device.user_id == user_id)
                )
            )
            device = result.scalar_one_or_none()
        if device is None:
            raise NotFoundError("device", device_id)
        return device

    async def mark_device_seen(self, device: Device, seen_at: datetime) -> None:
        async with self._guard("update device status"):
            device.is_online = True
            device.last_seen = seen_at
            await self.session.flush()

    # ── Readings ──

    async def add_reading(
        self,
        device_id: uuid.UUID,
        payload: SensorPayload,
        timestamp: datetime,
    ) -> SensorReading:
        reading = SensorReading(
            device_id=device_id,
            temperature=payload.temperature,
            humidity=payload.humidity,
            air_quality=payload.air_quality,
            timestamp=timestamp,
        )
        async with self._guard("store reading"):
            self.session.add(reading)
            await self.session.flush()
        return reading

    async def latest_reading(self, device_id: uuid.UUID) -> SensorReading | None:
        async with self._guard("fetch latest reading"):
            result = await self.session.execute(
                select(SensorReading)
                .where(SensorReading.device_id == device_id)
                .order_by(desc(SensorReading.timestamp))
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def readings_in_range(
        self,
        device_id: uuid.UUID,
        start: datetime,
        end: datetime,
    ) -> list[SensorReading]:
        """Readings with start <= timestamp <= end, newest first."""
        async with self._guard("fetch reading history"):
            result = await self.session.execute(
                select(SensorReading)
                .where(
                    and_(
                        SensorReading.device_id == device_id,
                        SensorReading.timestamp >= start,
                        SensorReading.timestamp <= end,
                    )
                )
                .order_by(desc(SensorReading.timestamp))
            )
            return list(result.scalars().all())

    # ── Alerts ──

    async def add_alerts(self, candidates: Iterable[AlertCandidate]) -> list[Alert]:
        now = datetime.now(UTC)
        alerts = [
            Alert(
                device_id=candidate.device_id,
                metric_type=candidate.metric_type,
                severity=candidate.severity,
                title=candidate.title,
                message=candidate.message,
                value=candidate.value,
                threshold=candidate.threshold,
                is_read=False,
                created_at=now,
            )
            for candidate in candidates
        ]
        if not alerts:
            return []
        async with self._guard("store alerts"):
            self.session.add_all(alerts)
            await self.session.flush()
        return alerts

    async def unread_alerts(
        self,
        device_id: uuid.UUID,
        limit: int = UNREAD_ALERT_LIMIT,
    ) -> list[Alert]:
        async with self._guard("fetch alerts"):
            result = await self.session.execute(
                select(Alert)
                .where(and_(Alert.device_id == device_id, Alert.is_read.is_(False)))
                .order_by(desc(Alert.created_at))
                .limit(limit)
            )
            return list(result.scalars().all())

    async def mark_alert_read(self, alert_id: uuid.UUID, user_id: uuid.UUID) -> Alert:
        """Flip is_read on an alert belonging to one of the user's devices.

        Raises:
            NotFoundError: If the alert does not exist or is not the user's.
        """
        async with self._guard("mark alert read"):
            result = await self.session.execute(
                select(Alert)
                .join(Device, Device.id == Alert.device_id)
                .where(and_(Alert.id == alert_id, Device.user_id == user_id))
            )
            alert = result.scalar_one_or_none()
            if alert is not None:
                alert.is_read = True
                await self.session.commit()

        if alert is None:
            raise NotFoundError("alert", alert_id)
        return alert

    # ── Predictions ──

    async def add_predictions(
        self, candidates: Iterable[PredictionCandidate]
    ) -> list[Prediction]:
        now = datetime.now(UTC)
        predictions = [
            Prediction(
                device_id=candidate.device_id,
                prediction_type=candidate.prediction_type,
                predicted_value=candidate.predicted_value,
                confidence=candidate.confidence,
                prediction_for=candidate.prediction_for,
                model_version=candidate.model_version,
                created_at=now,
            )
            for candidate in candidates
        ]
        if not predictions:
            return []
        async with self._guard("store predictions"):
            self.session.add_all(predictions)
            await self.session.flush()
        return predictions

    async def latest_predictions(
        self,
        device_id: uuid.UUID,
        prediction_type: str,
        limit: int = LATEST_PREDICTION_LIMIT,
    ) -> list[Prediction]:
        async with self._guard("fetch predictions"):
            result = await self.session.execute(
                select(Prediction)
                .where(
                    and_(
                        Prediction.device_id == device_id,
                        Prediction.prediction_type == prediction_type,
                    )
                )
                .order_by(desc(Prediction.created_at), Prediction.prediction_for)
                .limit(limit)
            )
            return list(result.scalars().all())


async def get_storage(db: AsyncSession = Depends(get_db)) -> SensorStorage:
    """FastAPI dependency wrapping the request session."""
    return SensorStorage(db)
