"""Tests for the background forecast regeneration job."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest

from ecotracker.config import settings
from ecotracker.core.errors import StorageError
from ecotracker.services import scheduler as scheduler_module
from ecotracker.services.scheduler import (
    SCHEDULED_PREDICTION_TYPE,
    get_scheduler,
    regenerate_forecasts,
    start_scheduler,
    stop_scheduler,
)
from ecotracker.services.storage import SensorStorage


class TestRegenerateForecasts:
    """Tests for regenerate_forecasts."""

    @pytest.mark.asyncio
    async def test_no_online_devices(self, database, device):
        counts = await regenerate_forecasts(database)

        assert counts == {"success_count": 0, "error_count": 0}

    @pytest.mark.asyncio
    async def test_forecasts_online_device(self, database, storage, device):
        await storage.mark_device_seen(device, datetime.now(UTC))
        await storage.commit()

        counts = await regenerate_forecasts(database, horizon_hours=6)

        assert counts == {"success_count": 1, "error_count": 0}
        async with database.session() as session:
            stored = await SensorStorage(session).latest_predictions(
                device.id, SCHEDULED_PREDICTION_TYPE
            )
        assert len(stored) == 6

    @pytest.mark.asyncio
    async def test_failure_is_counted_not_raised(self, database, storage, device):
        await storage.mark_device_seen(device, datetime.now(UTC))
        await storage.commit()

        with patch(
            "ecotracker.services.scheduler.SensorPipeline.generate_forecast",
            new_callable=AsyncMock,
            side_effect=StorageError("insert predictions"),
        ):
            counts = await regenerate_forecasts(database)

        assert counts == {"success_count": 0, "error_count": 1}


class TestSchedulerLifecycle:
    """start_scheduler / stop_scheduler."""

    @pytest.mark.asyncio
    async def test_registers_regeneration_job(self, database):
        config = settings.model_copy(
            update={"forecast_schedule_enabled": True, "forecast_interval_minutes": 15}
        )
        try:
            running = start_scheduler(database, config)

            assert get_scheduler() is running
            job = running.get_job("forecast_regeneration")
            assert job is not None
            assert job.kwargs["database"] is database
            assert job.trigger.interval.total_seconds() == 15 * 60
        finally:
            stop_scheduler()

        assert get_scheduler() is None

    @pytest.mark.asyncio
    async def test_disabled_schedule_has_no_job(self, database):
        config = settings.model_copy(update={"forecast_schedule_enabled": False})
        try:
            running = start_scheduler(database, config)

            assert running.get_jobs() == []
        finally:
            stop_scheduler()

    @pytest.mark.asyncio
    async def test_second_start_returns_running_instance(self, database):
        try:
            first = start_scheduler(database, settings)
            second = start_scheduler(database, settings)

            assert first is second
            assert scheduler_module.scheduler is first
        finally:
            stop_scheduler()
