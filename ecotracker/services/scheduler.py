"""Background job scheduler.

APScheduler-based periodic forecast regeneration for online devices.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ecotracker.config import Settings
from ecotracker.core.errors import StorageError
from ecotracker.database import Database
from ecotracker.logging_config import get_logger
from ecotracker.services.pipeline import SensorPipeline
from ecotracker.services.storage import SensorStorage

logger = get_logger(__name__)

SCHEDULED_PREDICTION_TYPE = "air_quality"

# Global scheduler instance
scheduler: AsyncIOScheduler | None = None


async def regenerate_forecasts(
    database: Database,
    horizon_hours: int = 24,
    history_days: int = 7,
) -> dict[str, int]:
    """Regenerate the air quality forecast for every online device.

    Each device gets its own session so one failure does not abort the
    rest of the run.

    Returns:
        Success and error counts for the run.
    """
    logger.info("Starting scheduled forecast regeneration")

    async with database.session() as db:
        devices = await SensorStorage(db).list_online_devices()

    if not devices:
        logger.info("No online devices to forecast")
        return {"success_count": 0, "error_count": 0}

    success_count = 0
    error_count = 0

    for device in devices:
        try:
            async with database.session() as device_db:
                pipeline = SensorPipeline(SensorStorage(device_db))
                await pipeline.generate_forecast(
                    device.id,
                    SCHEDULED_PREDICTION_TYPE,
                    horizon_hours=horizon_hours,
                    history_days=history_days,
                )
                success_count += 1

        except StorageError as e:
            logger.warning(
                "Scheduled forecast failed for device",
                device_id=str(device.id),
                error=str(e),
            )
            error_count += 1

        except Exception as e:
            logger.error(
                "Unexpected error in scheduled forecast",
                device_id=str(device.id),
                error=str(e),
            )
            error_count += 1

    logger.info(
        "Scheduled forecast regeneration completed",
        success_count=success_count,
        error_count=error_count,
    )
    return {"success_count": success_count, "error_count": error_count}


def start_scheduler(database: Database, settings: Settings) -> AsyncIOScheduler:
    """Start the background job scheduler.

    Returns:
        The started scheduler instance
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already running")
        return scheduler

    scheduler = AsyncIOScheduler()

    if settings.forecast_schedule_enabled:
        scheduler.add_job(
            regenerate_forecasts,
            trigger=IntervalTrigger(minutes=settings.forecast_interval_minutes),
            kwargs={
                "database": database,
                "horizon_hours": settings.forecast_horizon_hours,
                "history_days": settings.forecast_history_days,
            },
            id="forecast_regeneration",
            name="Air Quality Forecast Regeneration",
            replace_existing=True,
            max_instances=1,
        )
        logger.info(
            "Scheduled forecast regeneration job",
            interval_minutes=settings.forecast_interval_minutes,
        )

    scheduler.start()
    logger.info("Background scheduler started")

    return scheduler


def stop_scheduler() -> None:
    """Stop the background job scheduler."""
    global scheduler

    if scheduler is not None:
        scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("Background scheduler stopped")


def get_scheduler() -> AsyncIOScheduler | None:
    return scheduler
