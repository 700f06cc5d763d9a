"""CSV export of reading history."""

import csv
import io
from collections.abc import Iterable
from datetime import datetime, timezone

from ecotracker.models.sensor_reading import SensorReading

CSV_HEADER = ("Timestamp", "Temperature (°C)", "Humidity (%)", "Air Quality")


def _cell(value: float | int | None) -> str:
    return "" if value is None else str(value)


def _iso_utc(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat()


def readings_to_csv(readings: Iterable[SensorReading]) -> str:
    """Render readings as CSV text, one row per reading in the given order.

    Missing metrics become empty cells, never 0.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for reading in readings:
        writer.writerow(
            (
                _iso_utc(reading.timestamp),
                _cell(reading.temperature),
                _cell(reading.humidity),
                _cell(reading.air_quality),
            )
        )
    return buffer.getvalue()


def export_filename(start: datetime, end: datetime) -> str:
    return f"ecotracker-data-{start:%Y%m%d}-{end:%Y%m%d}.csv"
