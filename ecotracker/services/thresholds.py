"""Threshold alert evaluation.

Compares each metric of a reading against fixed bands and returns alert
candidates. Pure: nothing here touches the database. The ingestion
pipeline persists the candidates (always unread).

Bands per metric are checked critical first, then high, then low, so a
metric yields at most one alert. All comparisons are strict: a value
sitting exactly on a boundary does not fire.
"""

import uuid
from dataclasses import dataclass
from typing import Protocol

from ecotracker.models.alert import AlertSeverity, MetricType

# Air quality index cut points for status / colour classification
AQI_GOOD = 100
AQI_MODERATE = 150
AQI_UNHEALTHY = 200


@dataclass(frozen=True)
class Band:
    """One alerting band: fires when the value is beyond ``threshold``."""

    severity: AlertSeverity
    threshold: float
    above: bool  # True: value > threshold, False: value < threshold
    title: str
    message: str  # format string with {value} and {threshold}

    def crossed(self, value: float) -> bool:
        if self.above:
            return value > self.threshold
        return value < self.threshold


@dataclass(frozen=True)
class MetricBands:
    """Ordered bands for a metric; the first crossed band wins."""

    metric: MetricType
    attribute: str
    bands: tuple[Band, ...]


TEMPERATURE_BANDS = MetricBands(
    metric=MetricType.TEMPERATURE,
    attribute="temperature",
    bands=(
        Band(
            severity=AlertSeverity.CRITICAL,
            threshold=35,
            above=True,
            title="Critical Temperature Alert",
            message=(
                "Temperature reached {value}°C, exceeding critical "
                "threshold of {threshold}°C"
            ),
        ),
        Band(
            severity=AlertSeverity.WARNING,
            threshold=28,
            above=True,
            title="High Temperature Alert",
            message=(
                "Temperature reached {value}°C, above maximum "
                "threshold of {threshold}°C"
            ),
        ),
        Band(
            severity=AlertSeverity.WARNING,
            threshold=18,
            above=False,
            title="Low Temperature Alert",
            message=(
                "Temperature dropped to {value}°C, below minimum "
                "threshold of {threshold}°C"
            ),
        ),
    ),
)

HUMIDITY_BANDS = MetricBands(
    metric=MetricType.HUMIDITY,
    attribute="humidity",
    bands=(
        Band(
            severity=AlertSeverity.CRITICAL,
            threshold=90,
            above=True,
            title="Critical Humidity Alert",
            message=(
                "Humidity reached {value}%, exceeding critical "
                "threshold of {threshold}%"
            ),
        ),
        Band(
            severity=AlertSeverity.WARNING,
            threshold=80,
            above=True,
            title="High Humidity Alert",
            message="Humidity reached {value}%, above maximum threshold of {threshold}%",
        ),
        Band(
            severity=AlertSeverity.INFO,
            threshold=40,
            above=False,
            title="Low Humidity Alert",
            message="Humidity dropped to {value}%, below minimum threshold of {threshold}%",
        ),
    ),
)

AIR_QUALITY_BANDS = MetricBands(
    metric=MetricType.AIR_QUALITY,
    attribute="air_quality",
    bands=(
        Band(
            severity=AlertSeverity.CRITICAL,
            threshold=AQI_UNHEALTHY,
            above=True,
            title="Unhealthy Air Quality",
            message=(
                "Air quality index reached {value}, indicating unhealthy "
                "air conditions"
            ),
        ),
        Band(
            severity=AlertSeverity.WARNING,
            threshold=AQI_MODERATE,
            above=True,
            title="Moderate Air Quality",
            message="Air quality index is {value}, indicating moderate air quality",
        ),
    ),
)

METRIC_BANDS = (TEMPERATURE_BANDS, HUMIDITY_BANDS, AIR_QUALITY_BANDS)


class MetricReading(Protocol):
    """Anything exposing the three (optional) sensor metrics."""

    temperature: float | None
    humidity: float | None
    air_quality: int | None


@dataclass
class AlertCandidate:
    """An alert before it is persisted."""

    device_id: uuid.UUID
    metric_type: MetricType
    severity: AlertSeverity
    title: str
    message: str
    value: float
    threshold: float


def _format_number(value: float) -> str:
    # 36.0 -> "36", 35.123456 -> "35.123456"
    if float(value).is_integer():
        return str(int(value))
    return repr(value)


def evaluate_metric(
    device_id: uuid.UUID,
    metric_bands: MetricBands,
    value: float | None,
) -> AlertCandidate | None:
    """Return the alert for the first band ``value`` crosses, if any."""
    if value is None:
        return None

    for band in metric_bands.bands:
        if band.crossed(value):
            return AlertCandidate(
                device_id=device_id,
                metric_type=metric_bands.metric,
                severity=band.severity,
                title=band.title,
                message=band.message.format(
                    value=_format_number(value),
                    threshold=_format_number(band.threshold),
                ),
                value=value,
                threshold=band.threshold,
            )
    return None


def evaluate_thresholds(
    device_id: uuid.UUID,
    reading: MetricReading,
) -> list[AlertCandidate]:
    """Evaluate every metric of a reading against the fixed bands.

    Args:
        device_id: Device the reading came from.
        reading: Validated reading; metrics may individually be None.

    Returns:
        Zero to three AlertCandidate objects, in temperature, humidity,
        air quality order.
    """
    candidates: list[AlertCandidate] = []
    for metric_bands in METRIC_BANDS:
        value = getattr(reading, metric_bands.attribute)
        candidate = evaluate_metric(device_id, metric_bands, value)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def air_quality_status(aqi: int) -> str:
    """Convert an air quality index to a human-readable status."""
    if aqi <= AQI_GOOD:
        return "Good"
    if aqi <= AQI_MODERATE:
        return "Moderate"
    if aqi <= AQI_UNHEALTHY:
        return "Unhealthy for Sensitive Groups"
    return "Unhealthy"


def air_quality_color(aqi: int) -> str:
    """Dashboard colour for an air quality index."""
    if aqi <= AQI_GOOD:
        return "green"
    if aqi <= AQI_MODERATE:
        return "yellow"
    if aqi <= AQI_UNHEALTHY:
        return "orange"
    return "red"
