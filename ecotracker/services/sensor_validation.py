"""Sensor payload validation.

Parses the untyped JSON body an ESP8266 posts and bounds-checks each metric
against what the sensors can physically report. Validation never raises
across the service boundary: ``validate_reading`` returns a tagged
``ValidationResult`` and callers decide how to surface the error.
"""

from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, Strict
from pydantic import ValidationError as PydanticValidationError

from ecotracker.core.errors import SensorValidationError

# Physical plausibility ranges (DHT11/DHT22 + MQ-135 class sensors)
TEMPERATURE_RANGE = (-40.0, 80.0)
HUMIDITY_RANGE = (0.0, 100.0)
AIR_QUALITY_RANGE = (0, 1000)

# Canonical (wire) name for each model field, used in error reports
_FIELD_NAMES = {
    "temperature": "temperature",
    "humidity": "humidity",
    "air_quality": "airQuality",
    "airQuality": "airQuality",
}


class SensorPayload(BaseModel):
    """A validated reading as sent by a device.

    Any metric may be None when the corresponding sensor failed; None is
    never coerced to zero.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    temperature: (
        Annotated[
            float,
            Strict(),
            Field(ge=TEMPERATURE_RANGE[0], le=TEMPERATURE_RANGE[1]),
        ]
        | None
    ) = None
    humidity: (
        Annotated[
            float,
            Strict(),
            Field(ge=HUMIDITY_RANGE[0], le=HUMIDITY_RANGE[1]),
        ]
        | None
    ) = None
    air_quality: (
        Annotated[
            int,
            Strict(),
            Field(ge=AIR_QUALITY_RANGE[0], le=AIR_QUALITY_RANGE[1]),
        ]
        | None
    ) = Field(default=None, alias="airQuality")

    def as_dict(self) -> dict[str, float | int | None]:
        """Wire representation used in fan-out messages."""
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "airQuality": self.air_quality,
        }


@dataclass(frozen=True)
class ValidationResult:
    """Either a validated payload or the first validation error."""

    payload: SensorPayload | None = None
    error: SensorValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _first_error(exc: PydanticValidationError) -> SensorValidationError:
    error = exc.errors()[0]
    loc = error.get("loc") or ("body",)
    field = _FIELD_NAMES.get(str(loc[0]), str(loc[0]))
    return SensorValidationError(field=field, reason=error.get("msg", "invalid value"))


def validate_reading(raw: Any) -> ValidationResult:
    """Validate an untyped sensor payload.

    Args:
        raw: JSON-decoded request body.

    Returns:
        ValidationResult carrying either the SensorPayload or a
        SensorValidationError naming the offending field.
    """
    if not isinstance(raw, dict):
        return ValidationResult(
            error=SensorValidationError(
                field="body",
                reason="Sensor payload must be a JSON object",
            )
        )

    try:
        payload = SensorPayload.model_validate(raw)
    except PydanticValidationError as exc:
        return ValidationResult(error=_first_error(exc))

    return ValidationResult(payload=payload)


def require_valid_reading(raw: Any) -> SensorPayload:
    """Raising form of validate_reading for HTTP boundaries.

    Raises:
        SensorValidationError: If any present field is wrong-typed or out of range.
    """
    result = validate_reading(raw)
    if result.error is not None:
        raise result.error
    return result.payload
