"""Sensor reading models and range validation."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from attrs import field, frozen
from beartype import beartype
from pydantic import Field, field_serializer, field_validator

from ..core.errors import ValidationError
from .base import BaseModelConfig, format_timestamp, to_utc


@frozen
class MeasurementRange:
    """Inclusive bounds for one measurement column."""

    name: str = field()
    label: str = field()
    minimum: float = field()
    maximum: float = field()
    unit: str = field(default="")

    def contains(self, value: float) -> bool:
        """Check ``minimum <= value <= maximum``."""
        return self.minimum <= value <= self.maximum

    @beartype
    def describe(self) -> str:
        """Human readable constraint, e.g. ``pH must be between 0 and 14``."""
        suffix = f" {self.unit}" if self.unit else ""
        return (
            f"{self.label} must be between {self.minimum:g} and {self.maximum:g}{suffix}"
        )


TEMPERATURE_RANGE = MeasurementRange("temperature", "Temperature", -50, 100, "°C")
PH_RANGE = MeasurementRange("ph", "pH", 0, 14)
TDS_LEVEL_RANGE = MeasurementRange("tds_level", "TDS Level", 0, 5000, "ppm")

MEASUREMENT_RANGES: tuple[MeasurementRange, ...] = (
    TEMPERATURE_RANGE,
    PH_RANGE,
    TDS_LEVEL_RANGE,
)


def validate_measurements(
    temperature: float, ph: float, tds_level: float
) -> ValidationError | None:
    """Return the first range violation, or ``None`` when all values fit.

    NaN never satisfies a range and is rejected as well.
    """
    values = {"temperature": temperature, "ph": ph, "tds_level": tds_level}
    for bounds in MEASUREMENT_RANGES:
        value = values[bounds.name]
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            return ValidationError(
                f"{bounds.label} must be a number (got {value!r})",
                field=bounds.name,
                minimum=bounds.minimum,
                maximum=bounds.maximum,
            )
        # Ordering comparisons on a Decimal NaN raise InvalidOperation.
        non_finite = isinstance(value, Decimal) and not value.is_finite()
        if non_finite or not bounds.contains(value):
            return ValidationError(
                f"{bounds.describe()} (got {value!r})",
                field=bounds.name,
                minimum=bounds.minimum,
                maximum=bounds.maximum,
            )
    return None


@beartype
class SensorReading(BaseModelConfig):
    """One persisted sample. Immutable once created."""

    id: UUID = Field(..., description="Identifier generated at insert time")
    timestamp: datetime = Field(..., description="Time the reading belongs to")
    temperature: float = Field(
        ...,
        ge=TEMPERATURE_RANGE.minimum,
        le=TEMPERATURE_RANGE.maximum,
        description="Water temperature in °C",
    )
    ph: float = Field(..., ge=PH_RANGE.minimum, le=PH_RANGE.maximum, description="pH")
    tds_level: float = Field(
        ...,
        ge=TDS_LEVEL_RANGE.minimum,
        le=TDS_LEVEL_RANGE.maximum,
        description="Total dissolved solids in ppm",
    )
    created_at: datetime = Field(..., description="Time the row was inserted")

    @field_validator("timestamp", "created_at")
    @classmethod
    def normalize_utc(cls, v: datetime) -> datetime:
        """Store every timestamp as aware UTC."""
        return to_utc(v)

    @field_serializer("timestamp", "created_at")
    def serialize_timestamp(self, v: datetime) -> str:
        """Serialise timestamps as ISO-8601 UTC text."""
        return format_timestamp(v)
