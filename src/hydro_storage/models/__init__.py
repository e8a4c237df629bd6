"""Pydantic models for readings, status and alert settings."""

from .alert_settings import DEFAULT_ALERT_SETTINGS, AlertSettings
from .base import BaseModelConfig, format_timestamp, to_utc
from .reading import (
    MEASUREMENT_RANGES,
    PH_RANGE,
    TDS_LEVEL_RANGE,
    TEMPERATURE_RANGE,
    MeasurementRange,
    SensorReading,
    validate_measurements,
)
from .status import ConnectionStatus, SystemStatus, SystemStatusUpdate

__all__ = [
    "AlertSettings",
    "BaseModelConfig",
    "ConnectionStatus",
    "DEFAULT_ALERT_SETTINGS",
    "MEASUREMENT_RANGES",
    "MeasurementRange",
    "PH_RANGE",
    "SensorReading",
    "SystemStatus",
    "SystemStatusUpdate",
    "TDS_LEVEL_RANGE",
    "TEMPERATURE_RANGE",
    "format_timestamp",
    "to_utc",
    "validate_measurements",
]
