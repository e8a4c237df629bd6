"""System status models."""

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any

from beartype import beartype
from pydantic import Field, field_serializer, field_validator, model_validator

from .base import BaseModelConfig, format_timestamp, to_utc


class ConnectionStatus(str, Enum):
    """Link state between the dashboard and the sensor hardware."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


@beartype
class SystemStatus(BaseModelConfig):
    """Current system health snapshot (the most recently updated row)."""

    connection_status: ConnectionStatus = Field(..., description="Sensor link state")
    last_update: datetime = Field(..., description="Time of last known-good data")
    data_points: int = Field(..., ge=0, description="Readings recorded so far")
    cpu_usage: float = Field(..., ge=0, le=100, description="CPU usage percent")
    memory_usage: float = Field(..., ge=0, le=100, description="Memory usage percent")
    storage_usage: float = Field(..., ge=0, le=100, description="Storage usage percent")
    uptime: str = Field(..., max_length=50, description="Elapsed-time label")

    @field_validator("last_update")
    @classmethod
    def normalize_utc(cls, v: datetime) -> datetime:
        """Store the timestamp as aware UTC."""
        return to_utc(v)

    @field_serializer("last_update")
    def serialize_timestamp(self, v: datetime) -> str:
        """Serialise the timestamp as ISO-8601 UTC text."""
        return format_timestamp(v)


# Python attribute -> column, in the order updates are written.
STATUS_COLUMNS: Mapping[str, str] = {
    "connection_status": "connection_status",
    "last_update": "last_update",
    "data_points": "data_points",
    "cpu_usage": "cpu_usage",
    "memory_usage": "memory_usage",
    "storage_usage": "storage_usage",
    "uptime": "uptime",
}


@beartype
class SystemStatusUpdate(BaseModelConfig):
    """Sparse update for the status record.

    All fields are optional; at least one must be supplied, so an update that
    would only refresh ``updated_at`` is rejected.
    """

    connection_status: ConnectionStatus | None = Field(None)
    last_update: datetime | None = Field(None)
    data_points: int | None = Field(None, ge=0)
    cpu_usage: float | None = Field(None, ge=0, le=100)
    memory_usage: float | None = Field(None, ge=0, le=100)
    storage_usage: float | None = Field(None, ge=0, le=100)
    uptime: str | None = Field(None, min_length=1, max_length=50)

    @field_validator("last_update")
    @classmethod
    def normalize_utc(cls, v: datetime | None) -> datetime | None:
        """Store the timestamp as aware UTC."""
        return to_utc(v) if v is not None else None

    @model_validator(mode="after")
    def validate_not_empty(self) -> "SystemStatusUpdate":
        """Ensure at least one field is provided for update."""
        if not any(getattr(self, name) is not None for name in type(self).model_fields):
            raise ValueError("At least one status field must be provided for update")
        return self

    @beartype
    def changed_columns(self) -> list[tuple[str, Any]]:
        """Column/value pairs for the supplied fields, in column order."""
        pairs: list[tuple[str, Any]] = []
        for name, column in STATUS_COLUMNS.items():
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, ConnectionStatus):
                value = value.value
            pairs.append((column, value))
        return pairs
