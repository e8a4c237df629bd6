"""Unit tests for the storage models and measurement ranges."""

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError as PydanticValidationError

from hydro_storage.core.errors import ValidationError
from hydro_storage.models import (
    DEFAULT_ALERT_SETTINGS,
    AlertSettings,
    ConnectionStatus,
    SensorReading,
    SystemStatus,
    SystemStatusUpdate,
)
from hydro_storage.models.base import format_timestamp, to_utc
from hydro_storage.models.reading import (
    PH_RANGE,
    TEMPERATURE_RANGE,
    validate_measurements,
)


class TestTimestamps:
    """UTC normalisation and ISO rendering."""

    def test_naive_datetime_is_taken_as_utc(self) -> None:
        naive = datetime(2024, 5, 1, 12, 30)
        assert to_utc(naive) == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    def test_offset_datetime_is_converted(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        value = datetime(2024, 5, 1, 14, 30, tzinfo=plus_two)
        assert to_utc(value) == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    def test_format_timestamp_uses_z_suffix(self) -> None:
        value = datetime(2024, 5, 1, 12, 30, 5, 123456, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2024-05-01T12:30:05.123Z"


class TestMeasurementRanges:
    """Inclusive range checks applied before any insert."""

    @pytest.mark.parametrize(
        ("temperature", "ph", "tds_level"),
        [(-50, 0, 0), (100, 14, 5000), (22.5, 6.2, 850)],
    )
    def test_values_inside_ranges_pass(
        self, temperature: float, ph: float, tds_level: float
    ) -> None:
        assert validate_measurements(temperature, ph, tds_level) is None

    def test_temperature_above_range(self) -> None:
        error = validate_measurements(150, 7, 800)

        assert isinstance(error, ValidationError)
        assert error.field == "temperature"
        assert error.minimum == -50
        assert error.maximum == 100
        assert "Temperature must be between -50 and 100" in str(error)

    def test_ph_below_range(self) -> None:
        error = validate_measurements(22, -0.1, 800)

        assert error is not None
        assert error.field == "ph"
        assert "pH must be between 0 and 14" in str(error)

    def test_tds_above_range(self) -> None:
        error = validate_measurements(22, 7, 5000.01)

        assert error is not None
        assert error.field == "tds_level"

    def test_first_violation_in_column_order(self) -> None:
        error = validate_measurements(200, 20, 9000)

        assert error is not None
        assert error.field == "temperature"

    def test_nan_is_rejected(self) -> None:
        error = validate_measurements(22, math.nan, 800)

        assert error is not None
        assert error.field == "ph"

    @pytest.mark.parametrize("bad", [Decimal("NaN"), Decimal("sNaN"), Decimal("-Infinity")])
    def test_non_finite_decimal_is_rejected(self, bad: Decimal) -> None:
        error = validate_measurements(22, 7, bad)

        assert isinstance(error, ValidationError)
        assert error.field == "tds_level"
        assert "TDS Level must be between 0 and 5000 ppm" in str(error)

    @pytest.mark.parametrize("bad", [True, "7", None])
    def test_non_numbers_are_rejected(self, bad: object) -> None:
        error = validate_measurements(22, bad, 800)  # type: ignore[arg-type]

        assert error is not None
        assert error.field == "ph"
        assert "must be a number" in str(error)

    def test_describe(self) -> None:
        assert PH_RANGE.describe() == "pH must be between 0 and 14"
        assert TEMPERATURE_RANGE.describe() == "Temperature must be between -50 and 100 °C"
        assert TEMPERATURE_RANGE.contains(-50)
        assert not TEMPERATURE_RANGE.contains(100.5)


class TestSensorReading:
    """Persisted reading model."""

    def test_payload_is_camel_case_with_iso_timestamps(self) -> None:
        reading_id = uuid4()
        stamp = datetime(2024, 5, 1, 12, 30)
        reading = SensorReading(
            id=reading_id,
            timestamp=stamp,
            temperature=22.5,
            ph=6.2,
            tds_level=850,
            created_at=stamp,
        )

        payload = reading.to_payload()

        assert payload == {
            "id": str(reading_id),
            "timestamp": "2024-05-01T12:30:00.000Z",
            "temperature": 22.5,
            "ph": 6.2,
            "tdsLevel": 850.0,
            "createdAt": "2024-05-01T12:30:00.000Z",
        }
        assert reading.timestamp.tzinfo is not None

    def test_reading_is_immutable(self) -> None:
        stamp = datetime(2024, 5, 1, tzinfo=timezone.utc)
        reading = SensorReading(
            id=uuid4(),
            timestamp=stamp,
            temperature=22.5,
            ph=6.2,
            tds_level=850,
            created_at=stamp,
        )

        with pytest.raises(PydanticValidationError):
            reading.ph = 7.0  # type: ignore[misc]


class TestSystemStatus:
    """Status snapshot and sparse updates."""

    def test_status_payload(self, status_row: dict) -> None:
        status = SystemStatus.model_validate(status_row)

        payload = status.to_payload()

        assert payload["connectionStatus"] == "connected"
        assert payload["dataPoints"] == 0
        assert payload["cpuUsage"] == 23.0
        assert payload["uptime"] == "0s"
        assert payload["lastUpdate"].endswith("Z")

    def test_unknown_connection_status_rejected(self, status_row: dict) -> None:
        with pytest.raises(PydanticValidationError):
            SystemStatus.model_validate({**status_row, "connection_status": "lost"})

    def test_empty_update_rejected(self) -> None:
        with pytest.raises(PydanticValidationError, match="At least one status field"):
            SystemStatusUpdate()

    def test_update_accepts_camel_case_keys(self) -> None:
        update = SystemStatusUpdate.model_validate({"cpuUsage": 41.5})
        assert update.changed_columns() == [("cpu_usage", 41.5)]

    def test_update_rejects_out_of_range_percentage(self) -> None:
        with pytest.raises(PydanticValidationError):
            SystemStatusUpdate(memory_usage=120)

    def test_changed_columns_keep_column_order(self) -> None:
        update = SystemStatusUpdate(
            uptime="2h 5m",
            connection_status=ConnectionStatus.ERROR,
            data_points=12,
        )

        assert update.changed_columns() == [
            ("connection_status", "error"),
            ("data_points", 12),
            ("uptime", "2h 5m"),
        ]


class TestAlertSettings:
    """Alert toggles."""

    def test_defaults(self) -> None:
        assert DEFAULT_ALERT_SETTINGS.to_payload() == {
            "temperatureAlerts": True,
            "phAlerts": True,
            "tdsLevelAlerts": False,
        }

    def test_all_fields_required(self) -> None:
        with pytest.raises(PydanticValidationError):
            AlertSettings.model_validate({"temperatureAlerts": True, "phAlerts": False})

    @pytest.mark.parametrize("bad", [1, "yes", None])
    def test_non_booleans_rejected(self, bad: object) -> None:
        with pytest.raises(PydanticValidationError):
            AlertSettings(temperature_alerts=bad, ph_alerts=True, tds_level_alerts=True)
