"""Append-only access to the sensor readings time series."""

import logging
from datetime import datetime

from beartype import beartype

from ..core.errors import StorageError, ValidationError
from ..core.result_types import Ok, Result
from ..models.base import to_utc
from ..models.reading import SensorReading, validate_measurements
from .base import DRIVER_ERRORS, BaseRepository, row_to_model, to_numeric
from .schema import READINGS_TABLE, STATUS_TABLE

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 50

READING_COLUMNS = "id, timestamp, temperature, ph, tds_level, created_at"

LOCK_CURRENT_STATUS = f"""
    SELECT id FROM {STATUS_TABLE}
    ORDER BY updated_at DESC
    LIMIT 1
    FOR UPDATE
"""

INSERT_READING = f"""
    INSERT INTO {READINGS_TABLE} (temperature, ph, tds_level, timestamp)
    VALUES ($1, $2, $3, COALESCE($4::timestamptz, NOW()))
    RETURNING {READING_COLUMNS}
"""

REFRESH_DATA_POINTS = f"""
    UPDATE {STATUS_TABLE}
    SET
        data_points = (SELECT COUNT(*) FROM {READINGS_TABLE}),
        last_update = NOW(),
        updated_at = NOW()
    WHERE id = $1
"""

SELECT_RECENT = f"""
    SELECT {READING_COLUMNS}
    FROM {READINGS_TABLE}
    ORDER BY timestamp DESC
    LIMIT $1
"""

SELECT_TIME_RANGE = f"""
    SELECT {READING_COLUMNS}
    FROM {READINGS_TABLE}
    WHERE timestamp BETWEEN $1 AND $2
    ORDER BY timestamp ASC
"""


class ReadingsRepository(BaseRepository):
    """Insert and query sensor readings."""

    async def create(
        self,
        temperature: float,
        ph: float,
        tds_level: float,
        *,
        timestamp: datetime | None = None,
    ) -> Result[SensorReading, StorageError]:
        """Insert a reading and refresh the status row's ``data_points``.

        Values are range-checked before any statement is issued. The insert
        and the status refresh share one transaction; the status row is
        locked first, so concurrent inserts refresh the count one at a time
        and the last refresh always sees every committed reading.
        """
        invalid = validate_measurements(temperature, ph, tds_level)
        if invalid is not None:
            return self._failure("Create sensor reading", invalid)

        try:
            async with self._db.transaction() as conn:
                status_id = await conn.fetchval(LOCK_CURRENT_STATUS)
                row = await conn.fetchrow(
                    INSERT_READING,
                    to_numeric(temperature),
                    to_numeric(ph),
                    to_numeric(tds_level),
                    to_utc(timestamp) if timestamp is not None else None,
                )
                if status_id is None:
                    logger.warning(
                        "No system status row; data point count not refreshed"
                    )
                else:
                    await conn.execute(REFRESH_DATA_POINTS, status_id)
            reading = row_to_model(SensorReading, row)
        except (StorageError, *DRIVER_ERRORS) as e:
            return self._failure("Create sensor reading", e)

        logger.debug("Stored sensor reading %s", reading.id)
        return Ok(reading)

    @beartype
    async def list_recent(
        self, limit: int = DEFAULT_RECENT_LIMIT
    ) -> Result[list[SensorReading], StorageError]:
        """Return at most ``limit`` readings, newest first."""
        if limit < 1:
            return self._failure(
                "Fetch sensor readings",
                ValidationError(
                    f"limit must be a positive integer (got {limit})", field="limit"
                ),
            )

        try:
            async with self._db.acquire() as conn:
                rows = await conn.fetch(SELECT_RECENT, limit)
            readings = [row_to_model(SensorReading, row) for row in rows]
        except (StorageError, *DRIVER_ERRORS) as e:
            return self._failure("Fetch sensor readings", e)

        return Ok(readings)

    @beartype
    async def list_by_time_range(
        self, start: datetime, end: datetime
    ) -> Result[list[SensorReading], StorageError]:
        """Return readings with ``start <= timestamp <= end``, oldest first.

        Naive datetimes are taken as UTC. The result is unbounded.
        """
        start, end = to_utc(start), to_utc(end)
        if start > end:
            return self._failure(
                "Fetch sensor readings by time range",
                ValidationError(
                    f"start ({start.isoformat()}) must not be after end ({end.isoformat()})",
                    field="start",
                ),
            )

        try:
            async with self._db.acquire() as conn:
                rows = await conn.fetch(SELECT_TIME_RANGE, start, end)
            readings = [row_to_model(SensorReading, row) for row in rows]
        except (StorageError, *DRIVER_ERRORS) as e:
            return self._failure("Fetch sensor readings by time range", e)

        return Ok(readings)

    @beartype
    async def count(self) -> Result[int, StorageError]:
        """Total number of stored readings."""
        try:
            async with self._db.acquire() as conn:
                total = await conn.fetchval(f"SELECT COUNT(*) FROM {READINGS_TABLE}")
        except (StorageError, *DRIVER_ERRORS) as e:
            return self._failure("Count sensor readings", e)

        return Ok(int(total))


__all__ = ["DEFAULT_RECENT_LIMIT", "ReadingsRepository"]
