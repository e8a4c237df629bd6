"""The system status record: a logical singleton with sparse updates."""

import logging
from collections.abc import Mapping
from typing import Any

from beartype import beartype
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import NotFoundError, StorageError
from ..core.result_types import Ok, Result
from ..models.status import SystemStatus, SystemStatusUpdate
from .base import (
    DRIVER_ERRORS,
    BaseRepository,
    row_to_model,
    to_numeric,
    validation_error_from_pydantic,
)
from .schema import STATUS_TABLE

logger = logging.getLogger(__name__)

STATUS_COLUMNS_SQL = (
    "connection_status, last_update, data_points, "
    "cpu_usage, memory_usage, storage_usage, uptime"
)

SELECT_CURRENT_STATUS = f"""
    SELECT {STATUS_COLUMNS_SQL}
    FROM {STATUS_TABLE}
    ORDER BY updated_at DESC
    LIMIT 1
"""

LOCK_CURRENT_STATUS_ID = f"""
    SELECT id FROM {STATUS_TABLE}
    ORDER BY updated_at DESC
    LIMIT 1
    FOR UPDATE
"""


@beartype
def build_status_update(changes: SystemStatusUpdate) -> tuple[str, list[Any]]:
    """Build the ``UPDATE`` for the supplied fields.

    Only the fields present in ``changes`` are assigned, ``updated_at`` is
    always touched, and the target row id is bound as the last parameter.
    Column names come from a fixed mapping, never from caller input.

    Returns:
        The statement and its positional arguments, without the row id.
    """
    assignments: list[str] = []
    values: list[Any] = []
    for index, (column, value) in enumerate(changes.changed_columns(), start=1):
        assignments.append(f"{column} = ${index}")
        values.append(to_numeric(value))

    assignments.append("updated_at = NOW()")
    query = f"""
        UPDATE {STATUS_TABLE}
        SET {", ".join(assignments)}
        WHERE id = ${len(values) + 1}
        RETURNING {STATUS_COLUMNS_SQL}
    """
    return query, values


class StatusRepository(BaseRepository):
    """Read and partially update the current status row."""

    @beartype
    async def get(self) -> Result[SystemStatus, StorageError]:
        """Return the most recently updated status row."""
        try:
            async with self._db.acquire() as conn:
                row = await conn.fetchrow(SELECT_CURRENT_STATUS)
            if row is None:
                raise NotFoundError("No system status found in database")
            status = row_to_model(SystemStatus, row)
        except (StorageError, *DRIVER_ERRORS) as e:
            return self._failure("Fetch system status", e)

        return Ok(status)

    @beartype
    async def update(
        self, changes: SystemStatusUpdate | Mapping[str, Any]
    ) -> Result[SystemStatus, StorageError]:
        """Apply a sparse update to the current status row.

        ``changes`` may be a :class:`SystemStatusUpdate` or a mapping using
        either snake_case or camelCase keys. An empty update is rejected with
        ``ValidationError`` before any statement runs; a missing status row
        yields ``NotFoundError``. The row lookup and the update run in one
        transaction holding the row lock.
        """
        if not isinstance(changes, SystemStatusUpdate):
            try:
                changes = SystemStatusUpdate.model_validate(dict(changes))
            except PydanticValidationError as e:
                return self._failure(
                    "Update system status",
                    validation_error_from_pydantic(e, "Invalid system status update"),
                )

        query, values = build_status_update(changes)
        try:
            async with self._db.transaction() as conn:
                status_id = await conn.fetchval(LOCK_CURRENT_STATUS_ID)
                if status_id is None:
                    raise NotFoundError("No system status found in database")
                row = await conn.fetchrow(query, *values, status_id)
            status = row_to_model(SystemStatus, row)
        except (StorageError, *DRIVER_ERRORS) as e:
            return self._failure("Update system status", e)

        logger.debug(
            "Updated system status fields: %s",
            ", ".join(column for column, _ in changes.changed_columns()),
        )
        return Ok(status)
