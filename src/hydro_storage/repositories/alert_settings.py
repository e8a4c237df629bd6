"""Alert toggles: a logical singleton replaced as a whole."""

import logging
from collections.abc import Mapping
from typing import Any

from beartype import beartype
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import PersistenceError, StorageError
from ..core.result_types import Ok, Result
from ..models.alert_settings import DEFAULT_ALERT_SETTINGS, AlertSettings
from .base import (
    DRIVER_ERRORS,
    BaseRepository,
    row_to_model,
    validation_error_from_pydantic,
)
from .schema import ALERT_SETTINGS_TABLE

logger = logging.getLogger(__name__)

ALERT_COLUMNS_SQL = "temperature_alerts, ph_alerts, tds_level_alerts"

SELECT_CURRENT_SETTINGS = f"""
    SELECT {ALERT_COLUMNS_SQL}
    FROM {ALERT_SETTINGS_TABLE}
    ORDER BY updated_at DESC
    LIMIT 1
"""

# Blocks concurrent upserts (but not readers) until commit, so an empty
# table is seeded once.
LOCK_SETTINGS_TABLE = f"LOCK TABLE {ALERT_SETTINGS_TABLE} IN SHARE ROW EXCLUSIVE MODE"

UPDATE_CURRENT_SETTINGS = f"""
    UPDATE {ALERT_SETTINGS_TABLE}
    SET
        temperature_alerts = $1,
        ph_alerts = $2,
        tds_level_alerts = $3,
        updated_at = NOW()
    WHERE id IN (
        SELECT id FROM {ALERT_SETTINGS_TABLE} ORDER BY updated_at DESC LIMIT 1
    )
    RETURNING {ALERT_COLUMNS_SQL}
"""

INSERT_SETTINGS = f"""
    INSERT INTO {ALERT_SETTINGS_TABLE} (temperature_alerts, ph_alerts, tds_level_alerts)
    VALUES ($1, $2, $3)
    RETURNING {ALERT_COLUMNS_SQL}
"""


def _settings_args(settings: AlertSettings) -> tuple[bool, bool, bool]:
    return settings.temperature_alerts, settings.ph_alerts, settings.tds_level_alerts


class AlertSettingsRepository(BaseRepository):
    """Read and replace the current alert settings."""

    @beartype
    async def get(self) -> Result[AlertSettings, StorageError]:
        """Return the current settings, persisting the defaults if none exist."""
        try:
            async with self._db.transaction() as conn:
                row = await conn.fetchrow(SELECT_CURRENT_SETTINGS)
                if row is None:
                    await conn.execute(LOCK_SETTINGS_TABLE)
                    row = await conn.fetchrow(SELECT_CURRENT_SETTINGS)
                if row is None:
                    row = await conn.fetchrow(
                        INSERT_SETTINGS, *_settings_args(DEFAULT_ALERT_SETTINGS)
                    )
                    logger.info("Alert settings table was empty; stored defaults")
            settings = row_to_model(AlertSettings, row)
        except (StorageError, *DRIVER_ERRORS) as e:
            return self._failure("Fetch alert settings", e)

        return Ok(settings)

    @beartype
    async def update(
        self, settings: AlertSettings | Mapping[str, Any]
    ) -> Result[AlertSettings, StorageError]:
        """Replace all three toggles on the current row, or insert one if absent."""
        if not isinstance(settings, AlertSettings):
            try:
                settings = AlertSettings.model_validate(dict(settings))
            except PydanticValidationError as e:
                return self._failure(
                    "Update alert settings",
                    validation_error_from_pydantic(e, "Invalid alert settings"),
                )

        args = _settings_args(settings)
        try:
            async with self._db.transaction() as conn:
                await conn.execute(LOCK_SETTINGS_TABLE)
                row = await conn.fetchrow(UPDATE_CURRENT_SETTINGS, *args)
                if row is None:
                    row = await conn.fetchrow(INSERT_SETTINGS, *args)
                    logger.info("No alert settings row to update; inserted one")
            if row is None:
                raise PersistenceError("Alert settings write returned no row")
            stored = row_to_model(AlertSettings, row)
        except (StorageError, *DRIVER_ERRORS) as e:
            return self._failure("Update alert settings", e)

        return Ok(stored)
