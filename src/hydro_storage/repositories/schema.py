"""Idempotent schema bootstrap.

Creates the three tables with their check constraints, the recency index on
readings, and seeds one default status row and one default alert-settings
row when those tables are empty. Safe to run on every process start.
"""

import logging

from attrs import field, frozen
from beartype import beartype

from ..core.errors import StorageError
from ..core.result_types import Ok, Result
from .base import DRIVER_ERRORS, BaseRepository

logger = logging.getLogger(__name__)

READINGS_TABLE = "hydroponic_sensor_readings"
STATUS_TABLE = "hydroponic_system_status"
ALERT_SETTINGS_TABLE = "hydroponic_alert_settings"
READINGS_TIMESTAMP_INDEX = "idx_hydroponic_sensor_timestamp"

# Serialises concurrent bootstraps from several processes.
BOOTSTRAP_LOCK_KEY = 0x6879_6472_6F00

CREATE_READINGS_TABLE = f"""
    CREATE TABLE IF NOT EXISTS {READINGS_TABLE} (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        timestamp TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
        temperature DECIMAL(5,2) NOT NULL CHECK (temperature >= -50 AND temperature <= 100),
        ph DECIMAL(4,2) NOT NULL CHECK (ph >= 0 AND ph <= 14),
        tds_level DECIMAL(7,2) NOT NULL CHECK (tds_level >= 0 AND tds_level <= 5000),
        created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
    )
"""

CREATE_READINGS_INDEX = f"""
    CREATE INDEX IF NOT EXISTS {READINGS_TIMESTAMP_INDEX}
    ON {READINGS_TABLE} (timestamp DESC)
"""

CREATE_STATUS_TABLE = f"""
    CREATE TABLE IF NOT EXISTS {STATUS_TABLE} (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        connection_status VARCHAR(20) NOT NULL DEFAULT 'disconnected'
            CHECK (connection_status IN ('connected', 'disconnected', 'error')),
        last_update TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
        data_points INTEGER DEFAULT 0 CHECK (data_points >= 0),
        cpu_usage DECIMAL(5,2) DEFAULT 0 CHECK (cpu_usage >= 0 AND cpu_usage <= 100),
        memory_usage DECIMAL(5,2) DEFAULT 0 CHECK (memory_usage >= 0 AND memory_usage <= 100),
        storage_usage DECIMAL(5,2) DEFAULT 0 CHECK (storage_usage >= 0 AND storage_usage <= 100),
        uptime VARCHAR(50) DEFAULT '0s',
        updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
    )
"""

CREATE_ALERT_SETTINGS_TABLE = f"""
    CREATE TABLE IF NOT EXISTS {ALERT_SETTINGS_TABLE} (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        temperature_alerts BOOLEAN DEFAULT true,
        ph_alerts BOOLEAN DEFAULT true,
        tds_level_alerts BOOLEAN DEFAULT true,
        updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
    )
"""

SCHEMA_STATEMENTS: tuple[str, ...] = (
    CREATE_READINGS_TABLE,
    CREATE_READINGS_INDEX,
    CREATE_STATUS_TABLE,
    CREATE_ALERT_SETTINGS_TABLE,
)

SEED_STATUS = f"""
    INSERT INTO {STATUS_TABLE}
        (connection_status, data_points, cpu_usage, memory_usage, storage_usage, uptime)
    VALUES ('connected', 0, 23, 30, 26, '0s')
"""

SEED_ALERT_SETTINGS = f"""
    INSERT INTO {ALERT_SETTINGS_TABLE} (temperature_alerts, ph_alerts, tds_level_alerts)
    VALUES (true, true, false)
"""


@frozen
class BootstrapReport:
    """What a bootstrap run had to seed."""

    status_seeded: bool = field()
    alert_settings_seeded: bool = field()


class SchemaBootstrapper(BaseRepository):
    """Creates tables and default rows."""

    @beartype
    async def initialize(self) -> Result[BootstrapReport, StorageError]:
        """Ensure the schema and default singleton rows exist.

        Runs in one transaction under an advisory lock, so concurrent starts
        neither race on ``CREATE TABLE`` nor seed twice. Any failure is
        returned as ``Err``; the owning process decides whether to exit.
        """
        try:
            async with self._db.transaction() as conn:
                await conn.execute("SELECT pg_advisory_xact_lock($1)", BOOTSTRAP_LOCK_KEY)
                for statement in SCHEMA_STATEMENTS:
                    await conn.execute(statement)

                status_seeded = await self._seed_if_empty(conn, STATUS_TABLE, SEED_STATUS)
                alerts_seeded = await self._seed_if_empty(
                    conn, ALERT_SETTINGS_TABLE, SEED_ALERT_SETTINGS
                )
        except (StorageError, *DRIVER_ERRORS) as e:
            return self._failure("Initialize database tables", e)

        logger.info("Hydroponic database tables initialized")
        return Ok(
            BootstrapReport(
                status_seeded=status_seeded,
                alert_settings_seeded=alerts_seeded,
            )
        )

    async def _seed_if_empty(self, conn, table: str, seed_statement: str) -> bool:
        count = await conn.fetchval(f"SELECT COUNT(*) FROM {table}")
        if count:
            return False

        await conn.execute(seed_statement)
        logger.info("Seeded default row into %s", table)
        return True
