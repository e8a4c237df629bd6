"""Storage facade used by the API layer and the ingestion loop.

Lifecycle is explicit: ``open_storage()`` validates configuration, opens the
pool, tests the connection and bootstraps the schema, returning ``Err`` on
any failure. Nothing connects at import time and nothing here exits the
process.
"""

import logging
from collections.abc import Mapping
from datetime import datetime
from types import TracebackType
from typing import Any

from beartype import beartype

from .core.config import Settings, load_settings
from .core.database import Database
from .core.errors import StorageError
from .core.result_types import Err, Ok, Result
from .models.alert_settings import AlertSettings
from .models.reading import SensorReading
from .models.status import SystemStatus, SystemStatusUpdate
from .repositories.alert_settings import AlertSettingsRepository
from .repositories.readings import DEFAULT_RECENT_LIMIT, ReadingsRepository
from .repositories.schema import BootstrapReport, SchemaBootstrapper
from .repositories.status import StatusRepository

logger = logging.getLogger(__name__)


class HydroponicStorage:
    """Readings, system status and alert settings behind one pool."""

    def __init__(self, db: Database) -> None:
        self._db = db
        self.schema = SchemaBootstrapper(db)
        self.readings = ReadingsRepository(db)
        self.status = StatusRepository(db)
        self.alert_settings = AlertSettingsRepository(db)

    @property
    def database(self) -> Database:
        """The underlying pool manager."""
        return self._db

    async def __aenter__(self) -> "HydroponicStorage":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def initialize(self) -> Result[BootstrapReport, StorageError]:
        """Create tables and seed default rows if absent (idempotent)."""
        return await self.schema.initialize()

    # Sensor readings

    async def list_recent(
        self, limit: int = DEFAULT_RECENT_LIMIT
    ) -> Result[list[SensorReading], StorageError]:
        """Newest-first readings, at most ``limit``."""
        return await self.readings.list_recent(limit)

    async def list_by_time_range(
        self, start: datetime, end: datetime
    ) -> Result[list[SensorReading], StorageError]:
        """Oldest-first readings with ``start <= timestamp <= end``."""
        return await self.readings.list_by_time_range(start, end)

    async def create_reading(
        self,
        temperature: float,
        ph: float,
        tds_level: float,
        *,
        timestamp: datetime | None = None,
    ) -> Result[SensorReading, StorageError]:
        """Validate and store one reading."""
        return await self.readings.create(
            temperature, ph, tds_level, timestamp=timestamp
        )

    # System status

    async def get_status(self) -> Result[SystemStatus, StorageError]:
        """Current status row."""
        return await self.status.get()

    async def update_status(
        self, changes: SystemStatusUpdate | Mapping[str, Any]
    ) -> Result[SystemStatus, StorageError]:
        """Sparse update of the current status row."""
        return await self.status.update(changes)

    # Alert settings

    async def get_alert_settings(self) -> Result[AlertSettings, StorageError]:
        """Current alert settings (defaults are stored if none exist)."""
        return await self.alert_settings.get()

    async def update_alert_settings(
        self, settings: AlertSettings | Mapping[str, Any]
    ) -> Result[AlertSettings, StorageError]:
        """Replace all alert toggles."""
        return await self.alert_settings.update(settings)

    # Connection management

    async def close(self) -> None:
        """Drain and close the pool."""
        await self._db.close()


@beartype
async def open_storage(
    settings: Settings | None = None, *, initialize: bool = True
) -> Result[HydroponicStorage, StorageError]:
    """Connect, test the connection and (by default) bootstrap the schema.

    On failure the pool is closed again and the error is returned; deciding
    to exit is left to the caller.
    """
    try:
        settings = settings if settings is not None else load_settings()
    except StorageError as e:
        logger.error("Storage configuration invalid: %s", e)
        return Err(e)

    logger.info("Initializing PostgreSQL storage")
    db = Database(settings)
    try:
        await db.connect()
    except StorageError as e:
        return Err(e)

    storage = HydroponicStorage(db)
    ping = await db.ping()
    if ping.is_err():
        await storage.close()
        return Err(ping.unwrap_err())

    if initialize:
        bootstrap = await storage.initialize()
        if bootstrap.is_err():
            logger.error("Failed to initialize database: %s", bootstrap.unwrap_err())
            await storage.close()
            return Err(bootstrap.unwrap_err())

    return Ok(storage)
