"""Connection pool management with asyncpg.

:class:`Database` owns one bounded pool. Every storage operation borrows a
connection through :meth:`Database.acquire` (or :meth:`Database.transaction`)
and the connection is returned on every exit path, including errors.
"""

import asyncio
import contextlib
import logging
import time
from collections.abc import AsyncIterator
from datetime import datetime

import asyncpg
from attrs import field, frozen
from beartype import beartype

from .config import Settings, get_settings
from .errors import (
    ConnectionTimeout,
    PoolClosed,
    StorageConnectionError,
    StorageError,
)
from .result_types import Err, Ok, Result

logger = logging.getLogger(__name__)


@frozen
class PoolConfig:
    """Immutable pool configuration."""

    min_connections: int = field()
    max_connections: int = field()
    connect_timeout: float = field(default=2.0)
    idle_timeout: float = field(default=30.0)
    command_timeout: float | None = field(default=None)
    ssl: str | bool = field(default=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PoolConfig":
        """Derive the pool configuration from application settings."""
        return cls(
            min_connections=settings.database_pool_min,
            max_connections=settings.database_pool_max,
            connect_timeout=settings.database_connect_timeout,
            idle_timeout=settings.database_idle_timeout,
            command_timeout=settings.database_command_timeout,
            ssl=settings.ssl_mode,
        )


@frozen
class PoolStats:
    """Immutable pool statistics snapshot."""

    size: int = field()
    free_size: int = field()
    min_size: int = field()
    max_size: int = field()
    acquisitions: int = field()
    releases: int = field()
    acquire_timeouts: int = field()
    connections_terminated: int = field()


class Database:
    """Bounded connection pool with scoped acquisition.

    ``connect()`` opens the pool, ``acquire()`` hands out a connection for
    the duration of an ``async with`` block and ``close()`` drains the pool,
    waiting for borrowed connections to come back. Any ``acquire()`` after
    ``close()`` fails with :class:`PoolClosed`.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings if settings is not None else get_settings()
        self._config = PoolConfig.from_settings(self._settings)
        self._pool: asyncpg.Pool | None = None
        self._closed = False

        self._acquisitions = 0
        self._releases = 0
        self._acquire_timeouts = 0
        self._connections_terminated = 0

    @property
    def config(self) -> PoolConfig:
        """Pool configuration in effect."""
        return self._config

    @property
    def is_connected(self) -> bool:
        """Check if the pool is open."""
        return self._pool is not None and not self._closed

    async def _init_connection(self, conn: asyncpg.Connection) -> None:
        """Watch every new pooled connection for termination."""
        conn.add_termination_listener(self._on_connection_terminated)

    async def _setup_connection(self, conn: asyncpg.Connection) -> None:
        """Route server notices to the log for the duration of one borrow."""
        # The pool clears log listeners whenever a connection is released.
        conn.add_log_listener(self._on_server_message)

    def _on_connection_terminated(self, conn: asyncpg.Connection) -> None:
        # Also fires for idle eviction, so this is not a failure by itself.
        # Broken connections surface as errors on the operation using them.
        self._connections_terminated += 1
        if not self._closed:
            logger.info("Pooled database connection closed: %r", conn)

    def _on_server_message(
        self, conn: asyncpg.Connection, message: "asyncpg.PostgresLogMessage"
    ) -> None:
        logger.debug("PostgreSQL %s: %s", message.severity, message.message)

    @beartype
    async def connect(self) -> None:
        """Create the connection pool.

        Raises:
            PoolClosed: the manager was already closed.
            ConnectionTimeout: the server did not answer within the
                connect timeout.
            StorageConnectionError: any other failure establishing the pool.
        """
        if self._closed:
            raise PoolClosed("Database pool has been closed")
        if self._pool is not None:
            return

        config = self._config
        try:
            self._pool = await asyncpg.create_pool(
                self._settings.database_url,
                min_size=config.min_connections,
                max_size=config.max_connections,
                max_inactive_connection_lifetime=config.idle_timeout,
                command_timeout=config.command_timeout,
                timeout=config.connect_timeout,
                ssl=config.ssl,
                init=self._init_connection,
                setup=self._setup_connection,
            )
        except asyncio.TimeoutError as e:
            logger.error("Timed out opening database pool: %s", e)
            raise ConnectionTimeout(
                f"Could not connect within {config.connect_timeout}s", cause=e
            ) from e
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error("Failed to open database pool: %s", e)
            raise StorageConnectionError("Database connection failed", cause=e) from e

        logger.info(
            "Database pool opened (min=%d, max=%d, idle_timeout=%.0fs, connect_timeout=%.1fs)",
            config.min_connections,
            config.max_connections,
            config.idle_timeout,
            config.connect_timeout,
        )

    @contextlib.asynccontextmanager
    @beartype
    async def acquire(
        self, *, timeout: float | None = None
    ) -> AsyncIterator[asyncpg.Connection]:
        """Borrow a pooled connection for the body of an ``async with`` block.

        Waits up to ``timeout`` (default: the connect timeout) when all
        connections are busy. The connection is released exactly once when
        the block exits, whether it exits normally or by an exception.
        """
        pool = self._pool
        if pool is None or self._closed:
            raise PoolClosed("Database pool is not open")

        timeout = timeout or self._config.connect_timeout
        wait_start = time.perf_counter()
        try:
            conn = await pool.acquire(timeout=timeout)
        except asyncio.TimeoutError as e:
            self._acquire_timeouts += 1
            logger.error(
                "No database connection available after %.2fs (pool max=%d)",
                time.perf_counter() - wait_start,
                self._config.max_connections,
            )
            raise ConnectionTimeout(
                f"No database connection available within {timeout}s", cause=e
            ) from e
        except asyncpg.InterfaceError as e:
            if self._closed:
                raise PoolClosed("Database pool is closing", cause=e) from e
            logger.error("Failed to acquire database connection: %s", e)
            raise StorageConnectionError("Failed to acquire connection", cause=e) from e
        except (OSError, asyncpg.PostgresError) as e:
            logger.error("Failed to acquire database connection: %s", e)
            raise StorageConnectionError("Failed to acquire connection", cause=e) from e

        self._acquisitions += 1
        try:
            yield conn
        finally:
            await pool.release(conn)
            self._releases += 1

    @contextlib.asynccontextmanager
    @beartype
    async def transaction(
        self, *, timeout: float | None = None
    ) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection and run the block inside one transaction."""
        async with self.acquire(timeout=timeout) as conn:
            async with conn.transaction():
                yield conn

    @beartype
    async def ping(self) -> Result[datetime, StorageError]:
        """Round-trip ``SELECT NOW()`` to prove the database is reachable."""
        try:
            async with self.acquire() as conn:
                now = await conn.fetchval("SELECT NOW()")
        except StorageError as e:
            return Err(e)
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error("Database connection test failed: %s", e)
            return Err(StorageConnectionError("Database connection test failed", cause=e))

        logger.info("Database connection test succeeded")
        return Ok(now)

    @beartype
    def get_pool_stats(self) -> PoolStats:
        """Snapshot pool size and acquisition counters."""
        pool = self._pool
        return PoolStats(
            size=pool.get_size() if pool else 0,
            free_size=pool.get_idle_size() if pool else 0,
            min_size=self._config.min_connections,
            max_size=self._config.max_connections,
            acquisitions=self._acquisitions,
            releases=self._releases,
            acquire_timeouts=self._acquire_timeouts,
            connections_terminated=self._connections_terminated,
        )

    @beartype
    async def close(self) -> None:
        """Close the pool once every borrowed connection has been released."""
        if self._closed:
            return
        self._closed = True

        pool, self._pool = self._pool, None
        if pool is None:
            return

        await pool.close()
        logger.info("Database connection pool closed")
