#!/usr/bin/env python3
"""Database connectivity check utility.

Opens a pool without touching the schema, runs ``SELECT NOW()`` and prints
the pool statistics plus the current status row when one exists.
"""

import asyncio
import sys
import time

from beartype import beartype
from dotenv import load_dotenv

from hydro_storage.core.config import load_settings
from hydro_storage.core.errors import ConfigurationError
from hydro_storage.core.logging_utils import configure_from_settings, get_logger
from hydro_storage.storage import open_storage


@beartype
async def check_database_connection() -> int:
    """Check database connectivity and log detailed results."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        get_logger("hydro_storage.scripts.check_db").error("❌ %s", e)
        return 1

    configure_from_settings(settings)
    logger = get_logger("hydro_storage.scripts.check_db")

    start_time = time.perf_counter()
    result = await open_storage(settings, initialize=False)
    if result.is_err():
        logger.error("❌ Database connection failed: %s", result.unwrap_err())
        return 1

    async with result.unwrap() as storage:
        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.info("✅ Connected in %.1fms", latency_ms)

        stats = storage.database.get_pool_stats()
        logger.info(
            "Pool: size=%d idle=%d max=%d", stats.size, stats.free_size, stats.max_size
        )

        status = (await storage.get_status()).map(lambda s: s.to_payload())
        if status.is_ok():
            logger.info("Current status: %s", status.unwrap())
        else:
            logger.warning("No status available: %s", status.unwrap_err())
    return 0


if __name__ == "__main__":
    load_dotenv()
    sys.exit(asyncio.run(check_database_connection()))
