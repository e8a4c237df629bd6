#!/usr/bin/env python3
"""Initialize the hydroponic monitoring database.

This script:
1. Loads configuration (``DATABASE_URL`` from the environment or ``.env``)
2. Opens the connection pool and tests the connection
3. Creates missing tables and seeds the default status / alert rows

Exits with status 1 on any failure; safe to run on every deploy.
"""

import asyncio
import sys

from beartype import beartype
from dotenv import load_dotenv

from hydro_storage.core.config import load_settings
from hydro_storage.core.errors import ConfigurationError
from hydro_storage.core.logging_utils import configure_from_settings, get_logger
from hydro_storage.storage import open_storage


@beartype
async def main() -> int:
    """Bootstrap the schema and report what was seeded."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        get_logger("hydro_storage.scripts.init_db").error("%s", e)
        return 1

    configure_from_settings(settings)
    logger = get_logger("hydro_storage.scripts.init_db")

    result = await open_storage(settings, initialize=False)
    if result.is_err():
        logger.error("Failed to connect to database: %s", result.unwrap_err())
        return 1

    async with result.unwrap() as storage:
        bootstrap = await storage.initialize()
        if bootstrap.is_err():
            logger.error("Failed to initialize database: %s", bootstrap.unwrap_err())
            return 1

        report = bootstrap.unwrap()
        logger.info(
            "Schema ready (status seeded: %s, alert settings seeded: %s)",
            report.status_seeded,
            report.alert_settings_seeded,
        )
    return 0


if __name__ == "__main__":
    load_dotenv()
    sys.exit(asyncio.run(main()))
