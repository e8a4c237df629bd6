"""End-to-end storage tests against a real PostgreSQL server.

Set ``TEST_DATABASE_URL`` to a disposable database to run them. The three
hydroponic tables are dropped before and after every test.
"""

import asyncio
import os
from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone

import asyncpg
import pytest

from hydro_storage import HydroponicStorage, open_storage
from hydro_storage.core.config import Settings
from hydro_storage.core.errors import PoolClosed, ValidationError
from hydro_storage.repositories.schema import (
    ALERT_SETTINGS_TABLE,
    READINGS_TABLE,
    STATUS_TABLE,
)

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not TEST_DATABASE_URL, reason="TEST_DATABASE_URL not set"
    ),
]


async def _drop_tables(url: str) -> None:
    conn = await asyncpg.connect(url)
    try:
        for table in (READINGS_TABLE, STATUS_TABLE, ALERT_SETTINGS_TABLE):
            await conn.execute(f"DROP TABLE IF EXISTS {table}")
    finally:
        await conn.close()


@pytest.fixture
async def storage() -> AsyncIterator[HydroponicStorage]:
    """Freshly bootstrapped storage on an empty schema."""
    assert TEST_DATABASE_URL is not None
    await _drop_tables(TEST_DATABASE_URL)
    settings = Settings(database_url=TEST_DATABASE_URL, database_connect_timeout=10.0)

    opened = await open_storage(settings)
    hydro = opened.unwrap()
    try:
        yield hydro
    finally:
        await hydro.close()
        await _drop_tables(TEST_DATABASE_URL)


async def test_bootstrap_seeds_defaults(storage: HydroponicStorage) -> None:
    status = (await storage.get_status()).unwrap()
    alerts = (await storage.get_alert_settings()).unwrap()

    payload = status.to_payload()
    assert payload["connectionStatus"] == "connected"
    assert payload["dataPoints"] == 0
    assert (payload["cpuUsage"], payload["memoryUsage"], payload["storageUsage"]) == (
        23.0,
        30.0,
        26.0,
    )
    assert payload["uptime"] == "0s"
    assert alerts.to_payload() == {
        "temperatureAlerts": True,
        "phAlerts": True,
        "tdsLevelAlerts": False,
    }


async def test_bootstrap_is_idempotent(storage: HydroponicStorage) -> None:
    report = (await storage.initialize()).unwrap()

    assert not report.status_seeded
    assert not report.alert_settings_seeded
    async with storage.database.acquire() as conn:
        assert await conn.fetchval(f"SELECT COUNT(*) FROM {STATUS_TABLE}") == 1
        assert await conn.fetchval(f"SELECT COUNT(*) FROM {ALERT_SETTINGS_TABLE}") == 1


async def test_create_then_list_recent(storage: HydroponicStorage) -> None:
    created = (await storage.create_reading(22.5, 6.2, 850)).unwrap()

    readings = (await storage.list_recent(1)).unwrap()

    assert readings[0].id == created.id
    assert readings[0].to_payload()["tdsLevel"] == 850.0
    assert (await storage.get_status()).unwrap().data_points == 1


async def test_invalid_reading_leaves_database_unchanged(
    storage: HydroponicStorage,
) -> None:
    result = await storage.create_reading(22, 15, 800)

    assert isinstance(result.unwrap_err(), ValidationError)
    assert (await storage.readings.count()).unwrap() == 0
    assert (await storage.get_status()).unwrap().data_points == 0


async def test_recent_and_range_ordering(storage: HydroponicStorage) -> None:
    base = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    for minutes in (0, 10, 20, 30, 40):
        result = await storage.create_reading(
            20 + minutes / 10, 6.5, 700, timestamp=base + timedelta(minutes=minutes)
        )
        result.unwrap()

    recent = (await storage.list_recent(3)).unwrap()
    window = (
        await storage.list_by_time_range(
            base + timedelta(minutes=10), base + timedelta(minutes=30)
        )
    ).unwrap()

    assert [r.timestamp for r in recent] == [
        base + timedelta(minutes=40),
        base + timedelta(minutes=30),
        base + timedelta(minutes=20),
    ]
    assert [r.timestamp for r in window] == [
        base + timedelta(minutes=10),
        base + timedelta(minutes=20),
        base + timedelta(minutes=30),
    ]


async def test_concurrent_creates_count_every_reading(
    storage: HydroponicStorage,
) -> None:
    results = await asyncio.gather(
        *(storage.create_reading(20 + i / 10, 6.5, 700 + i) for i in range(20))
    )

    assert all(result.is_ok() for result in results)
    assert (await storage.get_status()).unwrap().data_points == 20
    assert (await storage.readings.count()).unwrap() == 20


async def test_sparse_status_update(storage: HydroponicStorage) -> None:
    before = (await storage.get_status()).unwrap()

    after = (await storage.update_status({"cpuUsage": 41.5})).unwrap()

    assert after.cpu_usage == 41.5
    assert after.model_dump(exclude={"cpu_usage"}) == before.model_dump(
        exclude={"cpu_usage"}
    )


async def test_empty_status_update_rejected(storage: HydroponicStorage) -> None:
    result = await storage.update_status({})

    assert isinstance(result.unwrap_err(), ValidationError)


async def test_alert_settings_last_write_wins(storage: HydroponicStorage) -> None:
    first = {"temperatureAlerts": False, "phAlerts": False, "tdsLevelAlerts": False}
    second = {"temperatureAlerts": True, "phAlerts": False, "tdsLevelAlerts": True}

    (await storage.update_alert_settings(first)).unwrap()
    (await storage.update_alert_settings(second)).unwrap()

    assert (await storage.get_alert_settings()).unwrap().to_payload() == second
    async with storage.database.acquire() as conn:
        assert await conn.fetchval(f"SELECT COUNT(*) FROM {ALERT_SETTINGS_TABLE}") == 1


async def test_alert_settings_recreated_when_missing(
    storage: HydroponicStorage,
) -> None:
    async with storage.database.acquire() as conn:
        await conn.execute(f"DELETE FROM {ALERT_SETTINGS_TABLE}")

    settings = (await storage.get_alert_settings()).unwrap()

    assert settings.tds_level_alerts is False
    async with storage.database.acquire() as conn:
        assert await conn.fetchval(f"SELECT COUNT(*) FROM {ALERT_SETTINGS_TABLE}") == 1


async def test_operations_after_close_fail(storage: HydroponicStorage) -> None:
    await storage.close()

    result = await storage.list_recent()

    assert isinstance(result.unwrap_err(), PoolClosed)
