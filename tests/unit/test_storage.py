"""Schema setup on StorageManager.initialize()."""

import pytest

from enb_server.storage import SCHEMA_VERSION, StorageManager
from enb_server.storage._migrate import run_migrations

pytestmark = pytest.mark.asyncio


async def _versions(storage):
    async with storage._db.execute("SELECT version FROM schema_version") as cursor:
        return [row[0] async for row in cursor]


async def test_fresh_database_records_current_version(storage):
    assert await _versions(storage) == [SCHEMA_VERSION]


async def test_rerun_is_a_no_op(storage):
    await run_migrations(storage._db)
    assert await _versions(storage) == [SCHEMA_VERSION]


async def test_tables_created(storage):
    async with storage._db.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table'"
    ) as cursor:
        tables = {row[0] async for row in cursor}
    assert {"accounts", "invitation_usage", "transactions", "schema_version"} <= tables


async def test_reopening_file_database_keeps_data(tmp_path, clock, wallet):
    path = str(tmp_path / "enb.db")
    first = StorageManager(path)
    await first.initialize()
    await first.accounts.create(wallet(1), "0x" + "ab" * 32, now=clock())
    await first.close()

    second = StorageManager(path)
    await second.initialize()
    try:
        assert await second.accounts.get(wallet(1)) is not None
        assert await _versions(second) == [SCHEMA_VERSION]
    finally:
        await second.close()
