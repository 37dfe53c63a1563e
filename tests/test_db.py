"""Tests for database module edge cases."""

import os
from datetime import datetime, timezone

import pytest

from sdp_server.models.command import CommandRecord
from sdp_server.utils.db import Database


@pytest.mark.asyncio
async def test_close_when_not_initialized() -> None:
    """Database.close is a no-op when the engine is None."""
    await Database.close()


@pytest.mark.asyncio
async def test_get_pool_requires_init() -> None:
    """get_pool before init fails loudly."""
    await Database.close()
    with pytest.raises(AssertionError):
        Database.get_pool()


@pytest.mark.asyncio
async def test_get_pool_yields_connection() -> None:
    """Pool creates a working database connection."""
    Database.init("sqlite+aiosqlite://")
    await Database.create_tables()
    pool = Database.get_pool()
    async with pool() as db:
        assert db is not None
    await Database.close()


@pytest.mark.asyncio
async def test_init_file_based(tmp_path: object) -> None:
    """init with a file-based SQLite URL uses standard pooling."""
    db_path = os.path.join(str(tmp_path), "test.db")
    Database.init(f"sqlite+aiosqlite:///{db_path}")
    await Database.create_tables()
    pool = Database.get_pool()
    async with pool() as db:
        assert db is not None
    await Database.close()
    os.unlink(db_path)


@pytest.mark.asyncio
async def test_models_create_command() -> None:
    """CommandRecord rows get an id and start incomplete."""
    Database.init("sqlite+aiosqlite://")
    await Database.create_tables()
    pool = Database.get_pool()
    now = datetime.now(timezone.utc)
    async with pool() as db:
        record = CommandRecord(
            robot_id="R1",
            time_issued=now,
            time_instruction=now,
            instruction='"Idle"',
        )
        db.add(record)
        await db.commit()
        assert record.id is not None
        assert not record.completed
    await Database.close()
