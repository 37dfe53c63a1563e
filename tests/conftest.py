"""Shared fixtures for sdp_server tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from datetime import timedelta

import pytest
from litestar import Litestar
from litestar.testing import TestClient

from sdp_server.app import create_app
from sdp_server.config import Settings
from sdp_server.dao.command_dao import CommandDAO
from sdp_server.models.command import CommandRecord
from sdp_server.schemas.instruction import Instruction, InstructionCodec
from sdp_server.services.battery_guard import BatteryGuard
from sdp_server.services.command_service import CommandService
from sdp_server.services.poll_service import PollService
from sdp_server.utils.db import Database
from sdp_server.utils.time import Time


@pytest.fixture()
def settings() -> Settings:
    """Test settings with in-memory SQLite."""
    return Settings(
        database_url="sqlite+aiosqlite://",
        issuance_window_seconds=60,
        instruction_validity_seconds=900,
        minimum_battery_level=50,
    )


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient[Litestar]]:
    """HTTP test client with the app lifespan (table creation) running."""
    app = create_app(settings)
    with TestClient(app=app) as test_client:
        yield test_client


@pytest.fixture()
async def ledger() -> AsyncIterator[CommandDAO]:
    """Command ledger on a fresh in-memory database."""
    pool = Database.init("sqlite+aiosqlite://")
    await Database.create_tables()
    yield CommandDAO(pool)
    await Database.close()


@pytest.fixture()
def command_service(ledger: CommandDAO) -> CommandService:
    """CommandService with a 60s issuance window and 900s validity window."""
    return CommandService(
        ledger,
        issuance_window_seconds=60,
        instruction_validity_seconds=900,
    )


@pytest.fixture()
def poll_service(command_service: CommandService) -> PollService:
    """PollService with the default battery minimum of 50."""
    return PollService(command_service, BatteryGuard(50))


async def insert_command(
    ledger: CommandDAO,
    robot_id: str,
    instruction: Instruction | str,
    *,
    age_seconds: float = 0,
    completed: bool = False,
) -> CommandRecord:
    """Append a row bypassing the issuance window.

    A str instruction is stored verbatim, which allows writing corrupt rows.
    """
    when = Time.now() - timedelta(seconds=age_seconds)
    text = instruction if isinstance(instruction, str) else InstructionCodec.dumps(instruction)
    async with ledger.transaction():
        record = await ledger.append(
            robot_id=robot_id,
            time_issued=when,
            time_instruction=when,
            instruction=text,
        )
        if completed:
            await ledger.complete(record.id)
        await ledger.commit()
    return record


async def fetch_command(ledger: CommandDAO, command_id: int) -> CommandRecord:
    """Re-read a row in a fresh unit of work."""
    async with ledger.transaction():
        record = await ledger.find_by_id(command_id)
    assert record is not None
    return record


async def count_commands(ledger: CommandDAO, robot_id: str) -> int:
    """Number of ledger rows for a robot."""
    async with ledger.transaction():
        records = await ledger.list_by_robot(robot_id)
    return len(records)
