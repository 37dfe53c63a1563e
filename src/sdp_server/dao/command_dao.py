"""Data access for the command ledger."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sdp_server.dao.ledger import CommandLedger
from sdp_server.models.command import CommandRecord

_active_conn: ContextVar[AsyncSession] = ContextVar("_command_dao_conn")


class CommandDAO(CommandLedger):
    """SQLAlchemy-backed ledger built once at startup with the connection pool.

    Use transaction() to wrap a group of operations in one unit of work.
    """

    def __init__(self, pool: async_sessionmaker[AsyncSession]) -> None:
        self._pool = pool

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Open a unit of work. All DAO calls inside share one connection."""
        async with self._pool() as connection:
            context_token = _active_conn.set(connection)
            try:
                yield
            finally:
                _active_conn.reset(context_token)

    def _conn(self) -> AsyncSession:
        """Return the current unit-of-work connection."""
        return _active_conn.get()

    async def append(
        self,
        *,
        robot_id: str,
        time_issued: datetime,
        time_instruction: datetime,
        instruction: str,
    ) -> CommandRecord:
        """Insert an incomplete command row."""
        record = CommandRecord(
            robot_id=robot_id,
            time_issued=time_issued,
            time_instruction=time_instruction,
            instruction=instruction,
            completed=False,
        )
        self._conn().add(record)
        await self._conn().flush()
        return record

    async def latest(self, robot_id: str) -> CommandRecord | None:
        """Return the most recently issued row for a robot."""
        result = await self._conn().execute(
            select(CommandRecord)
            .where(CommandRecord.robot_id == robot_id)
            .order_by(CommandRecord.time_issued.desc(), CommandRecord.id.desc())
            .limit(1),
        )
        return result.scalar_one_or_none()

    async def incomplete(self, robot_id: str) -> list[CommandRecord]:
        """Return incomplete rows for a robot, newest instruction time first."""
        result = await self._conn().execute(
            select(CommandRecord)
            .where(
                CommandRecord.robot_id == robot_id,
                CommandRecord.completed.is_(False),
            )
            .order_by(
                CommandRecord.time_instruction.desc(), CommandRecord.id.desc(),
            ),
        )
        return list(result.scalars().all())

    async def complete(self, command_id: int) -> None:
        """Set completed on a row. Already-completed rows are left as is."""
        await self._conn().execute(
            update(CommandRecord)
            .where(CommandRecord.id == command_id)
            .values(completed=True),
        )

    async def find_by_id(self, command_id: int) -> CommandRecord | None:
        """Find a command by its ID."""
        result = await self._conn().execute(
            select(CommandRecord).where(CommandRecord.id == command_id),
        )
        return result.scalar_one_or_none()

    async def list_by_robot(
        self,
        robot_id: str,
        completed: bool | None = None,
    ) -> list[CommandRecord]:
        """List commands for a robot, optionally filtered by completion."""
        stmt = select(CommandRecord).where(CommandRecord.robot_id == robot_id)
        if completed is not None:
            stmt = stmt.where(CommandRecord.completed.is_(completed))
        stmt = stmt.order_by(CommandRecord.time_issued, CommandRecord.id)
        result = await self._conn().execute(stmt)
        return list(result.scalars().all())

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._conn().commit()
