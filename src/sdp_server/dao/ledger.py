"""Command ledger contract — the persistence operations the services need."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime

from sdp_server.models.command import CommandRecord


class CommandLedger(ABC):
    """Durable, append-mostly log of issued commands per robot.

    Implementations decide where rows live. All calls between
    ``transaction()`` entry and exit share one unit of work; nothing is
    durable until ``commit()``.
    """

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Open a unit of work."""

    @abstractmethod
    async def commit(self) -> None:
        """Commit the current unit of work."""

    @abstractmethod
    async def append(
        self,
        *,
        robot_id: str,
        time_issued: datetime,
        time_instruction: datetime,
        instruction: str,
    ) -> CommandRecord:
        """Insert one incomplete row and return it with its assigned id."""

    @abstractmethod
    async def latest(self, robot_id: str) -> CommandRecord | None:
        """Return the robot's row with the greatest time_issued, if any."""

    @abstractmethod
    async def incomplete(self, robot_id: str) -> list[CommandRecord]:
        """Return incomplete rows, newest time_instruction first."""

    @abstractmethod
    async def complete(self, command_id: int) -> None:
        """Mark a row completed. Completing a completed row is a no-op."""

    @abstractmethod
    async def find_by_id(self, command_id: int) -> CommandRecord | None:
        """Find a row by id."""

    @abstractmethod
    async def list_by_robot(
        self, robot_id: str, completed: bool | None = None,
    ) -> list[CommandRecord]:
        """List a robot's rows, oldest first."""
