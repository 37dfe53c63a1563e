"""Business logic for issuing and tracking robot commands."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from sdp_server.dao.ledger import CommandLedger
from sdp_server.schemas.command import Command
from sdp_server.schemas.instruction import (
    Abort,
    AbortReason,
    CleaningPattern,
    Idle,
    Instruction,
    InstructionCodec,
    Task,
)
from sdp_server.services.errors import (
    CommandNotFoundError,
    OutsideIssuanceWindowError,
    PersistenceFailureError,
)
from sdp_server.utils.time import Time

logger = logging.getLogger(__name__)


class CommandService:
    """Built once at startup with its ledger pre-wired.

    Each method wraps its ledger calls in one transaction, one unit of work
    per service call. Ledger errors and timeouts surface as
    PersistenceFailureError.
    """

    def __init__(
        self,
        ledger: CommandLedger,
        *,
        issuance_window_seconds: int = 60,
        instruction_validity_seconds: int = 900,
        ledger_timeout_seconds: float = 5.0,
    ) -> None:
        self._ledger = ledger
        self._issuance_window = issuance_window_seconds
        self._validity = instruction_validity_seconds
        self._timeout = ledger_timeout_seconds

    @asynccontextmanager
    async def _unit_of_work(self) -> AsyncIterator[None]:
        """Ledger transaction bounded by the configured timeout."""
        try:
            async with asyncio.timeout(self._timeout), self._ledger.transaction():
                yield
        except SQLAlchemyError as error:
            logger.error("Command ledger error: %s", error)
            raise PersistenceFailureError("Command ledger unavailable") from error
        except TimeoutError as error:
            logger.error("Command ledger timed out after %ss", self._timeout)
            raise PersistenceFailureError("Command ledger timed out") from error

    async def issue(
        self,
        robot_id: str,
        time_issued: datetime,
        time_instruction: datetime,
        instruction: Instruction,
    ) -> Command:
        """Record a new instruction for a robot.

        Raises:
            OutsideIssuanceWindowError: If time_issued is too far from now.
            SerializationError: If the instruction cannot be encoded.
            PersistenceFailureError: If the ledger write fails.
        """
        time_issued = Time.ensure_utc(time_issued)
        time_instruction = Time.ensure_utc(time_instruction)
        skew = Time.seconds_between(Time.now(), time_issued)
        if skew > self._issuance_window:
            logger.warning(
                "Rejected command for %s: issued %.0fs from server time",
                robot_id, skew,
            )
            raise OutsideIssuanceWindowError(
                f"Command issued {skew:.0f}s from server time "
                f"(limit {self._issuance_window}s)",
            )
        instruction_text = InstructionCodec.dumps(instruction)

        async with self._unit_of_work():
            record = await self._ledger.append(
                robot_id=robot_id,
                time_issued=time_issued,
                time_instruction=time_instruction,
                instruction=instruction_text,
            )
            await self._ledger.commit()
        logger.debug("Issued command %s for %s: %s", record.id, robot_id, instruction_text)
        return Command(
            id=record.id,
            robot_id=robot_id,
            time_issued=time_issued,
            time_instruction=time_instruction,
            instruction=instruction,
            completed=False,
        )

    async def _issue_now(self, robot_id: str, instruction: Instruction) -> Command:
        now = Time.now()
        return await self.issue(robot_id, now, now, instruction)

    async def abort(self, robot_id: str, reason: AbortReason) -> Command:
        """Issue an Abort for the given reason, effective now."""
        return await self._issue_now(robot_id, Abort(reason))

    async def idle(self, robot_id: str) -> Command:
        """Issue an Idle, effective now."""
        return await self._issue_now(robot_id, Idle())

    async def task(self, robot_id: str, pattern: CleaningPattern) -> Command:
        """Issue a Task with the given cleaning pattern, effective now."""
        return await self._issue_now(robot_id, Task(pattern))

    def is_instruction_valid(self, command: Command) -> bool:
        """True while the command's instruction time is inside the validity window."""
        age = Time.seconds_between(Time.now(), command.time_instruction)
        return age < self._validity

    async def current(self, robot_id: str) -> Command | None:
        """Return the robot's most recently issued command, if any.

        Raises:
            CorruptedRecordError: If that row cannot be decoded.
        """
        async with self._unit_of_work():
            record = await self._ledger.latest(robot_id)
        return Command.from_record(record) if record is not None else None

    async def pending(self, robot_id: str) -> Command:
        """Return the actionable pending command, or issue a fresh Idle.

        Only the newest incomplete command is considered. A stale one is
        left incomplete; the robot is told to idle instead.
        """
        async with self._unit_of_work():
            records = await self._ledger.incomplete(robot_id)
        if records:
            head = Command.from_record(records[0])
            if self.is_instruction_valid(head):
                return head
            logger.info(
                "Pending command %s for %s is stale; issuing Idle",
                head.id, robot_id,
            )
        return await self.idle(robot_id)

    async def complete(self, command: Command) -> None:
        """Mark a command completed."""
        async with self._unit_of_work():
            await self._ledger.complete(command.id)
            await self._ledger.commit()

    async def get_command(self, robot_id: str, command_id: int) -> Command:
        """Get a single command by ID.

        Raises:
            CommandNotFoundError: If the command does not exist or belongs
                to a different robot.
        """
        async with self._unit_of_work():
            record = await self._ledger.find_by_id(command_id)
        if record is None or record.robot_id != robot_id:
            raise CommandNotFoundError("Command not found")
        return Command.from_record(record)

    async def complete_command(self, robot_id: str, command_id: int) -> Command:
        """Operator-side completion of one of the robot's commands.

        Raises:
            CommandNotFoundError: If the command does not exist or belongs
                to a different robot.
        """
        command = await self.get_command(robot_id, command_id)
        await self.complete(command)
        return dataclasses.replace(command, completed=True)

    async def list_commands(
        self,
        robot_id: str,
        completed: bool | None = None,
    ) -> list[Command]:
        """List a robot's commands, oldest first, optionally by completion."""
        async with self._unit_of_work():
            records = await self._ledger.list_by_robot(robot_id, completed=completed)
        return [Command.from_record(record) for record in records]
