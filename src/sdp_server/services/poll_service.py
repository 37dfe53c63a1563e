"""Poll resolution — decides the next instruction for a polling robot."""

from __future__ import annotations

import asyncio
import logging
import weakref
from enum import Enum

from sdp_server.schemas.command import Command
from sdp_server.schemas.instruction import (
    Abort,
    AbortReason,
    Continue,
    Idle,
    Instruction,
    Pause,
    Task,
)
from sdp_server.schemas.poll import PollRequest
from sdp_server.services.battery_guard import BatteryGuard
from sdp_server.services.command_service import CommandService
from sdp_server.services.errors import (
    InstructionSequenceUnsupportedError,
    PersistenceFailureError,
)

logger = logging.getLogger(__name__)


class Transition(Enum):
    """What to do for a (previous, reported) instruction pair."""

    ABORT = "abort"
    CONTINUE_TASK = "continue_task"
    FINISH_TASK = "finish_task"
    START_TASK = "start_task"
    RESOLVE_PENDING = "resolve_pending"
    UNSUPPORTED = "unsupported"


_A = Transition.ABORT
_P = Transition.RESOLVE_PENDING
_X = Transition.UNSUPPORTED

# Keyed by (previous instruction type, reported instruction type).
# Every pair is listed; a missing key is a bug, not a fallthrough.
DECISION_TABLE: dict[tuple[type, type], Transition] = {
    (Continue, Continue): _X,
    (Continue, Pause): _X,
    (Continue, Abort): _A,
    (Continue, Task): _X,
    (Continue, Idle): _P,
    (Pause, Continue): _X,
    (Pause, Pause): _X,
    (Pause, Abort): _A,
    (Pause, Task): _X,
    (Pause, Idle): _P,
    (Abort, Continue): _X,
    (Abort, Pause): _X,
    (Abort, Abort): _A,
    (Abort, Task): _X,
    (Abort, Idle): _P,
    (Task, Continue): _X,
    (Task, Pause): _X,
    (Task, Abort): _A,
    (Task, Task): Transition.CONTINUE_TASK,
    (Task, Idle): Transition.FINISH_TASK,
    (Idle, Continue): _X,
    (Idle, Pause): _X,
    (Idle, Abort): _A,
    (Idle, Task): Transition.START_TASK,
    (Idle, Idle): _P,
}


class RobotLocks:
    """One asyncio.Lock per robot id, dropped once nobody holds it."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def get(self, robot_id: str) -> asyncio.Lock:
        lock = self._locks.get(robot_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[robot_id] = lock
        return lock


class PollService:
    """Resolves robot polls against the command ledger.

    Polls for the same robot are serialized so the latest-read and the
    append of one poll never interleave with another's. Polls for
    different robots run independently.
    """

    def __init__(
        self,
        command_service: CommandService,
        battery_guard: BatteryGuard,
    ) -> None:
        self._commands = command_service
        self._battery = battery_guard
        self._locks = RobotLocks()

    @staticmethod
    def decide(previous: Instruction, reported: Instruction) -> Transition:
        """Look up the transition for a pair of instructions."""
        transition = DECISION_TABLE[(type(previous), type(reported))]
        if transition is Transition.CONTINUE_TASK:
            assert isinstance(previous, Task) and isinstance(reported, Task)
            if previous.pattern != reported.pattern:
                return Transition.UNSUPPORTED
        return transition

    async def resolve_poll(self, request: PollRequest) -> Command:
        """Return the command the robot should be executing.

        Raises:
            InstructionSequenceUnsupportedError: No transition is defined.
            OutsideIssuanceWindowError, SerializationError,
            PersistenceFailureError: Propagated from the command service.
        """
        async with self._locks.get(request.robot_id):
            return await self._resolve(request)

    async def _resolve(self, request: PollRequest) -> Command:
        robot_id = request.robot_id
        if not self._battery.battery_ok(request.battery_level):
            logger.info(
                "Robot %s reported battery %s; aborting", robot_id, request.battery_level,
            )
            return await self._commands.abort(robot_id, AbortReason.LOW_BATTERY)

        previous = await self._commands.current(robot_id)
        # No history is treated as an implicit Idle that has no ledger row.
        previous_instruction = previous.instruction if previous is not None else Idle()
        transition = PollService.decide(previous_instruction, request.instruction)

        if transition is Transition.ABORT:
            assert isinstance(request.instruction, Abort)
            await self._complete_best_effort(previous)
            return await self._commands.abort(robot_id, request.instruction.reason)

        if transition is Transition.CONTINUE_TASK:
            assert previous is not None
            return previous

        if transition is Transition.FINISH_TASK:
            assert previous is not None
            if await self._complete_best_effort(previous):
                return await self._commands.pending(robot_id)
            # The unfinished task would otherwise come back as the pending head.
            return await self._commands.idle(robot_id)

        if transition is Transition.START_TASK:
            assert isinstance(request.instruction, Task)
            # Left open, the old Idle would resurface as pending after the task.
            await self._complete_best_effort(previous)
            return await self._commands.task(robot_id, request.instruction.pattern)

        if transition is Transition.RESOLVE_PENDING:
            return await self._commands.pending(robot_id)

        logger.warning(
            "Unsupported instruction sequence for %s: %s -> %s",
            robot_id, previous_instruction, request.instruction,
        )
        raise InstructionSequenceUnsupportedError(
            f"No transition from {type(previous_instruction).__name__} "
            f"to {type(request.instruction).__name__}",
        )

    async def _complete_best_effort(self, command: Command | None) -> bool:
        """Complete a superseded command; failures are logged, not raised.

        Returns False only when a completion was attempted and failed.
        """
        if command is None:
            return True
        try:
            await self._commands.complete(command)
        except PersistenceFailureError as error:
            logger.warning(
                "Could not complete superseded command %s for %s: %s",
                command.id, command.robot_id, error,
            )
            return False
        return True
