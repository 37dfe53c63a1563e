"""Robot resource — protocol-agnostic poll handling and command views."""

from __future__ import annotations

from typing import Any

from sdp_server.schemas.instruction import InstructionCodec
from sdp_server.schemas.poll import PollRequest
from sdp_server.services.command_service import CommandService
from sdp_server.services.errors import (
    CommandError,
    CommandNotFoundError,
    CorruptedRecordError,
    InstructionSequenceUnsupportedError,
    InvalidPollRequestError,
    OutsideIssuanceWindowError,
    PersistenceFailureError,
    SerializationError,
)
from sdp_server.services.poll_service import PollService
from sdp_server.utils.time import Time

__all__ = [
    "CommandError",
    "CommandNotFoundError",
    "CorruptedRecordError",
    "InstructionSequenceUnsupportedError",
    "InvalidPollRequestError",
    "OutsideIssuanceWindowError",
    "PersistenceFailureError",
    "RobotResource",
    "SerializationError",
]


class RobotResource:
    """Poll resolution and operator command management.

    Built once at startup with all dependencies pre-wired.
    """

    def __init__(
        self, *, poll_service: PollService, command_service: CommandService,
    ) -> None:
        self._polls = poll_service
        self._commands = command_service

    async def poll(self, data: dict[str, Any]) -> dict[str, Any]:
        """Resolve a robot poll.

        Raises:
            InvalidPollRequestError: If the payload is malformed.
            CommandError: Any failure from poll resolution.
        """
        request = PollRequest.from_payload(data)
        command = await self._polls.resolve_poll(request)
        return command.to_dict()

    async def list_commands(
        self, robot_id: str, completed: bool | None = None,
    ) -> list[dict[str, Any]]:
        """Return a robot's commands, oldest first."""
        commands = await self._commands.list_commands(robot_id, completed=completed)
        return [command.to_dict() for command in commands]

    async def current_command(self, robot_id: str) -> dict[str, Any]:
        """Return the robot's most recently issued command.

        Raises:
            CommandNotFoundError: If the robot has no commands.
        """
        command = await self._commands.current(robot_id)
        if command is None:
            raise CommandNotFoundError("Robot has no commands")
        return command.to_dict()

    async def issue_command(
        self, robot_id: str, data: dict[str, Any],
    ) -> dict[str, Any]:
        """Issue a command on an operator's behalf.

        Body: {"instruction": ..., "time_issued"?: epoch, "time_instruction"?: epoch}

        Raises:
            InvalidPollRequestError: If the robot id or a timestamp is invalid.
            SerializationError: If the instruction cannot be parsed.
            OutsideIssuanceWindowError: If time_issued is too far from now.
        """
        robot_id = PollRequest.check_robot_id(robot_id)
        if "instruction" not in data:
            raise InvalidPollRequestError("'instruction' is required")
        instruction = InstructionCodec.from_wire(data["instruction"])
        now = Time.now()
        time_issued = RobotResource._epoch_field(data, "time_issued") or now
        time_instruction = (
            RobotResource._epoch_field(data, "time_instruction") or time_issued
        )
        command = await self._commands.issue(
            robot_id, time_issued, time_instruction, instruction,
        )
        return command.to_dict()

    async def complete_command(
        self, robot_id: str, command_id: int,
    ) -> dict[str, Any]:
        """Mark one of the robot's commands completed.

        Raises:
            CommandNotFoundError: If the command does not belong to the robot.
        """
        command = await self._commands.complete_command(robot_id, command_id)
        return command.to_dict()

    @staticmethod
    def _epoch_field(data: dict[str, Any], key: str) -> Any:
        value = data.get(key)
        if value is None:
            return None
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise InvalidPollRequestError(f"'{key}' must be epoch seconds")
        try:
            return Time.from_epoch(value)
        except (OverflowError, OSError, ValueError) as error:
            raise InvalidPollRequestError(f"'{key}' is out of range") from error
