"""Poll request sent by a robot on every check-in."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sdp_server.models.command import ROBOT_ID_MAX_LENGTH
from sdp_server.schemas.instruction import Instruction, InstructionCodec
from sdp_server.services.errors import InvalidPollRequestError


@dataclass(frozen=True)
class PollRequest:
    """What the robot believes it is doing, plus its battery level."""

    robot_id: str
    instruction: Instruction
    battery_level: int

    @staticmethod
    def from_payload(data: dict[str, Any]) -> PollRequest:
        """Validate a transport payload.

        Raises:
            InvalidPollRequestError: If a field is missing or mistyped.
            SerializationError: If the instruction cannot be parsed.
        """
        robot_id = PollRequest.check_robot_id(data.get("robot_id"))
        if "instruction" not in data:
            raise InvalidPollRequestError("'instruction' is required")
        battery_level = data.get("battery_level")
        # bool is an int subclass; reject it explicitly.
        if not isinstance(battery_level, int) or isinstance(battery_level, bool):
            raise InvalidPollRequestError("'battery_level' must be an integer")
        return PollRequest(
            robot_id=robot_id,
            instruction=InstructionCodec.from_wire(data["instruction"]),
            battery_level=battery_level,
        )

    @staticmethod
    def check_robot_id(robot_id: Any) -> str:
        """Return the stripped id, or raise InvalidPollRequestError."""
        if not isinstance(robot_id, str) or not robot_id.strip():
            raise InvalidPollRequestError("'robot_id' must be a non-empty string")
        robot_id = robot_id.strip()
        if len(robot_id) > ROBOT_ID_MAX_LENGTH:
            raise InvalidPollRequestError(
                f"'robot_id' is longer than {ROBOT_ID_MAX_LENGTH} characters",
            )
        return robot_id
