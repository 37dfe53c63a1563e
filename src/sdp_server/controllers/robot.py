"""Robot controller — thin HTTP adapter for RobotResource."""

from __future__ import annotations

from typing import Any

from litestar import Controller, get, post
from litestar.exceptions import HTTPException

from sdp_server.resources.robot import (
    CommandError,
    CommandNotFoundError,
    CorruptedRecordError,
    InstructionSequenceUnsupportedError,
    InvalidPollRequestError,
    OutsideIssuanceWindowError,
    PersistenceFailureError,
    RobotResource,
    SerializationError,
)

# Most specific first: CorruptedRecordError is a PersistenceFailureError.
_STATUS_CODES: list[tuple[type[CommandError], int]] = [
    (InvalidPollRequestError, 400),
    (SerializationError, 400),
    (CommandNotFoundError, 404),
    (InstructionSequenceUnsupportedError, 409),
    (OutsideIssuanceWindowError, 422),
    (CorruptedRecordError, 500),
    (PersistenceFailureError, 503),
]


def _to_http(error: CommandError) -> HTTPException:
    """Translate a command error into its HTTP status."""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


class RobotController(Controller):
    """HTTP adapter for robot polls and operator command views."""

    path = "/api/robots"

    @post("/poll", status_code=200)
    async def poll(
        self,
        data: dict[str, Any],
        robot_resource: RobotResource,
    ) -> dict[str, Any]:
        """Robot reports its state and receives the command to execute.

        Body: {"robot_id": "...", "instruction": ..., "battery_level": 0-100}
        """
        try:
            return await robot_resource.poll(data)
        except CommandError as error:
            raise _to_http(error) from error

    @get("/{robot_id:str}/commands", status_code=200)
    async def list_commands(
        self,
        robot_id: str,
        robot_resource: RobotResource,
        completed: bool | None = None,
    ) -> list[dict[str, Any]]:
        """List a robot's command ledger, optionally filtered by completion."""
        try:
            return await robot_resource.list_commands(robot_id, completed=completed)
        except CommandError as error:
            raise _to_http(error) from error

    @get("/{robot_id:str}/commands/current", status_code=200)
    async def current_command(
        self,
        robot_id: str,
        robot_resource: RobotResource,
    ) -> dict[str, Any]:
        """Return the robot's most recently issued command."""
        try:
            return await robot_resource.current_command(robot_id)
        except CommandError as error:
            raise _to_http(error) from error

    @post("/{robot_id:str}/commands", status_code=201)
    async def issue_command(
        self,
        robot_id: str,
        data: dict[str, Any],
        robot_resource: RobotResource,
    ) -> dict[str, Any]:
        """Operator issues a command for a robot."""
        try:
            return await robot_resource.issue_command(robot_id, data)
        except CommandError as error:
            raise _to_http(error) from error

    @post("/{robot_id:str}/commands/{command_id:int}/complete", status_code=200)
    async def complete_command(
        self,
        robot_id: str,
        command_id: int,
        robot_resource: RobotResource,
    ) -> dict[str, Any]:
        """Operator marks one of the robot's commands completed."""
        try:
            return await robot_resource.complete_command(robot_id, command_id)
        except CommandError as error:
            raise _to_http(error) from error
