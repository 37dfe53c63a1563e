"""In-memory view of one command ledger row."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sdp_server.models.command import CommandRecord
from sdp_server.schemas.instruction import Instruction, InstructionCodec
from sdp_server.services.errors import CorruptedRecordError, SerializationError
from sdp_server.utils.time import Time


@dataclass(frozen=True)
class Command:
    """A stored command. Every field is fixed at read time."""

    id: int
    robot_id: str
    time_issued: datetime
    time_instruction: datetime
    instruction: Instruction
    completed: bool

    @staticmethod
    def from_record(record: CommandRecord) -> Command:
        """Build a Command from its ledger row.

        Raises:
            CorruptedRecordError: If the stored instruction cannot be decoded.
        """
        try:
            instruction = InstructionCodec.loads(record.instruction)
        except SerializationError as error:
            raise CorruptedRecordError(
                f"Command {record.id} has an unreadable instruction",
            ) from error
        return Command(
            id=record.id,
            robot_id=record.robot_id,
            time_issued=Time.ensure_utc(record.time_issued),
            time_instruction=Time.ensure_utc(record.time_instruction),
            instruction=instruction,
            completed=bool(record.completed),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for transport, timestamps as epoch seconds."""
        return {
            "id": self.id,
            "robot_id": self.robot_id,
            "time_issued": Time.to_epoch(self.time_issued),
            "time_instruction": Time.to_epoch(self.time_instruction),
            "instruction": InstructionCodec.to_wire(self.instruction),
            "completed": self.completed,
        }
