"""Robot instructions and their tagged wire encoding.

Bare variants travel as their tag (``"Idle"``), payload-carrying variants
as a single-key object (``{"Abort": "LowBattery"}``, ``{"Task": "ZigZag"}``).
The ledger stores the JSON text of that wire form.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from sdp_server.services.errors import SerializationError


class AbortReason(str, Enum):
    """Why a robot must stop what it is doing."""

    LOW_BATTERY = "LowBattery"
    SAFETY = "Safety"
    OBSTACLE = "Obstacle"


class CleaningPattern(str, Enum):
    """Opaque cleaning pattern tag carried by a Task."""

    ZIG_ZAG = "ZigZag"
    CIRCULAR = "Circular"


@dataclass(frozen=True)
class Continue:
    """Keep doing the current activity."""


@dataclass(frozen=True)
class Pause:
    """Hold position."""


@dataclass(frozen=True)
class Idle:
    """Nothing to do."""


@dataclass(frozen=True)
class Abort:
    """Stop immediately for the given reason."""

    reason: AbortReason


@dataclass(frozen=True)
class Task:
    """Clean using the given pattern."""

    pattern: CleaningPattern


Instruction = Union[Continue, Pause, Abort, Task, Idle]

INSTRUCTION_TYPES: tuple[type, ...] = (Continue, Pause, Abort, Task, Idle)

_BARE: dict[str, Instruction] = {
    "Continue": Continue(),
    "Pause": Pause(),
    "Idle": Idle(),
}


class InstructionCodec:
    """Encode/decode instructions. All methods are static."""

    @staticmethod
    def to_wire(instruction: object) -> str | dict[str, str]:
        """Return the JSON-compatible tagged form of an instruction.

        Raises:
            SerializationError: If the value is not an instruction.
        """
        if isinstance(instruction, (Continue, Pause, Idle)):
            return type(instruction).__name__
        if isinstance(instruction, Abort) and isinstance(instruction.reason, AbortReason):
            return {"Abort": instruction.reason.value}
        if isinstance(instruction, Task) and isinstance(instruction.pattern, CleaningPattern):
            return {"Task": instruction.pattern.value}
        raise SerializationError(f"Not an instruction: {instruction!r}")

    @staticmethod
    def from_wire(value: Any) -> Instruction:
        """Parse the tagged form produced by ``to_wire``.

        Raises:
            SerializationError: On unknown tags, reasons, or patterns.
        """
        if isinstance(value, str):
            if value in _BARE:
                return _BARE[value]
            raise SerializationError(f"Unknown instruction tag: {value!r}")
        if isinstance(value, dict) and len(value) == 1:
            ((tag, payload),) = value.items()
            try:
                if tag == "Abort":
                    return Abort(AbortReason(payload))
                if tag == "Task":
                    return Task(CleaningPattern(payload))
            except ValueError as error:
                raise SerializationError(
                    f"Unknown {tag} payload: {payload!r}",
                ) from error
            raise SerializationError(f"Unknown instruction tag: {tag!r}")
        raise SerializationError(f"Malformed instruction: {value!r}")

    @staticmethod
    def dumps(instruction: object) -> str:
        """Serialize an instruction to ledger text."""
        return json.dumps(InstructionCodec.to_wire(instruction))

    @staticmethod
    def loads(text: str) -> Instruction:
        """Parse ledger text back into an instruction."""
        try:
            value = json.loads(text)
        except (TypeError, ValueError) as error:
            raise SerializationError(f"Instruction is not JSON: {text!r}") from error
        return InstructionCodec.from_wire(value)
