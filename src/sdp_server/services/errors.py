"""Error taxonomy shared by the command ledger services."""

from __future__ import annotations


class CommandError(Exception):
    """Base class for every failure a poll or command operation can raise."""


class OutsideIssuanceWindowError(CommandError):
    """Raised when a command's issue time is too far from server time."""


class SerializationError(CommandError):
    """Raised when an instruction cannot be encoded or decoded."""


class PersistenceFailureError(CommandError):
    """Raised on any ledger I/O error, lost connection, or timeout."""


class CorruptedRecordError(PersistenceFailureError):
    """Raised when a stored ledger row holds an unreadable instruction."""


class InstructionSequenceUnsupportedError(CommandError):
    """Raised when no transition is defined for a (previous, reported) pair."""


class CommandNotFoundError(CommandError):
    """Raised when a command does not exist or belongs to another robot."""


class InvalidPollRequestError(CommandError):
    """Raised when a poll payload is missing fields or has the wrong types."""
