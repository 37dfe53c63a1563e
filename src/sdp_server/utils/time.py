"""Timezone and epoch helpers."""

from __future__ import annotations

from datetime import datetime, timezone


class Time:
    """Static helpers for datetime normalization."""

    @staticmethod
    def now() -> datetime:
        """Return timezone-aware UTC now."""
        return datetime.now(timezone.utc)

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """Ensure a datetime is UTC-aware. SQLite may strip timezone info."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt

    @staticmethod
    def to_epoch(dt: datetime) -> int:
        """Whole epoch seconds for a (possibly naive UTC) datetime."""
        return int(Time.ensure_utc(dt).timestamp())

    @staticmethod
    def from_epoch(seconds: int | float) -> datetime:
        """UTC datetime for epoch seconds."""
        return datetime.fromtimestamp(seconds, tz=timezone.utc)

    @staticmethod
    def seconds_between(first: datetime, second: datetime) -> float:
        """Absolute distance between two datetimes, in seconds."""
        delta = Time.ensure_utc(first) - Time.ensure_utc(second)
        return abs(delta.total_seconds())
