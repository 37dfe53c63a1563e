"""Battery level check applied before any other poll logic."""

from __future__ import annotations

MAXIMUM_BATTERY_LEVEL = 100


class BatteryGuard:
    """Pure predicate over a robot's self-reported battery percentage."""

    def __init__(self, minimum_level: int = 50) -> None:
        self._minimum = minimum_level

    @property
    def minimum_level(self) -> int:
        return self._minimum

    def battery_ok(self, level: int) -> bool:
        """True if the level is a sane percentage strictly above the minimum."""
        return 0 <= level and level > self._minimum and level <= MAXIMUM_BATTERY_LEVEL
