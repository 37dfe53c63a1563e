"""Root logger setup for the server process."""

from __future__ import annotations

import logging
import sys


class ConsoleHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """stderr handler with a compact timestamp, installed once per process."""

    def __init__(self, level: int = logging.INFO) -> None:
        super().__init__(stream=sys.stderr)
        self.setLevel(level)
        self.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)s %(name)s: %(message)s", "%H:%M:%S",
            )
        )


class LoggingConfig:
    """Configures the root logger. All methods are static."""

    @staticmethod
    def resolve_level(level: str | int) -> int:
        """Map a level name like ``"debug"`` to its numeric value."""
        if isinstance(level, int):
            return level
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.INFO

    @staticmethod
    def configure(level: str | int = logging.INFO) -> logging.Logger:
        """Set the root level and attach one ConsoleHandler. Idempotent."""
        numeric = LoggingConfig.resolve_level(level)
        logger = logging.getLogger()
        logger.setLevel(numeric)

        handlers = [h for h in logger.handlers if isinstance(h, ConsoleHandler)]
        if not handlers:
            logger.addHandler(ConsoleHandler(level=numeric))
        for handler in handlers:
            handler.setLevel(numeric)
        return logger
