"""Command ledger row."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sdp_server.utils.db import Base

ROBOT_ID_MAX_LENGTH = 255


class CommandRecord(Base):
    """One issued instruction for a robot.

    Rows are never deleted and ``instruction`` never changes after insert.
    ``completed`` only ever moves from false to true.
    """

    __tablename__ = "commands"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    robot_id: Mapped[str] = mapped_column(String(ROBOT_ID_MAX_LENGTH), index=True)
    time_issued: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    time_instruction: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    instruction: Mapped[str] = mapped_column(Text)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
