"""Program and ProgramEntry models."""

import uuid

from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from scoutplan.database import Base

ENTRY_TYPES = ("activity", "custom")


def _new_entry_id() -> str:
    return str(uuid.uuid4())


class Program(Base):
    __tablename__ = "program"

    program_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    date = Column(Date, nullable=True)
    start_time = Column(String(10), nullable=False)  # HH:MM
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    is_public = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="programs")
    entries = relationship(
        "ProgramEntry",
        back_populates="program",
        cascade="all, delete-orphan",
        order_by="ProgramEntry.position",
    )

    __table_args__ = (
        Index("idx_program_user", "user_id"),
    )


class ProgramEntry(Base):
    __tablename__ = "program_entry"

    entry_id = Column(String(36), primary_key=True, default=_new_entry_id)
    program_id = Column(Integer, ForeignKey("program.program_id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    # Derived from the program start time and preceding durations.
    # May run past 24:00 for programs that cross midnight.
    start_time = Column(String(10), nullable=False)
    end_time = Column(String(10), nullable=False)
    entry_type = Column(String(20), nullable=False)  # activity/custom
    activity_id = Column(Integer, ForeignKey("activity.activity_id", ondelete="SET NULL"), nullable=True)
    custom_title = Column(String(200), nullable=True)
    custom_duration_minutes = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    program = relationship("Program", back_populates="entries")
    activity = relationship("Activity")

    __table_args__ = (
        Index("idx_entry_program_position", "program_id", "position"),
    )
