from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""


class ProgramAssignment(Base):
    """Binding of a training program to a client.

    Stores:
    - client_id: Client the program is assigned to
    - program_id: Assigned program
    - name: Display name copied from the program at assignment time
    - status: Lifecycle status (active, paused, completed)
    - duration_weeks / total_days: Nominal size of the program
    - created_at: Used to pick the most recent active assignment

    Only one active assignment per client is expected, but several are
    tolerated; readers pick the newest.
    """

    __tablename__ = "program_assignments"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    client_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    program_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    duration_weeks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)

    __table_args__ = (Index("idx_program_assignments_client_status", "client_id", "status"),)


class ProgramSchedule(Base):
    """One scheduled training day of a program.

    week_number and day_of_week are raw values and may contain gaps.
    """

    __tablename__ = "program_schedule"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    program_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    template_id: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("program_id", "week_number", "day_of_week", name="uq_program_schedule_program_week_day"),
    )


class ProgramProgress(Base):
    """Progress pointer for a program assignment.

    current_week_index / current_day_index are zero-based indices into the
    sorted schedule structure, not week_number / day_of_week values.
    The unique constraint on program_assignment_id guards first-time creation
    races.
    """

    __tablename__ = "program_progress"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    program_assignment_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("program_assignments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    current_week_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_day_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)


class ProgramDayCompletion(Base):
    """Completed program day (append-only).

    One row per (assignment, schedule row); the unique constraint makes
    marking a day complete idempotent.
    """

    __tablename__ = "program_day_completions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    program_assignment_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("program_assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    program_schedule_id: Mapped[str] = mapped_column(String, ForeignKey("program_schedule.id"), nullable=False)
    week_index: Mapped[int] = mapped_column(Integer, nullable=False)
    day_index: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("program_assignment_id", "program_schedule_id", name="uq_day_completion_assignment_schedule"),
    )
