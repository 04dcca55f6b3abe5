"""Program progress module.

This module provides:
- Gap-tolerant schedule structure building and index lookup
- Current workout resolution from program progress (read-only)
- Program metrics and day completion / advancement

The SQLAlchemy store lives in app.programs.repository and is imported
explicitly by callers that need it.
"""

from app.programs.metrics import get_program_metrics
from app.programs.progress_service import get_current_workout_from_progress
from app.programs.progression import advance_program_progress
from app.programs.schedule import build_schedule_structure, get_schedule_row
from app.programs.store import ProgramStore
from app.programs.types import (
    AdvanceResult,
    CurrentWorkoutInfo,
    ProgramAssignment,
    ProgramMetrics,
    ProgramProgress,
    ScheduleRow,
    ScheduleStructure,
)

__all__ = [
    "AdvanceResult",
    "CurrentWorkoutInfo",
    "ProgramAssignment",
    "ProgramMetrics",
    "ProgramProgress",
    "ProgramStore",
    "ScheduleRow",
    "ScheduleStructure",
    "advance_program_progress",
    "build_schedule_structure",
    "get_current_workout_from_progress",
    "get_program_metrics",
    "get_schedule_row",
]
