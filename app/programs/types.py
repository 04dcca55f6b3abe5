"""Program progress data contracts.

This module defines the data structures shared by the progress resolver,
the metrics service and the advancement service:
- Rows read from the program store (assignments, progress, schedule rows)
- The derived schedule structure (never persisted)
- Result types returned to API callers

Indices vs numbers:
- current_week_index / current_day_index are zero-based positions into the
  sorted, de-duplicated lists of ScheduleStructure
- week_number / day_of_week are the raw (possibly sparse) values on a row
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

ACTIVE_STATUS = "active"

WorkoutStatus = Literal["active", "completed", "no_program", "no_schedule", "invalid_state"]

AdvanceStatus = Literal["advanced", "already_completed", "completed", "error"]


class ScheduleRow(BaseModel):
    """One scheduled training day within a program.

    Attributes:
        id: Schedule row ID (unique within a program)
        program_id: Owning program ID
        week_number: Raw week number (gaps allowed)
        day_of_week: Raw day number within the week (gaps allowed)
        template_id: Workout template reference
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    program_id: str
    week_number: int
    day_of_week: int
    template_id: str


class ProgramAssignment(BaseModel):
    """Binding of a program to a client."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    client_id: str
    program_id: str
    name: str | None = None
    status: str
    duration_weeks: int | None = None
    total_days: int | None = None
    created_at: datetime


class ProgramProgress(BaseModel):
    """Mutable pointer into an assignment's schedule.

    Keyed 1:1 by program_assignment_id.
    """

    model_config = ConfigDict(from_attributes=True)

    program_assignment_id: str
    current_week_index: int = 0
    current_day_index: int = 0
    is_completed: bool = False


@dataclass(frozen=True)
class ScheduleStructure:
    """Schedule rows grouped by week, tolerant of gaps.

    Attributes:
        week_numbers: Sorted distinct week numbers present in the schedule
        days_by_week: week_number -> rows of that week sorted by day_of_week
    """

    week_numbers: list[int] = field(default_factory=list)
    days_by_week: dict[int, list[ScheduleRow]] = field(default_factory=dict)

    @property
    def total_weeks(self) -> int:
        return len(self.week_numbers)

    @property
    def total_days(self) -> int:
        return sum(len(days) for days in self.days_by_week.values())

    def days_for_week_index(self, week_index: int) -> list[ScheduleRow]:
        """Rows of the week at week_index, or an empty list when out of range."""
        if week_index < 0 or week_index >= len(self.week_numbers):
            return []
        return self.days_by_week.get(self.week_numbers[week_index], [])


class CurrentWorkoutInfo(BaseModel):
    """Resolved "next workout" for a client, tagged by status.

    Status meanings:
    - active: a concrete workout is resolved
    - completed: the program is finished
    - no_program: no eligible assignment, or progress could not be read/created
    - no_schedule: the program has no schedule rows, or they could not be fetched
    - invalid_state: progress indices point outside the current schedule
    """

    status: WorkoutStatus
    message: str

    # Program info
    program_assignment_id: str | None = None
    program_id: str | None = None
    program_name: str | None = None

    # Progress indices (0-based)
    current_week_index: int | None = None
    current_day_index: int | None = None
    is_completed: bool | None = None

    # Labels
    week_label: str | None = None
    day_label: str | None = None
    position_label: str | None = None

    # Workout template
    template_id: str | None = None
    schedule_row_id: str | None = None

    # Structure info
    total_weeks: int | None = None
    days_in_current_week: int | None = None
    actual_week_number: int | None = None
    actual_day_of_week: int | None = None


class ProgramMetrics(BaseModel):
    """Completion metrics for one program assignment."""

    program_assignment_id: str
    total_workouts: int
    completed_workouts: int
    current_day_number: int | None = None  # 1-based position in the flattened schedule
    completion_percentage: int
    current_week_index: int | None = None
    current_day_index: int | None = None
    is_completed: bool | None = None


class AdvanceResult(BaseModel):
    """Outcome of marking the current program day complete.

    Attributes:
        status: advanced, already_completed, completed or error
        error: Machine-readable error code when status is error
            (no_active_assignment, invalid_state, store_error)
        completed_week_index: Week index of the day that was just completed
        completed_day_index: Day index of the day that was just completed
        week_numbers: Distinct week numbers of the schedule
        days_in_week_count: Number of days in the week that was just completed
        next_week_number: Raw week number of the next day (None when finished)
        next_day_of_week: Raw day_of_week of the next day (None when finished)
    """

    status: AdvanceStatus
    message: str
    error: str | None = None

    program_assignment_id: str | None = None
    program_id: str | None = None
    program_name: str | None = None

    completed_week_index: int | None = None
    completed_day_index: int | None = None
    current_week_index: int | None = None
    current_day_index: int | None = None
    is_completed: bool | None = None

    week_numbers: list[int] | None = None
    days_in_week_count: int | None = None
    next_week_number: int | None = None
    next_day_of_week: int | None = None
