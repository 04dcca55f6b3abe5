"""Program store port (interface).

This Protocol defines the row-store operations the progress services need.
The SQLAlchemy implementation lives in app.programs.repository; tests use
an in-memory implementation.

Contract:
- Reads return None / [] for absence, never raise for it
- Any failed query raises ProgramStoreError
- create_progress raises DuplicateProgressError when a row already exists
  for the assignment (program_assignment_id is a uniqueness key)
"""

from typing import Protocol

from app.programs.types import ProgramAssignment, ProgramProgress, ScheduleRow


class ProgramStore(Protocol):
    """Repository interface for program assignment, schedule and progress rows."""

    def fetch_active_assignments(self, client_id: str) -> list[ProgramAssignment]:
        """Get a client's active assignments, newest first by created_at."""
        ...

    def fetch_assignment(self, assignment_id: str) -> ProgramAssignment | None:
        """Get a single assignment by ID."""
        ...

    def fetch_progress(self, assignment_id: str) -> ProgramProgress | None:
        """Get the progress row for an assignment."""
        ...

    def create_progress(self, assignment_id: str) -> ProgramProgress:
        """Insert the initial progress row (0, 0, not completed).

        Raises:
            DuplicateProgressError: If a row already exists for the assignment
        """
        ...

    def update_progress(
        self,
        assignment_id: str,
        *,
        expected_week_index: int,
        expected_day_index: int,
        week_index: int,
        day_index: int,
        is_completed: bool,
    ) -> bool:
        """Move the progress pointer if it still sits at the expected indices.

        Returns:
            True if the row was updated, False if another writer moved it first
        """
        ...

    def fetch_schedule_rows(self, program_id: str) -> list[ScheduleRow]:
        """Get every schedule row of a program (unordered)."""
        ...

    def count_day_completions(self, assignment_id: str) -> int:
        """Count recorded day completions for an assignment."""
        ...

    def record_day_completion(
        self,
        assignment_id: str,
        schedule_row_id: str,
        *,
        week_index: int,
        day_index: int,
        completed_by: str | None = None,
        notes: str | None = None,
    ) -> None:
        """Record that a schedule row was completed for an assignment.

        Raises:
            DuplicateCompletionError: If the day was already completed
        """
        ...
