"""Program metrics derived from progress, schedule and day completions.

Completion counts come from program_day_completions; the current position
is derived from the progress indices walked over the schedule structure.
"""

from loguru import logger

from app.programs.errors import ProgramStoreError
from app.programs.schedule import build_schedule_structure, get_flat_day_number
from app.programs.store import ProgramStore
from app.programs.types import ProgramMetrics


def get_program_metrics(store: ProgramStore, assignment_id: str) -> ProgramMetrics | None:
    """Get completion metrics for a program assignment.

    Args:
        store: Program store
        assignment_id: Program assignment ID

    Returns:
        ProgramMetrics, or None if the assignment does not exist or the
        store could not be read
    """
    try:
        assignment = store.fetch_assignment(assignment_id)
        if assignment is None:
            logger.debug(f"[PROGRAM_METRICS] Assignment {assignment_id} not found")
            return None

        progress = store.fetch_progress(assignment_id)
        rows = store.fetch_schedule_rows(assignment.program_id)
        completed_workouts = store.count_day_completions(assignment_id)
    except ProgramStoreError as e:
        logger.error(f"[PROGRAM_METRICS] Error computing metrics for assignment={assignment_id}: {e}")
        return None

    total_workouts = len(rows)
    completion_percentage = 0
    if total_workouts > 0:
        completion_percentage = min(100, round(completed_workouts / total_workouts * 100))

    if progress is None:
        return ProgramMetrics(
            program_assignment_id=assignment_id,
            total_workouts=total_workouts,
            completed_workouts=completed_workouts,
            completion_percentage=completion_percentage,
        )

    structure = build_schedule_structure(rows)
    current_day_number = get_flat_day_number(
        structure,
        progress.current_week_index,
        progress.current_day_index,
    )

    return ProgramMetrics(
        program_assignment_id=assignment_id,
        total_workouts=total_workouts,
        completed_workouts=completed_workouts,
        current_day_number=current_day_number,
        completion_percentage=completion_percentage,
        current_week_index=progress.current_week_index,
        current_day_index=progress.current_day_index,
        is_completed=progress.is_completed,
    )
