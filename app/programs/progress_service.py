"""Program progress resolution.

Determines the current workout for a client from program_progress.
Used by both client and coach flows so they always agree on "what's next".

Flow:
1. Find the client's active assignment (most recent if several)
2. Get or create its progress row (idempotent under concurrent creation)
3. Short-circuit if the program is completed
4. Fetch the program schedule
5. Build the schedule structure and look up the row at the stored indices

The resolver is a boundary: every store failure is converted into one of
the CurrentWorkoutInfo statuses, never raised. It never advances progress.
"""

from loguru import logger

from app.config.settings import settings
from app.programs.errors import DuplicateProgressError, ProgramStoreError
from app.programs.schedule import build_schedule_structure, get_day_ordinal, get_schedule_row
from app.programs.store import ProgramStore
from app.programs.types import CurrentWorkoutInfo, ProgramAssignment, ProgramProgress


def program_fields(assignment: ProgramAssignment) -> dict[str, str]:
    return {
        "program_assignment_id": assignment.id,
        "program_id": assignment.program_id,
        "program_name": assignment.name or settings.default_program_name,
    }


def select_active_assignment(store: ProgramStore, client_id: str) -> ProgramAssignment | None:
    """Get the client's most recent active assignment.

    Several active assignments is a data anomaly; it is logged and the
    newest one wins.

    Raises:
        ProgramStoreError: If the assignments cannot be fetched
    """
    assignments = store.fetch_active_assignments(client_id)
    if not assignments:
        return None

    # Newest first regardless of store ordering
    assignments = sorted(assignments, key=lambda a: a.created_at, reverse=True)
    if len(assignments) > 1:
        logger.warning(
            f"[PROGRAM_PROGRESS] Client {client_id} has {len(assignments)} active assignments; "
            f"using most recent assignment={assignments[0].id}"
        )
    return assignments[0]


def get_or_create_progress(store: ProgramStore, assignment_id: str) -> ProgramProgress:
    """Get the progress row for an assignment, creating it at (0, 0) if absent.

    A concurrent request may create the row between our read and our insert;
    the store rejects the duplicate and we re-read the winner's row.

    Raises:
        ProgramStoreError: If the row can be neither read nor created
    """
    progress = store.fetch_progress(assignment_id)
    if progress is not None:
        return progress
    return create_progress_or_refetch(store, assignment_id)


def create_progress_or_refetch(store: ProgramStore, assignment_id: str) -> ProgramProgress:
    """Insert the initial progress row, falling back to the row a concurrent request created.

    Raises:
        ProgramStoreError: If the row can be neither created nor re-read
    """
    try:
        return store.create_progress(assignment_id)
    except DuplicateProgressError:
        logger.info(f"[PROGRAM_PROGRESS] Progress for assignment={assignment_id} created concurrently, re-fetching")
        progress = store.fetch_progress(assignment_id)
        if progress is None:
            raise ProgramStoreError("create_progress", "Progress row missing after duplicate insert") from None
        return progress


def get_current_workout_from_progress(store: ProgramStore, client_id: str) -> CurrentWorkoutInfo:
    """Get the current workout info for a client based on program progress.

    Args:
        store: Program store (SQL-backed in production, in-memory in tests)
        client_id: Client ID

    Returns:
        CurrentWorkoutInfo with status active, completed, no_program,
        no_schedule or invalid_state
    """
    # 1. Active assignment
    try:
        assignment = select_active_assignment(store, client_id)
    except ProgramStoreError as e:
        logger.error(f"[PROGRAM_PROGRESS] Error fetching assignments for client={client_id}: {e}")
        return CurrentWorkoutInfo(status="no_program", message="Failed to fetch program assignments")

    if assignment is None:
        return CurrentWorkoutInfo(status="no_program", message="No active program assignment")

    program = program_fields(assignment)

    # 2. Progress (fetch or lazily create)
    try:
        progress = store.fetch_progress(assignment.id)
    except ProgramStoreError as e:
        logger.error(f"[PROGRAM_PROGRESS] Error fetching progress for assignment={assignment.id}: {e}")
        return CurrentWorkoutInfo(status="no_program", message="Failed to fetch program progress", **program)

    if progress is None:
        try:
            progress = create_progress_or_refetch(store, assignment.id)
        except ProgramStoreError as e:
            logger.error(f"[PROGRAM_PROGRESS] Error creating progress for assignment={assignment.id}: {e}")
            return CurrentWorkoutInfo(status="no_program", message="Failed to initialize program progress", **program)

    week_index = progress.current_week_index
    day_index = progress.current_day_index

    # 3. Completed programs never touch the schedule
    if progress.is_completed:
        return CurrentWorkoutInfo(
            status="completed",
            message="Program completed",
            current_week_index=week_index,
            current_day_index=day_index,
            is_completed=True,
            **program,
        )

    # 4. Schedule
    try:
        rows = store.fetch_schedule_rows(assignment.program_id)
    except ProgramStoreError as e:
        logger.error(f"[PROGRAM_PROGRESS] Error fetching schedule for program={assignment.program_id}: {e}")
        return CurrentWorkoutInfo(status="no_schedule", message="Failed to fetch program schedule", **program)

    if not rows:
        return CurrentWorkoutInfo(status="no_schedule", message="No training days configured", **program)

    # 5. Resolve indices against the gap-tolerant structure
    structure = build_schedule_structure(rows)
    current_row = get_schedule_row(structure, week_index, day_index)

    if current_row is None:
        logger.warning(
            f"[PROGRAM_PROGRESS] Invalid progress for assignment={assignment.id}: "
            f"week_index={week_index}, day_index={day_index}, total_weeks={structure.total_weeks}"
        )
        return CurrentWorkoutInfo(
            status="invalid_state",
            message=(
                f"Invalid progress state: week_index={week_index}, day_index={day_index}, "
                f"total_weeks={structure.total_weeks}"
            ),
            current_week_index=week_index,
            current_day_index=day_index,
            is_completed=False,
            total_weeks=structure.total_weeks,
            **program,
        )

    days_in_week = structure.days_by_week[current_row.week_number]
    week_label = f"Week {current_row.week_number}"
    day_label = f"Day {get_day_ordinal(structure, current_row)}"

    logger.debug(
        f"[PROGRAM_PROGRESS] Resolved client={client_id} to {week_label} • {day_label} template={current_row.template_id}"
    )

    return CurrentWorkoutInfo(
        status="active",
        message="Workout ready",
        current_week_index=week_index,
        current_day_index=day_index,
        is_completed=False,
        week_label=week_label,
        day_label=day_label,
        position_label=f"{week_label} • {day_label}",
        template_id=current_row.template_id,
        schedule_row_id=current_row.id,
        total_weeks=structure.total_weeks,
        days_in_current_week=len(days_in_week),
        actual_week_number=current_row.week_number,
        actual_day_of_week=current_row.day_of_week,
        **program,
    )
