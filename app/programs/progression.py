"""Program day completion and progress advancement.

Marks the client's current program day complete and moves the progress
pointer to the next scheduled day. Shared by the client "finish workout"
flow and the coach pickup flow.

Idempotency:
- A completion is recorded once per (assignment, schedule row)
- The pointer moves with a compare-and-set on the previous indices, so two
  concurrent completions of the same day advance it only once
- A recorded day whose pointer update failed is finished by the next call
"""

from loguru import logger

from app.programs.errors import DuplicateCompletionError, ProgramStoreError
from app.programs.progress_service import get_or_create_progress, program_fields, select_active_assignment
from app.programs.schedule import build_schedule_structure, get_next_position, get_schedule_row
from app.programs.store import ProgramStore
from app.programs.types import AdvanceResult


def advance_program_progress(
    store: ProgramStore,
    client_id: str,
    completed_by: str | None = None,
    notes: str | None = None,
) -> AdvanceResult:
    """Complete the current program day for a client and advance progress.

    Args:
        store: Program store
        client_id: Client whose program advances
        completed_by: User who completed the day (client or coach)
        notes: Optional completion notes

    Returns:
        AdvanceResult with status advanced, already_completed, completed or error
    """
    try:
        assignment = select_active_assignment(store, client_id)
        if assignment is None:
            return AdvanceResult(
                status="error",
                error="no_active_assignment",
                message="No active program assignment",
            )

        program = program_fields(assignment)

        progress = get_or_create_progress(store, assignment.id)
        week_index = progress.current_week_index
        day_index = progress.current_day_index

        if progress.is_completed:
            return AdvanceResult(
                status="completed",
                message="Program already completed",
                current_week_index=week_index,
                current_day_index=day_index,
                is_completed=True,
                **program,
            )

        structure = build_schedule_structure(store.fetch_schedule_rows(assignment.program_id))
        current_row = get_schedule_row(structure, week_index, day_index)
        if current_row is None:
            return AdvanceResult(
                status="error",
                error="invalid_state",
                message=f"Invalid progress state: week_index={week_index}, day_index={day_index}",
                current_week_index=week_index,
                current_day_index=day_index,
                week_numbers=structure.week_numbers,
                **program,
            )

        already_completed = AdvanceResult(
            status="already_completed",
            message="Day already completed",
            current_week_index=week_index,
            current_day_index=day_index,
            is_completed=False,
            **program,
        )

        try:
            store.record_day_completion(
                assignment.id,
                current_row.id,
                week_index=week_index,
                day_index=day_index,
                completed_by=completed_by,
                notes=notes,
            )
        except DuplicateCompletionError:
            # The pointer update below still decides: it only succeeds when
            # an earlier advance recorded the day but never moved the pointer.
            logger.info(f"[PROGRAM_ADVANCE] Day {current_row.id} already recorded for assignment={assignment.id}")

        next_position = get_next_position(structure, week_index, day_index)
        if next_position is None:
            new_week_index, new_day_index, is_completed = week_index, day_index, True
        else:
            new_week_index, new_day_index = next_position
            is_completed = False

        moved = store.update_progress(
            assignment.id,
            expected_week_index=week_index,
            expected_day_index=day_index,
            week_index=new_week_index,
            day_index=new_day_index,
            is_completed=is_completed,
        )
        if not moved:
            logger.info(f"[PROGRAM_ADVANCE] Progress for assignment={assignment.id} already moved past {current_row.id}")
            return already_completed
    except ProgramStoreError as e:
        logger.error(f"[PROGRAM_ADVANCE] Error advancing progress for client={client_id}: {e}")
        return AdvanceResult(status="error", error="store_error", message="Failed to advance program progress")

    next_row = None if is_completed else get_schedule_row(structure, new_week_index, new_day_index)

    logger.info(
        f"[PROGRAM_ADVANCE] assignment={assignment.id} ({week_index}, {day_index}) -> "
        f"({new_week_index}, {new_day_index}) completed={is_completed}"
    )

    return AdvanceResult(
        status="advanced",
        message="Program completed" if is_completed else "Advanced to next training day",
        completed_week_index=week_index,
        completed_day_index=day_index,
        current_week_index=new_week_index,
        current_day_index=new_day_index,
        is_completed=is_completed,
        week_numbers=structure.week_numbers,
        days_in_week_count=len(structure.days_by_week[current_row.week_number]),
        next_week_number=next_row.week_number if next_row else None,
        next_day_of_week=next_row.day_of_week if next_row else None,
        **program,
    )
