"""Program progress API endpoints.

- GET  /programs/current-workout: resolve the client's next workout
- GET  /programs/assignments/{assignment_id}/metrics: completion metrics
- POST /programs/advance: mark the current day complete and advance

Role checks (coach may act for their clients) happen upstream; these
endpoints trust the forwarded caller identity.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger
from pydantic import BaseModel

from app.api.dependencies.auth import get_current_user_id
from app.programs.metrics import get_program_metrics
from app.programs.progress_service import get_current_workout_from_progress
from app.programs.progression import advance_program_progress
from app.programs.repository import SqlProgramStore
from app.programs.store import ProgramStore
from app.programs.types import AdvanceResult, CurrentWorkoutInfo, ProgramMetrics

router = APIRouter(prefix="/programs", tags=["programs"])

_ERROR_STATUS_CODES = {
    "no_active_assignment": status.HTTP_404_NOT_FOUND,
}


class AdvanceRequest(BaseModel):
    client_id: str | None = None
    notes: str | None = None


def get_program_store() -> ProgramStore:
    """FastAPI dependency providing the program store."""
    return SqlProgramStore()


@router.get("/current-workout", response_model=CurrentWorkoutInfo)
def get_current_workout(
    client_id: str | None = None,
    user_id: str = Depends(get_current_user_id),
    store: ProgramStore = Depends(get_program_store),
) -> CurrentWorkoutInfo:
    """Get the client's current program workout.

    Always returns 200; callers branch on the status field.
    """
    target_client_id = client_id or user_id
    logger.info(f"[API] /programs/current-workout called by user_id={user_id} for client_id={target_client_id}")
    return get_current_workout_from_progress(store, target_client_id)


@router.get("/assignments/{assignment_id}/metrics", response_model=ProgramMetrics)
def get_assignment_metrics(
    assignment_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ProgramStore = Depends(get_program_store),
) -> ProgramMetrics:
    """Get completion metrics for a program assignment."""
    logger.info(f"[API] /programs/assignments/{assignment_id}/metrics called by user_id={user_id}")
    metrics = get_program_metrics(store, assignment_id)
    if metrics is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Program metrics not available")
    return metrics


@router.post("/advance", response_model=AdvanceResult)
def advance_program(
    request: AdvanceRequest,
    user_id: str = Depends(get_current_user_id),
    store: ProgramStore = Depends(get_program_store),
) -> AdvanceResult:
    """Mark the current training day complete and advance the program.

    Raises:
        HTTPException: 409 if the day or program is already completed,
            404 if there is no active assignment, 500 on any other error
    """
    client_id = request.client_id or user_id
    logger.info(f"[API] /programs/advance called by user_id={user_id} for client_id={client_id}")

    result = advance_program_progress(store, client_id, completed_by=user_id, notes=request.notes)

    if result.status in {"already_completed", "completed"}:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.message)
    if result.status == "error":
        code = _ERROR_STATUS_CODES.get(result.error or "", status.HTTP_500_INTERNAL_SERVER_ERROR)
        raise HTTPException(status_code=code, detail=result.message)
    return result
