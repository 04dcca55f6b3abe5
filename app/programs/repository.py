"""SQLAlchemy-backed program store.

Implements the ProgramStore port against the program_assignments,
program_schedule, program_progress and program_day_completions tables.

Error translation:
- IntegrityError on progress insert → DuplicateProgressError
- IntegrityError on completion insert → DuplicateCompletionError
- Any other SQLAlchemyError → ProgramStoreError
"""

from collections.abc import Callable
from contextlib import AbstractContextManager

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models import ProgramAssignment as ProgramAssignmentModel
from app.db.models import ProgramDayCompletion as ProgramDayCompletionModel
from app.db.models import ProgramProgress as ProgramProgressModel
from app.db.models import ProgramSchedule as ProgramScheduleModel
from app.db.session import get_session
from app.programs.errors import DuplicateCompletionError, DuplicateProgressError, ProgramStoreError
from app.programs.types import ACTIVE_STATUS, ProgramAssignment, ProgramProgress, ScheduleRow

SessionFactory = Callable[[], AbstractContextManager[Session]]


class SqlProgramStore:
    """Program store over a SQLAlchemy session factory.

    Each call runs in its own session so a failed write never poisons
    later reads.
    """

    def __init__(self, session_factory: SessionFactory = get_session):
        self._session_factory = session_factory

    def fetch_active_assignments(self, client_id: str) -> list[ProgramAssignment]:
        try:
            with self._session_factory() as db:
                rows = db.execute(
                    select(ProgramAssignmentModel)
                    .where(
                        ProgramAssignmentModel.client_id == client_id,
                        ProgramAssignmentModel.status == ACTIVE_STATUS,
                    )
                    .order_by(ProgramAssignmentModel.created_at.desc())
                ).scalars().all()
                return [ProgramAssignment.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            raise ProgramStoreError("fetch_active_assignments", str(e)) from e

    def fetch_assignment(self, assignment_id: str) -> ProgramAssignment | None:
        try:
            with self._session_factory() as db:
                row = db.get(ProgramAssignmentModel, assignment_id)
                return ProgramAssignment.model_validate(row) if row else None
        except SQLAlchemyError as e:
            raise ProgramStoreError("fetch_assignment", str(e)) from e

    def fetch_progress(self, assignment_id: str) -> ProgramProgress | None:
        try:
            with self._session_factory() as db:
                row = db.execute(
                    select(ProgramProgressModel).where(ProgramProgressModel.program_assignment_id == assignment_id)
                ).scalar_one_or_none()
                return ProgramProgress.model_validate(row) if row else None
        except SQLAlchemyError as e:
            raise ProgramStoreError("fetch_progress", str(e)) from e

    def create_progress(self, assignment_id: str) -> ProgramProgress:
        try:
            with self._session_factory() as db:
                row = ProgramProgressModel(
                    program_assignment_id=assignment_id,
                    current_week_index=0,
                    current_day_index=0,
                    is_completed=False,
                )
                db.add(row)
                try:
                    db.flush()
                except IntegrityError as e:
                    db.rollback()
                    logger.debug(f"[PROGRAM_STORE] Duplicate progress insert for assignment={assignment_id}: {e}")
                    raise DuplicateProgressError(assignment_id) from e
                progress = ProgramProgress.model_validate(row)
                db.commit()
                logger.info(f"[PROGRAM_STORE] Created progress for assignment={assignment_id}")
                return progress
        except ProgramStoreError:
            raise
        except SQLAlchemyError as e:
            raise ProgramStoreError("create_progress", str(e)) from e

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
        try:
            with self._session_factory() as db:
                result = db.execute(
                    update(ProgramProgressModel)
                    .where(
                        ProgramProgressModel.program_assignment_id == assignment_id,
                        ProgramProgressModel.current_week_index == expected_week_index,
                        ProgramProgressModel.current_day_index == expected_day_index,
                        ProgramProgressModel.is_completed.is_(False),
                    )
                    .values(
                        current_week_index=week_index,
                        current_day_index=day_index,
                        is_completed=is_completed,
                    )
                )
                db.commit()
                return result.rowcount == 1
        except SQLAlchemyError as e:
            raise ProgramStoreError("update_progress", str(e)) from e

    def fetch_schedule_rows(self, program_id: str) -> list[ScheduleRow]:
        try:
            with self._session_factory() as db:
                rows = db.execute(
                    select(ProgramScheduleModel).where(ProgramScheduleModel.program_id == program_id)
                ).scalars().all()
                return [ScheduleRow.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            raise ProgramStoreError("fetch_schedule_rows", str(e)) from e

    def count_day_completions(self, assignment_id: str) -> int:
        try:
            with self._session_factory() as db:
                count = db.execute(
                    select(func.count())
                    .select_from(ProgramDayCompletionModel)
                    .where(ProgramDayCompletionModel.program_assignment_id == assignment_id)
                ).scalar_one()
                return int(count)
        except SQLAlchemyError as e:
            raise ProgramStoreError("count_day_completions", str(e)) from e

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
        try:
            with self._session_factory() as db:
                db.add(
                    ProgramDayCompletionModel(
                        program_assignment_id=assignment_id,
                        program_schedule_id=schedule_row_id,
                        week_index=week_index,
                        day_index=day_index,
                        completed_by=completed_by,
                        notes=notes,
                    )
                )
                try:
                    db.flush()
                except IntegrityError as e:
                    db.rollback()
                    raise DuplicateCompletionError(assignment_id, schedule_row_id) from e
                db.commit()
        except ProgramStoreError:
            raise
        except SQLAlchemyError as e:
            raise ProgramStoreError("record_day_completion", str(e)) from e
