"""Root conftest for all tests.

Provides an in-memory ProgramStore that records every call, plus a
SQLite-backed store for repository tests.
"""

from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.models import Base
from app.programs.errors import DuplicateCompletionError, DuplicateProgressError, ProgramStoreError
from app.programs.repository import SqlProgramStore
from app.programs.types import ProgramAssignment, ProgramProgress, ScheduleRow


# Enable foreign key constraints for SQLite
@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints in SQLite connections."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class InMemoryProgramStore:
    """ProgramStore backed by plain Python containers.

    Attributes:
        calls: Names of store operations in call order
        failures: Operation name -> exception raised when that operation is called
        simulate_create_race: When True, create_progress behaves as if another
            request inserted the row first (the row appears, then the insert fails)
    """

    def __init__(self) -> None:
        self.assignments: list[ProgramAssignment] = []
        self.progress: dict[str, ProgramProgress] = {}
        self.schedule: list[ScheduleRow] = []
        self.completions: dict[tuple[str, str], dict] = {}
        self.calls: list[str] = []
        self.failures: dict[str, Exception] = {}
        self.simulate_create_race = False
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    # Seeding helpers

    def add_assignment(
        self,
        assignment_id: str = "assignment-1",
        client_id: str = "client-1",
        program_id: str = "program-1",
        status: str = "active",
        name: str | None = "Strength Block",
        created_at: datetime | None = None,
    ) -> ProgramAssignment:
        self._clock += timedelta(minutes=1)
        assignment = ProgramAssignment(
            id=assignment_id,
            client_id=client_id,
            program_id=program_id,
            name=name,
            status=status,
            created_at=created_at or self._clock,
        )
        self.assignments.append(assignment)
        return assignment

    def add_schedule(self, program_id: str, days: list[tuple[int, int, str]]) -> list[ScheduleRow]:
        rows = [
            ScheduleRow(
                id=f"{program_id}-w{week}-d{day}",
                program_id=program_id,
                week_number=week,
                day_of_week=day,
                template_id=template_id,
            )
            for week, day, template_id in days
        ]
        self.schedule.extend(rows)
        return rows

    def set_progress(self, assignment_id: str, week_index: int = 0, day_index: int = 0, is_completed: bool = False) -> None:
        self.progress[assignment_id] = ProgramProgress(
            program_assignment_id=assignment_id,
            current_week_index=week_index,
            current_day_index=day_index,
            is_completed=is_completed,
        )

    def _call(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.failures:
            raise self.failures[operation]

    # ProgramStore operations

    def fetch_active_assignments(self, client_id: str) -> list[ProgramAssignment]:
        self._call("fetch_active_assignments")
        active = [a for a in self.assignments if a.client_id == client_id and a.status == "active"]
        return sorted(active, key=lambda a: a.created_at, reverse=True)

    def fetch_assignment(self, assignment_id: str) -> ProgramAssignment | None:
        self._call("fetch_assignment")
        return next((a for a in self.assignments if a.id == assignment_id), None)

    def fetch_progress(self, assignment_id: str) -> ProgramProgress | None:
        self._call("fetch_progress")
        progress = self.progress.get(assignment_id)
        return progress.model_copy() if progress else None

    def create_progress(self, assignment_id: str) -> ProgramProgress:
        self._call("create_progress")
        if self.simulate_create_race and assignment_id not in self.progress:
            self.set_progress(assignment_id)
        if assignment_id in self.progress:
            raise DuplicateProgressError(assignment_id)
        self.set_progress(assignment_id)
        return self.progress[assignment_id].model_copy()

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
        self._call("update_progress")
        current = self.progress.get(assignment_id)
        if (
            current is None
            or current.is_completed
            or current.current_week_index != expected_week_index
            or current.current_day_index != expected_day_index
        ):
            return False
        self.set_progress(assignment_id, week_index, day_index, is_completed)
        return True

    def fetch_schedule_rows(self, program_id: str) -> list[ScheduleRow]:
        self._call("fetch_schedule_rows")
        return [row for row in self.schedule if row.program_id == program_id]

    def count_day_completions(self, assignment_id: str) -> int:
        self._call("count_day_completions")
        return sum(1 for key in self.completions if key[0] == assignment_id)

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
        self._call("record_day_completion")
        key = (assignment_id, schedule_row_id)
        if key in self.completions:
            raise DuplicateCompletionError(assignment_id, schedule_row_id)
        self.completions[key] = {
            "week_index": week_index,
            "day_index": day_index,
            "completed_by": completed_by,
            "notes": notes,
        }


@pytest.fixture
def store() -> InMemoryProgramStore:
    """Empty in-memory program store."""
    return InMemoryProgramStore()


@pytest.fixture
def store_error() -> ProgramStoreError:
    """A generic store failure carrying internal details that must not leak."""
    return ProgramStoreError("query", "connection refused: db-internal-host:5432")


@pytest.fixture
def db_engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with the schema created.

    StaticPool keeps a single connection so every session sees the same database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(db_engine: Engine):
    """Context-manager session factory mirroring app.db.session.get_session."""
    session_local = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)

    @contextmanager
    def _get_session() -> Generator[Session, None, None]:
        session = session_local()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return _get_session


@pytest.fixture
def sql_store(session_factory) -> SqlProgramStore:
    """SqlProgramStore over the in-memory SQLite database."""
    return SqlProgramStore(session_factory=session_factory)
