"""Tests for program metrics."""

import pytest

from app.programs.metrics import get_program_metrics


@pytest.fixture
def program_store(store):
    store.add_assignment("assignment-1", program_id="program-1")
    store.add_schedule("program-1", [(1, 1, "A"), (1, 3, "B"), (2, 1, "C"), (4, 2, "D")])
    return store


class TestGetProgramMetrics:
    """Tests for get_program_metrics."""

    def test_metrics_with_progress(self, program_store) -> None:
        """Test counts, percentage and flattened day number across a week gap."""
        program_store.set_progress("assignment-1", week_index=2, day_index=0)
        program_store.completions[("assignment-1", "program-1-w1-d1")] = {}
        program_store.completions[("assignment-1", "program-1-w1-d3")] = {}
        program_store.completions[("assignment-1", "program-1-w2-d1")] = {}

        metrics = get_program_metrics(program_store, "assignment-1")

        assert metrics is not None
        assert metrics.total_workouts == 4
        assert metrics.completed_workouts == 3
        assert metrics.completion_percentage == 75
        assert metrics.current_day_number == 4
        assert metrics.current_week_index == 2
        assert metrics.is_completed is False

    def test_metrics_without_progress(self, program_store) -> None:
        """Test that missing progress leaves the position empty and creates nothing."""
        metrics = get_program_metrics(program_store, "assignment-1")

        assert metrics is not None
        assert metrics.current_day_number is None
        assert metrics.completion_percentage == 0
        assert "create_progress" not in program_store.calls

    def test_empty_schedule(self, store) -> None:
        store.add_assignment("assignment-1", program_id="program-empty")

        metrics = get_program_metrics(store, "assignment-1")

        assert metrics is not None
        assert metrics.total_workouts == 0
        assert metrics.completion_percentage == 0

    def test_unknown_assignment(self, store) -> None:
        assert get_program_metrics(store, "missing") is None

    def test_store_error(self, program_store, store_error) -> None:
        program_store.failures["count_day_completions"] = store_error

        assert get_program_metrics(program_store, "assignment-1") is None
