"""Schedule structure building and index lookup.

Progress is stored as two zero-based indices into sorted lists derived
from the schedule rows, not as raw week_number/day_of_week values. This
keeps the pointer valid when a program skips weeks (1, 3, 5) or days
(1, 3, 5).

All functions here are pure: no I/O, no exceptions for out-of-range input.
"""

from collections.abc import Iterable

from app.programs.types import ScheduleRow, ScheduleStructure


def build_schedule_structure(rows: Iterable[ScheduleRow]) -> ScheduleStructure:
    """Group schedule rows by week and order them.

    Args:
        rows: Schedule rows of one program, in any order (may be empty)

    Returns:
        ScheduleStructure with sorted distinct week numbers and, per week,
        rows sorted by day_of_week
    """
    rows = list(rows)
    week_numbers = sorted({row.week_number for row in rows})

    days_by_week: dict[int, list[ScheduleRow]] = {}
    for week_number in week_numbers:
        days_by_week[week_number] = sorted(
            (row for row in rows if row.week_number == week_number),
            key=lambda row: row.day_of_week,
        )

    return ScheduleStructure(week_numbers=week_numbers, days_by_week=days_by_week)


def get_schedule_row(structure: ScheduleStructure, week_index: int, day_index: int) -> ScheduleRow | None:
    """Get the schedule row at (week_index, day_index).

    Returns:
        The row, or None if either index is negative or past the end
    """
    if week_index < 0 or week_index >= len(structure.week_numbers):
        return None

    week_number = structure.week_numbers[week_index]
    days = structure.days_by_week.get(week_number)

    if not days or day_index < 0 or day_index >= len(days):
        return None

    return days[day_index]


def get_day_ordinal(structure: ScheduleStructure, row: ScheduleRow) -> int | None:
    """1-based position of a row within its week, matched by row ID.

    Returns None if the row is not part of the structure.
    """
    for position, day in enumerate(structure.days_by_week.get(row.week_number, []), start=1):
        if day.id == row.id:
            return position
    return None


def get_flat_day_number(structure: ScheduleStructure, week_index: int, day_index: int) -> int:
    """1-based position of (week_index, day_index) in the flattened schedule."""
    days_before = sum(len(structure.days_for_week_index(w)) for w in range(max(week_index, 0)))
    return days_before + day_index + 1


def get_next_position(structure: ScheduleStructure, week_index: int, day_index: int) -> tuple[int, int] | None:
    """Position that follows (week_index, day_index).

    Moves to the next day of the same week, else to day 0 of the next week.

    Returns:
        (week_index, day_index) of the next day, or None after the last day
    """
    if day_index + 1 < len(structure.days_for_week_index(week_index)):
        return (week_index, day_index + 1)
    # Weeks always hold at least one row, so day 0 of the next week exists
    if week_index + 1 < len(structure.week_numbers):
        return (week_index + 1, 0)
    return None
