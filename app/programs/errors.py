"""Error types for the program store.

Absence (no assignment, no progress row) is not an error: store reads
return None or an empty list for that. These exceptions are reserved for
failed queries and rejected writes.
"""


class ProgramStoreError(RuntimeError):
    """Raised when a program store query or write fails.

    Callers at the service boundary catch this and convert it into a
    typed status; the original message is only logged.
    """

    def __init__(self, operation: str, message: str | None = None):
        self.operation = operation
        self.message = message or f"Program store operation failed: {operation}"
        super().__init__(self.message)


class DuplicateProgressError(ProgramStoreError):
    """Raised when a progress row already exists for the assignment.

    Signals a lost race on first-time progress creation; the caller should
    re-fetch the row written by the other request.
    """

    def __init__(self, program_assignment_id: str):
        self.program_assignment_id = program_assignment_id
        super().__init__(
            "create_progress",
            f"Progress already exists for program assignment {program_assignment_id}",
        )


class DuplicateCompletionError(ProgramStoreError):
    """Raised when a day completion is already recorded for a schedule row."""

    def __init__(self, program_assignment_id: str, schedule_row_id: str):
        self.program_assignment_id = program_assignment_id
        self.schedule_row_id = schedule_row_id
        super().__init__(
            "record_day_completion",
            f"Day {schedule_row_id} already completed for program assignment {program_assignment_id}",
        )
