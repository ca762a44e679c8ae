"""Error types raised by the workout log."""


class WorkoutError(Exception):
    """Base class for workout log errors."""


class ValidationError(WorkoutError):
    """Raised when session input is not acceptable."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class NotFoundError(WorkoutError):
    """Raised when no session matches the requested id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class PersistenceError(WorkoutError):
    """Raised when session storage cannot be read or written."""


class RestoreError(WorkoutError):
    """Raised when a stored session blob cannot be decoded."""
