"""Domain errors raised by the scheduling services."""


class SchedulingError(Exception):
    """Base class for every error the scheduling core raises."""

    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """Malformed input: bad date, bad time format, start not before end."""


class SlotUnavailableError(SchedulingError):
    """The requested time is outside every window or already taken."""


class SlotConflictError(SchedulingError):
    """Another request reserved the same slot first."""

    retryable = True


class AuthorizationError(SchedulingError):
    """Credential does not match the resource owner, or the resource does not exist."""


class InvalidTransitionError(SchedulingError):
    """Requested reservation status change is not allowed."""


class StorageError(SchedulingError):
    """The underlying store failed or was unreachable."""
