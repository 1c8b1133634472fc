"""Error categories shared by every component.

Component packages subclass these so callers (and the HTTP layer) can branch
on the category without knowing each concrete error.
"""


class StudioRegError(Exception):
    """Base exception for registration engine errors."""


class ValidationError(StudioRegError):
    """Missing or malformed input."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(StudioRegError):
    """Unknown course, student, registration or waitlist entry."""


class CapacityError(StudioRegError):
    """No room left in a course."""


class DuplicateError(StudioRegError):
    """The requested record already exists."""


class AccessDeniedError(StudioRegError):
    """Student type does not allow the requested action."""

    def __init__(self, message: str, required_type: str) -> None:
        super().__init__(message)
        self.required_type = required_type


class InvalidStateError(StudioRegError):
    """Operation is not allowed in the record's current state."""
