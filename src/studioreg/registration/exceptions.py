"""Exceptions for the Registration Ledger."""

from studioreg.exceptions import (
    CapacityError,
    DuplicateError,
    InvalidStateError,
    StudioRegError,
)


class CourseFullError(CapacityError):
    """Course has no capacity left for another completed registration."""

    def __init__(self, message: str, course_id: str) -> None:
        super().__init__(message)
        self.course_id = course_id


class DuplicateRegistrationError(DuplicateError):
    """Student already holds a completed (or conflicting) registration for the course."""

    def __init__(self, message: str, registration_id: str | None = None) -> None:
        super().__init__(message)
        self.registration_id = registration_id


class InvalidTransitionError(InvalidStateError):
    """Registration cannot move from its current status to the requested one."""


class RegistrationClosedError(InvalidStateError):
    """Registration is switched off by the studio."""


class BundleRejectedError(StudioRegError):
    """A bundle failed one of its checks; nothing was registered."""

    def __init__(self, message: str, reason: str, course_id: str | None = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.course_id = course_id
