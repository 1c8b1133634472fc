"""Custom exceptions for the registration store."""

from studioreg.exceptions import NotFoundError


class CourseNotFoundError(NotFoundError):
    """Course with given ID does not exist (or is inactive where required)."""


class StudentNotFoundError(NotFoundError):
    """Student with given ID or email does not exist."""


class RegistrationNotFoundError(NotFoundError):
    """Registration with given ID does not exist."""


class WaitlistEntryNotFoundError(NotFoundError):
    """Waitlist entry with given ID or token does not exist."""
