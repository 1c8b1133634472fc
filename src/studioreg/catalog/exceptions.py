"""Exceptions for the Catalog."""

from studioreg.exceptions import ValidationError


class InvalidCourseError(ValidationError):
    """Course definition breaks a catalog invariant."""
