"""Exceptions for student identity."""

from studioreg.exceptions import ValidationError


class InvalidStudentTypeError(ValidationError):
    """Student type is not one of the known types."""


class ProfileIncompleteError(ValidationError):
    """Student must complete their profile before continuing."""
