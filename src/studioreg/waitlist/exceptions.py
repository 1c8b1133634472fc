"""Exceptions for the Waitlist Coordinator."""

from studioreg.exceptions import InvalidStateError, ValidationError


class InvalidPositionError(ValidationError):
    """Requested waitlist position is outside 1..N."""

    def __init__(self, message: str) -> None:
        super().__init__(message, field="new_position")


class EntryNotActiveError(InvalidStateError):
    """Entry has been notified and is no longer part of the active queue."""


class InvalidTokenError(InvalidStateError):
    """Payment link token is unknown or has already been used."""


class TokenExpiredError(InvalidStateError):
    """Payment link token is past its expiry."""
