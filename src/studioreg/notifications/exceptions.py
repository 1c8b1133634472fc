"""Exceptions for notifications."""

from studioreg.exceptions import StudioRegError


class NotificationError(StudioRegError):
    """Email delivery failed."""
