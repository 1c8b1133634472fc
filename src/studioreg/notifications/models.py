"""Data models for notifications."""

from dataclasses import dataclass


@dataclass
class Notification:
    """An outbound email."""

    to_email: str
    subject: str
    body: str
    html_body: str | None = None
    template: str | None = None  # e.g. "registration_confirmed"


@dataclass
class NotificationResult:
    """Outcome of a send attempt; failures are reported, never raised."""

    sent: bool
    error: str | None = None
