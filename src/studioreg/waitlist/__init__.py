"""Waitlist Coordinator - per-course waitlists with contiguous positions."""

from studioreg.waitlist.coordinator import WaitlistCoordinator
from studioreg.waitlist.exceptions import (
    EntryNotActiveError,
    InvalidPositionError,
    InvalidTokenError,
    TokenExpiredError,
)
from studioreg.waitlist.models import JoinResult, NotifyResult

__all__ = [
    "EntryNotActiveError",
    "InvalidPositionError",
    "InvalidTokenError",
    "JoinResult",
    "NotifyResult",
    "TokenExpiredError",
    "WaitlistCoordinator",
]
