"""Data models for the Waitlist Coordinator."""

from dataclasses import dataclass

from studioreg.store.models import WaitlistEntry


@dataclass
class JoinResult:
    """Outcome of joining a waitlist.

    Attributes:
        entry: The student's entry, now active.
        created: A new entry was appended to the queue.
        reactivated: A notified entry was put back at its earlier position.
    """

    entry: WaitlistEntry
    created: bool = False
    reactivated: bool = False

    @property
    def position(self) -> int:
        return self.entry.waitlist_position


@dataclass
class NotifyResult:
    """Outcome of notifying a waitlist entry.

    ``entry`` is None when there was nobody to notify. ``email_sent`` and
    ``email_error`` describe the email only; the entry is notified either way.
    """

    entry: WaitlistEntry | None
    email_sent: bool = False
    email_error: str | None = None

    @property
    def notified(self) -> bool:
        return self.entry is not None
