"""WaitlistCoordinator - per-course waitlist queue and notifications."""

from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from studioreg.exceptions import ValidationError
from studioreg.notifications import NotificationDispatcher, messages
from studioreg.registration.exceptions import DuplicateRegistrationError
from studioreg.store.models import PaymentStatus, WaitlistEntry, WaitlistStatus
from studioreg.waitlist.exceptions import (
    EntryNotActiveError,
    InvalidPositionError,
    InvalidTokenError,
    TokenExpiredError,
)
from studioreg.waitlist.models import JoinResult, NotifyResult

if TYPE_CHECKING:
    from studioreg.notifications import Notification
    from studioreg.store import StoreSession, StudioStore

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class WaitlistCoordinator:
    """Keeps each course's waitlist in order.

    Active entries always hold positions 1..N with no gaps. Notifying an entry
    takes it out of the active queue (closing the gap) but it keeps its last
    position, so if the student rejoins without converting they are put back
    at that place rather than at the end.

    Every change runs under the course lock and is written back as one
    batch re-sequencing, so two changes to the same queue never interleave.
    """

    def __init__(
        self,
        store: StudioStore,
        dispatcher: NotificationDispatcher | None = None,
        portal_base_url: str = "http://localhost:8000",
        default_expires_hours: int = 48,
    ) -> None:
        """Initialize the WaitlistCoordinator.

        Args:
            store: StudioStore instance for persistence.
            dispatcher: Email dispatcher; defaults to one with delivery disabled.
            portal_base_url: Base URL for tokenized registration links.
            default_expires_hours: Token lifetime when notify is not given one.
        """
        self.store = store
        self.dispatcher = dispatcher if dispatcher is not None else NotificationDispatcher()
        self.portal_base_url = portal_base_url.rstrip("/")
        self.default_expires_hours = default_expires_hours

    # --- Joining ---

    def stage_join(self, uow: StoreSession, student_id: str, course_id: str) -> JoinResult:
        """Put a student on a course's waitlist inside a locked unit of work.

        Raises:
            DuplicateRegistrationError: If the student already holds a completed registration
        """
        if uow.find_registration(student_id, course_id, [PaymentStatus.COMPLETED]) is not None:
            raise DuplicateRegistrationError("You are already registered for this course")

        entry = uow.find_waitlist_entry(student_id, course_id)
        if entry is not None and entry.status == WaitlistStatus.ACTIVE.value:
            logger.info("Student %s already on waitlist for course %s", student_id, course_id)
            return JoinResult(entry=entry)

        active = uow.list_waitlist(course_id, WaitlistStatus.ACTIVE)

        if entry is not None:
            position = min(entry.waitlist_position, len(active) + 1)
            entry.status = WaitlistStatus.ACTIVE.value
            self._clear_notification(entry)
            active.insert(position - 1, entry)
            uow.resequence_waitlist(active)
            logger.info(
                "Reactivated waitlist entry %s at position %d", entry.id, entry.waitlist_position
            )
            return JoinResult(entry=entry, reactivated=True)

        position = max((e.waitlist_position for e in active), default=0) + 1
        entry = uow.insert_waitlist_entry(
            WaitlistEntry(student_id=student_id, course_id=course_id, waitlist_position=position)
        )
        logger.info(
            "Student %s joined waitlist for course %s at %d", student_id, course_id, position
        )
        return JoinResult(entry=entry, created=True)

    def join(self, student_id: str, course_id: str) -> JoinResult:
        """Put a student on a course's waitlist.

        Re-joining while active returns the existing position. A notified
        entry is reactivated at its earlier position. Otherwise the student
        is appended after the last active entry.

        Raises:
            CourseNotFoundError: If the course doesn't exist or is inactive
            StudentNotFoundError: If the student doesn't exist
            DuplicateRegistrationError: If the student already holds a completed registration
        """
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            uow.require_course(course_id, active_only=True)
            uow.get_student(student_id)
            return self.stage_join(uow, student_id, course_id)

    # --- Notifying ---

    def notify(self, entry_id: str, expires_hours: int | None = None) -> NotifyResult:
        """Offer a spot to a waitlisted student.

        Issues a fresh single-use token, marks the entry notified and emails
        the registration link. The entry is notified even when the email
        cannot be sent; the result carries the email outcome.

        Raises:
            WaitlistEntryNotFoundError: If entry doesn't exist
            ValidationError: If expires_hours is not positive
        """
        course_id = self._course_of(entry_id)
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            entry = uow.get_waitlist_entry(entry_id)
            notification = self._stage_notify(uow, entry, expires_hours)
        return self._deliver(entry, notification)

    def notify_next(self, course_id: str, expires_hours: int | None = None) -> NotifyResult:
        """Notify the first active entry; an empty waitlist is a no-op.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            uow.require_course(course_id)
            active = uow.list_waitlist(course_id, WaitlistStatus.ACTIVE)
            if not active:
                logger.info("No active waitlist entries for course %s", course_id)
                return NotifyResult(entry=None)
            entry = active[0]
            notification = self._stage_notify(uow, entry, expires_hours)
        return self._deliver(entry, notification)

    # --- Queue maintenance ---

    def remove(self, entry_id: str) -> None:
        """Delete an entry, closing the gap it leaves in the active queue.

        Raises:
            WaitlistEntryNotFoundError: If entry doesn't exist
        """
        course_id = self._course_of(entry_id)
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            self._remove_entry(uow, uow.get_waitlist_entry(entry_id))
        logger.info("Removed waitlist entry %s", entry_id)

    def reorder(self, entry_id: str, new_position: int) -> WaitlistEntry:
        """Move an active entry to ``new_position``, shifting the entries in between.

        Raises:
            WaitlistEntryNotFoundError: If entry doesn't exist
            EntryNotActiveError: If the entry has been notified
            InvalidPositionError: If new_position is outside 1..N
        """
        course_id = self._course_of(entry_id)
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            entry = uow.get_waitlist_entry(entry_id)
            if entry.status != WaitlistStatus.ACTIVE.value:
                raise EntryNotActiveError("Only active waitlist entries can be reordered")

            active = uow.list_waitlist(course_id, WaitlistStatus.ACTIVE)
            if not 1 <= new_position <= len(active):
                raise InvalidPositionError(
                    f"Position must be between 1 and {len(active)}, got {new_position}"
                )

            old_position = entry.waitlist_position
            ordered = [e for e in active if e.id != entry.id]
            ordered.insert(new_position - 1, entry)
            uow.resequence_waitlist(ordered)

        logger.info("Moved waitlist entry %s from %d to %d", entry_id, old_position, new_position)
        return entry

    def list_for_course(self, course_id: str) -> list[WaitlistEntry]:
        """Active entries in queue order, followed by notified ones.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        with self.store.unit_of_work() as uow:
            uow.require_course(course_id)
            entries = uow.list_waitlist(course_id)
        active = [e for e in entries if e.status == WaitlistStatus.ACTIVE.value]
        notified = [e for e in entries if e.status != WaitlistStatus.ACTIVE.value]
        return active + notified

    # --- Tokens and conversion ---

    def course_for_token(self, token: str) -> str:
        """Course a payment link token belongs to.

        Raises:
            InvalidTokenError: If the token is unknown or already used
        """
        with self.store.unit_of_work() as uow:
            entry = uow.find_waitlist_entry_by_token(token) if token else None
            if entry is None:
                raise InvalidTokenError(
                    "This registration link is invalid or has already been used"
                )
            return entry.course_id

    def stage_redeem(self, uow: StoreSession, token: str) -> WaitlistEntry:
        """Consume a payment link token inside the unit of work that registers the student.

        The token is cleared so it cannot be used twice; a rollback restores it.

        Raises:
            InvalidTokenError: If the token is unknown, used, or the entry is not notified
            TokenExpiredError: If the token is past its expiry
        """
        entry = uow.find_waitlist_entry_by_token(token) if token else None
        if entry is None or entry.status != WaitlistStatus.NOTIFIED.value:
            raise InvalidTokenError("This registration link is invalid or has already been used")

        expires_at = entry.notification_expires_at
        if expires_at is not None and _as_utc(expires_at) <= datetime.now(UTC):
            logger.info("Expired token presented for waitlist entry %s", entry.id)
            raise TokenExpiredError("This registration link has expired")

        entry.payment_link_token = None
        uow.session.flush()
        logger.info("Redeemed token for waitlist entry %s", entry.id)
        return entry

    def stage_supersede(self, uow: StoreSession, student_id: str, course_id: str) -> bool:
        """Drop the student's entry once they hold a completed registration.

        Returns:
            True if an entry was removed.
        """
        entry = uow.find_waitlist_entry(student_id, course_id)
        if entry is None:
            return False
        self._remove_entry(uow, entry)
        logger.info("Waitlist entry %s superseded by registration", entry.id)
        return True

    def supersede(self, student_id: str, course_id: str) -> bool:
        """Locked wrapper around ``stage_supersede``."""
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            return self.stage_supersede(uow, student_id, course_id)

    # --- Helpers ---

    def registration_link(self, token: str) -> str:
        return f"{self.portal_base_url}/register/waitlist?token={token}"

    def _course_of(self, entry_id: str) -> str:
        with self.store.unit_of_work() as uow:
            return uow.get_waitlist_entry(entry_id).course_id

    def _stage_notify(
        self, uow: StoreSession, entry: WaitlistEntry, expires_hours: int | None
    ) -> Notification:
        hours = self.default_expires_hours if expires_hours is None else expires_hours
        if hours <= 0:
            raise ValidationError("expires_hours must be positive", field="expires_hours")

        was_active = entry.status == WaitlistStatus.ACTIVE.value
        now = datetime.now(UTC)
        entry.status = WaitlistStatus.NOTIFIED.value
        entry.notification_sent = True
        entry.notification_sent_at = now
        entry.notification_expires_at = now + timedelta(hours=hours)
        entry.payment_link_token = secrets.token_urlsafe(32)
        uow.session.flush()

        if was_active:
            remaining = [
                e for e in uow.list_waitlist(entry.course_id, WaitlistStatus.ACTIVE)
                if e.id != entry.id
            ]
            uow.resequence_waitlist(remaining)

        logger.info("Notified waitlist entry %s (expires in %dh)", entry.id, hours)
        student = uow.get_student(entry.student_id)
        course = uow.require_course(entry.course_id)
        return messages.waitlist_spot_available(
            student,
            course,
            self.registration_link(entry.payment_link_token),
            entry.notification_expires_at,
        )

    def _deliver(self, entry: WaitlistEntry, notification: Notification) -> NotifyResult:
        result = self.dispatcher.send(notification)
        return NotifyResult(entry=entry, email_sent=result.sent, email_error=result.error)

    @staticmethod
    def _remove_entry(uow: StoreSession, entry: WaitlistEntry) -> None:
        was_active = entry.status == WaitlistStatus.ACTIVE.value
        course_id = entry.course_id
        uow.delete_waitlist_entry(entry)
        if was_active:
            uow.resequence_waitlist(uow.list_waitlist(course_id, WaitlistStatus.ACTIVE))

    @staticmethod
    def _clear_notification(entry: WaitlistEntry) -> None:
        entry.notification_sent = False
        entry.notification_sent_at = None
        entry.notification_expires_at = None
        entry.payment_link_token = None
