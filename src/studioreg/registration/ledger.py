"""RegistrationLedger - lifecycle of a single registration."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from studioreg.catalog.pricing import CENT
from studioreg.catalog.schedule import compute_schedule_info
from studioreg.exceptions import ValidationError
from studioreg.notifications import NotificationDispatcher, messages
from studioreg.registration.exceptions import (
    CourseFullError,
    DuplicateRegistrationError,
    InvalidTransitionError,
)
from studioreg.registration.models import (
    TRANSITIONS,
    CreateResult,
    RegistrationEdit,
    UncancelResult,
)
from studioreg.store.models import PaymentStatus, Registration
from studioreg.students.resolver import normalize_email, profile_is_complete

if TYPE_CHECKING:
    from studioreg.capacity import CapacityGate
    from studioreg.notifications import Notification
    from studioreg.store import StoreSession, StudioStore

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = "Venmo"


def normalize_amount(value: Any) -> Decimal:
    """Coerce a payment amount to a non-negative, cent-rounded Decimal.

    Raises:
        ValidationError: If the amount is missing, not a number, or negative
    """
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError("Payment amount must be a number", field="payment_amount") from e
    if not amount.is_finite() or amount < 0:
        raise ValidationError(
            "Payment amount must be zero or more", field="payment_amount"
        )
    return amount.quantize(CENT)


class RegistrationLedger:
    """Owns registration rows and their payment status transitions.

    Allowed transitions::

        pending   -> completed | failed | canceled
        completed -> canceled
        canceled  -> pending

    Anything that consumes capacity (create, confirm, uncancel) runs under
    the course lock so the capacity check and the write are one atomic step.
    Emails go out after the transaction commits and can never undo it.
    """

    def __init__(
        self,
        store: StudioStore,
        gate: CapacityGate,
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        """Initialize the RegistrationLedger.

        Args:
            store: StudioStore instance for persistence.
            gate: CapacityGate deciding admission.
            dispatcher: Email dispatcher; defaults to one with delivery disabled.
        """
        self.store = store
        self.gate = gate
        self.dispatcher = dispatcher if dispatcher is not None else NotificationDispatcher()

    # --- Creation ---

    def stage(
        self,
        uow: StoreSession,
        student_id: str,
        course_id: str,
        payment_amount: Decimal,
        registration_type: str,
        created_from_waitlist: bool = False,
        special_requests: str | None = None,
    ) -> CreateResult:
        """Create a pending registration inside a unit of work that holds the course lock.

        A pending registration for the same student and course is returned as
        is instead of inserting a second one.

        Raises:
            DuplicateRegistrationError: If a completed registration already exists
            CourseFullError: If the course has no capacity left
        """
        completed = uow.find_registration(student_id, course_id, [PaymentStatus.COMPLETED])
        if completed is not None:
            logger.info(
                "Student %s already registered for course %s (%s)",
                student_id,
                course_id,
                completed.id,
            )
            raise DuplicateRegistrationError(
                "You are already registered for this course", registration_id=completed.id
            )

        pending = uow.find_registration(student_id, course_id, [PaymentStatus.PENDING])
        if pending is not None:
            logger.info("Returning existing pending registration %s", pending.id)
            return CreateResult(registration=pending, deduped=True)

        check = self.gate.check_capacity(uow, course_id)
        if not check.admitted:
            raise CourseFullError(
                "This course is full. Would you like to join the waitlist?", course_id=course_id
            )

        registration = uow.insert_registration(
            Registration(
                student_id=student_id,
                course_id=course_id,
                payment_amount=normalize_amount(payment_amount),
                registration_type=registration_type,
                created_from_waitlist=created_from_waitlist,
                special_requests=special_requests,
            )
        )
        logger.info(
            "Created pending %s registration %s (student %s, course %s)",
            registration_type,
            registration.id,
            student_id,
            course_id,
        )
        return CreateResult(registration=registration, deduped=False)

    def create(
        self,
        student_id: str,
        course_id: str,
        payment_amount: Decimal,
        registration_type: str,
        created_from_waitlist: bool = False,
        special_requests: str | None = None,
    ) -> CreateResult:
        """Create (or return the existing) pending registration.

        Args:
            student_id: The registering student.
            course_id: The course; must exist and be active.
            payment_amount: Amount owed.
            registration_type: Free-text tag such as ``full-course``.
            created_from_waitlist: Whether this came from a waitlist link.
            special_requests: Optional note from the student.

        Returns:
            CreateResult with ``deduped=True`` when an existing pending row was returned.

        Raises:
            CourseNotFoundError: If the course doesn't exist or is inactive
            StudentNotFoundError: If the student doesn't exist
            DuplicateRegistrationError: If a completed registration already exists
            CourseFullError: If the course has no capacity left
        """
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            uow.require_course(course_id, active_only=True)
            uow.get_student(student_id)
            return self.stage(
                uow,
                student_id,
                course_id,
                payment_amount,
                registration_type,
                created_from_waitlist=created_from_waitlist,
                special_requests=special_requests,
            )

    # --- Transitions ---

    def confirm_payment(
        self,
        registration_id: str,
        payment_method: str = DEFAULT_PAYMENT_METHOD,
        note: str | None = None,
    ) -> Registration:
        """Mark a pending registration as paid.

        Capacity and the one-completed-per-student rule are re-checked under
        the course lock, so two confirmations racing for the last spot cannot
        both succeed. A confirmation email is queued after commit.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
            InvalidTransitionError: If the registration is not pending
            DuplicateRegistrationError: If the student already holds a completed registration
            CourseFullError: If the course filled up since the registration was created
        """
        course_id = self._course_of(registration_id)
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            registration = uow.get_registration(registration_id)
            self._ensure_transition(registration, PaymentStatus.COMPLETED)

            other = uow.find_registration(
                registration.student_id,
                course_id,
                [PaymentStatus.COMPLETED],
                exclude_id=registration.id,
            )
            if other is not None:
                raise DuplicateRegistrationError(
                    "Student is already registered for this course", registration_id=other.id
                )

            if not self.gate.check_capacity(uow, course_id).admitted:
                raise CourseFullError(
                    "Course is full; payment cannot be confirmed", course_id=course_id
                )

            uow.update_registration_status(
                registration,
                PaymentStatus.COMPLETED,
                payment_method=payment_method,
                transaction_reference=note,
            )
            notification = self._build(uow, registration, "confirmed")

        logger.info("Registration %s confirmed (%s)", registration_id, payment_method)
        self.dispatcher.send_in_background(notification)
        return registration

    def mark_failed(self, registration_id: str, note: str | None = None) -> Registration:
        """Record that payment for a pending registration did not go through.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
            InvalidTransitionError: If the registration is not pending
        """
        with self.store.unit_of_work() as uow:
            registration = uow.get_registration(registration_id)
            self._ensure_transition(registration, PaymentStatus.FAILED)
            fields = {"transaction_reference": note} if note else {}
            uow.update_registration_status(registration, PaymentStatus.FAILED, **fields)

        logger.info("Registration %s marked failed", registration_id)
        return registration

    def cancel(
        self, registration_id: str, reason: str | None = None, actor_id: str = "admin"
    ) -> Registration:
        """Cancel a pending or completed registration, freeing its place.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
            InvalidTransitionError: If the registration is already canceled or failed
        """
        course_id = self._course_of(registration_id)
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            registration = uow.get_registration(registration_id)
            self._ensure_transition(registration, PaymentStatus.CANCELED)
            uow.update_registration_status(
                registration,
                PaymentStatus.CANCELED,
                canceled_at=datetime.now(UTC),
                canceled_by=actor_id,
                cancellation_reason=reason,
            )
            notification = self._build(uow, registration, "canceled")

        logger.info("Registration %s canceled by %s", registration_id, actor_id)
        self.dispatcher.send_in_background(notification)
        return registration

    def uncancel(self, registration_id: str) -> UncancelResult:
        """Move a canceled registration back to pending.

        Payment has to be confirmed again; the result says whether the course
        currently has room for it.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
            InvalidTransitionError: If the registration is not canceled
            DuplicateRegistrationError: If the student has since registered again
        """
        course_id = self._course_of(registration_id)
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            registration = uow.get_registration(registration_id)
            self._ensure_transition(registration, PaymentStatus.PENDING)

            other = uow.find_registration(
                registration.student_id,
                course_id,
                [PaymentStatus.PENDING, PaymentStatus.COMPLETED],
                exclude_id=registration.id,
            )
            if other is not None:
                raise DuplicateRegistrationError(
                    f"Student already has a {other.payment_status} registration for this course",
                    registration_id=other.id,
                )

            uow.update_registration_status(
                registration,
                PaymentStatus.PENDING,
                canceled_at=None,
                canceled_by=None,
                cancellation_reason=None,
            )
            capacity_available = self.gate.check_capacity(uow, course_id).admitted

        logger.info(
            "Registration %s uncanceled (capacity available: %s)",
            registration_id,
            capacity_available,
        )
        return UncancelResult(registration=registration, capacity_available=capacity_available)

    def edit(self, registration_id: str, changes: RegistrationEdit) -> Registration:
        """Apply admin edits to the amount and the student's contact details.

        The payment status is never touched here.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
            ValidationError: If a value is malformed or the email belongs to someone else
        """
        with self.store.unit_of_work() as uow:
            registration = uow.get_registration(registration_id)
            student = uow.get_student(registration.student_id)

            student_fields: dict[str, Any] = {}
            if changes.email is not None:
                email = normalize_email(changes.email)
                owner = uow.find_student_by_email(email)
                if owner is not None and owner.id != student.id:
                    raise ValidationError(
                        "That email belongs to another student", field="email"
                    )
                student_fields["email"] = email
            if changes.first_name is not None:
                first_name = changes.first_name.strip()
                if not first_name:
                    raise ValidationError("First name cannot be empty", field="first_name")
                student_fields["first_name"] = first_name
            if changes.last_name is not None:
                student_fields["last_name"] = changes.last_name.strip()
            if changes.phone is not None:
                student_fields["phone"] = changes.phone.strip() or None

            if student_fields:
                uow.update_student(student, **student_fields)
                uow.update_student(student, profile_complete=profile_is_complete(student))

            if changes.payment_amount is not None:
                registration.payment_amount = normalize_amount(changes.payment_amount)
            if changes.special_requests is not None:
                registration.special_requests = changes.special_requests.strip() or None
            uow.session.flush()

        logger.info("Registration %s edited", registration_id)
        return registration

    # --- Queries ---

    def get(self, registration_id: str) -> Registration:
        """Get registration by ID.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
        """
        with self.store.unit_of_work() as uow:
            return uow.get_registration(registration_id)

    def list_registrations(
        self, course_id: str | None = None, status: PaymentStatus | None = None
    ) -> list[Registration]:
        """List registrations, optionally filtered by course and status."""
        with self.store.unit_of_work() as uow:
            return uow.list_registrations(course_id=course_id, status=status)

    # --- Helpers ---

    def _course_of(self, registration_id: str) -> str:
        with self.store.unit_of_work() as uow:
            return uow.get_registration(registration_id).course_id

    @staticmethod
    def _ensure_transition(registration: Registration, target: PaymentStatus) -> None:
        current = registration.status
        if target not in TRANSITIONS[current]:
            raise InvalidTransitionError(
                f"Cannot change registration from {current.value} to {target.value}"
            )

    @staticmethod
    def _build(uow: StoreSession, registration: Registration, kind: str) -> Notification:
        student = uow.get_student(registration.student_id)
        course = uow.require_course(registration.course_id)
        if kind == "canceled":
            return messages.registration_canceled(
                student, course, registration.cancellation_reason
            )
        schedule = compute_schedule_info(course, uow.list_slots_for_course(course.id))
        return messages.registration_confirmed(student, course, registration, schedule)
