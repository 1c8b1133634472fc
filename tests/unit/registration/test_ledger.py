"""Unit tests for RegistrationLedger."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from studioreg.exceptions import ValidationError
from studioreg.notifications import NotificationDispatcher
from studioreg.registration import (
    CourseFullError,
    DuplicateRegistrationError,
    InvalidTransitionError,
    RegistrationEdit,
    RegistrationLedger,
    normalize_amount,
)
from studioreg.store import (
    CourseNotFoundError,
    PaymentStatus,
    RegistrationNotFoundError,
    StudentNotFoundError,
)


@pytest.mark.unit
class TestNormalizeAmount:
    """Tests for normalize_amount."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("25", Decimal("25.00")), (19.999, Decimal("20.00")), (0, Decimal("0.00"))],
    )
    def test_rounds_to_cents(self, value: object, expected: Decimal) -> None:
        """Amounts are rounded to whole cents."""
        assert normalize_amount(value) == expected

    @pytest.mark.parametrize("value", ["-1", "abc", "NaN", "Infinity", None])
    def test_rejects_invalid(self, value: object) -> None:
        """Negative, non-numeric and non-finite amounts are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            normalize_amount(value)

        assert exc_info.value.field == "payment_amount"


@pytest.mark.unit
class TestCreate:
    """Tests for create."""

    def test_create_pending(self, ledger: RegistrationLedger, make_course, make_student) -> None:
        """A new registration starts pending with a normalized amount."""
        course = make_course()
        student = make_student()

        result = ledger.create(student.id, course.id, Decimal("25"), "per-class")

        assert result.deduped is False
        assert result.registration.status == PaymentStatus.PENDING
        assert result.registration.payment_amount == Decimal("25.00")
        assert result.registration.registration_type == "per-class"
        assert result.registration.created_from_waitlist is False

    def test_create_twice_returns_pending(
        self, ledger: RegistrationLedger, make_course, make_student
    ) -> None:
        """A repeat request returns the existing pending registration."""
        course = make_course()
        student = make_student()

        first = ledger.create(student.id, course.id, Decimal("25"), "per-class")
        second = ledger.create(student.id, course.id, Decimal("30"), "per-class")

        assert second.deduped is True
        assert second.registration.id == first.registration.id
        assert len(ledger.list_registrations(course_id=course.id)) == 1

    def test_completed_is_duplicate(
        self, ledger: RegistrationLedger, make_course, make_student, make_registration
    ) -> None:
        """A student with a completed registration cannot register again."""
        course = make_course()
        student = make_student()
        existing = make_registration(student.id, course.id, status="completed")

        with pytest.raises(DuplicateRegistrationError) as exc_info:
            ledger.create(student.id, course.id, Decimal("25"), "per-class")

        assert exc_info.value.registration_id == existing.id

    def test_full_course(
        self, ledger: RegistrationLedger, make_course, make_student, make_registration
    ) -> None:
        """A full course turns new registrations away."""
        course = make_course(capacity=1)
        other = make_student(email="other@example.com")
        make_registration(other.id, course.id, status="completed")
        student = make_student()

        with pytest.raises(CourseFullError) as exc_info:
            ledger.create(student.id, course.id, Decimal("25"), "per-class")

        assert exc_info.value.course_id == course.id
        assert "waitlist" in str(exc_info.value)

    def test_inactive_course(self, ledger: RegistrationLedger, make_course, make_student) -> None:
        """Inactive courses cannot be registered for."""
        course = make_course(is_active=False)
        student = make_student()

        with pytest.raises(CourseNotFoundError):
            ledger.create(student.id, course.id, Decimal("25"), "per-class")

    def test_unknown_student(self, ledger: RegistrationLedger, make_course) -> None:
        """Unknown students raise StudentNotFoundError."""
        course = make_course()

        with pytest.raises(StudentNotFoundError):
            ledger.create("missing", course.id, Decimal("25"), "per-class")


@pytest.mark.unit
class TestConfirmPayment:
    """Tests for confirm_payment."""

    def test_confirm(
        self,
        ledger: RegistrationLedger,
        dispatcher: NotificationDispatcher,
        mock_sender: MagicMock,
        make_course,
        make_student,
    ) -> None:
        """Confirming marks the registration paid and emails the student."""
        course = make_course()
        student = make_student()
        reg = ledger.create(student.id, course.id, Decimal("25"), "per-class").registration

        confirmed = ledger.confirm_payment(reg.id, payment_method="Cash", note="paid at desk")

        assert confirmed.status == PaymentStatus.COMPLETED
        assert confirmed.payment_method == "Cash"
        assert confirmed.transaction_reference == "paid at desk"

        dispatcher.shutdown(wait=True)
        mock_sender.send.assert_called_once()
        notification = mock_sender.send.call_args.args[0]
        assert notification.to_email == student.email
        assert notification.subject.startswith("Registration Confirmed")
        assert "Tuesdays 7:00 PM - 8:00 PM" in notification.body

    def test_default_payment_method(
        self, ledger: RegistrationLedger, make_course, make_student
    ) -> None:
        """Payment method defaults to Venmo."""
        reg = ledger.create(
            make_student().id, make_course().id, Decimal("25"), "per-class"
        ).registration

        assert ledger.confirm_payment(reg.id).payment_method == "Venmo"

    def test_pending_holds_no_place(
        self, ledger: RegistrationLedger, make_course, make_student
    ) -> None:
        """Two pending registrations race for the last spot; only one confirms."""
        course = make_course(capacity=1)
        first = ledger.create(
            make_student(email="a@example.com").id, course.id, Decimal("25"), "per-class"
        ).registration
        second = ledger.create(
            make_student(email="b@example.com").id, course.id, Decimal("25"), "per-class"
        ).registration

        ledger.confirm_payment(first.id)
        with pytest.raises(CourseFullError):
            ledger.confirm_payment(second.id)

        assert ledger.get(second.id).status == PaymentStatus.PENDING

    def test_confirm_non_pending(
        self, ledger: RegistrationLedger, make_course, make_student, make_registration
    ) -> None:
        """Only pending registrations can be confirmed."""
        reg = make_registration(make_student().id, make_course().id, status="completed")

        with pytest.raises(InvalidTransitionError):
            ledger.confirm_payment(reg.id)

    def test_confirm_unknown(self, ledger: RegistrationLedger) -> None:
        """Unknown registrations raise RegistrationNotFoundError."""
        with pytest.raises(RegistrationNotFoundError):
            ledger.confirm_payment("missing")

    def test_email_failure_keeps_confirmation(
        self,
        ledger: RegistrationLedger,
        dispatcher: NotificationDispatcher,
        mock_sender: MagicMock,
        make_course,
        make_student,
    ) -> None:
        """A failing email never undoes the payment confirmation."""
        mock_sender.send.side_effect = RuntimeError("smtp down")
        reg = ledger.create(
            make_student().id, make_course().id, Decimal("25"), "per-class"
        ).registration

        ledger.confirm_payment(reg.id)
        dispatcher.shutdown(wait=True)

        assert ledger.get(reg.id).status == PaymentStatus.COMPLETED


@pytest.mark.unit
class TestFailAndCancel:
    """Tests for mark_failed and cancel."""

    def test_mark_failed(self, ledger: RegistrationLedger, make_course, make_student) -> None:
        """A pending registration can be marked failed; failed is terminal."""
        reg = ledger.create(
            make_student().id, make_course().id, Decimal("25"), "per-class"
        ).registration

        failed = ledger.mark_failed(reg.id, note="card declined")

        assert failed.status == PaymentStatus.FAILED
        assert failed.transaction_reference == "card declined"
        with pytest.raises(InvalidTransitionError):
            ledger.confirm_payment(reg.id)
        with pytest.raises(InvalidTransitionError):
            ledger.cancel(reg.id)

    def test_cancel_records_audit(
        self,
        ledger: RegistrationLedger,
        dispatcher: NotificationDispatcher,
        mock_sender: MagicMock,
        make_course,
        make_student,
    ) -> None:
        """Cancel stamps who, when and why, and emails the student."""
        reg = ledger.create(
            make_student().id, make_course().id, Decimal("25"), "per-class"
        ).registration

        canceled = ledger.cancel(reg.id, reason="schedule conflict", actor_id="admin-7")

        assert canceled.status == PaymentStatus.CANCELED
        assert canceled.canceled_by == "admin-7"
        assert canceled.cancellation_reason == "schedule conflict"
        assert canceled.canceled_at is not None

        dispatcher.shutdown(wait=True)
        notification = mock_sender.send.call_args.args[0]
        assert notification.subject.startswith("Registration Canceled")
        assert "schedule conflict" in notification.body

    def test_cancel_completed_frees_place(
        self, ledger: RegistrationLedger, make_course, make_student, make_registration
    ) -> None:
        """Canceling a completed registration opens its spot."""
        course = make_course(capacity=1)
        held = make_registration(make_student().id, course.id, status="completed")

        ledger.cancel(held.id)
        result = ledger.create(
            make_student(email="next@example.com").id, course.id, Decimal("25"), "per-class"
        )

        ledger.confirm_payment(result.registration.id)

    def test_cancel_twice(self, ledger: RegistrationLedger, make_course, make_student) -> None:
        """Canceled registrations cannot be canceled again."""
        reg = ledger.create(
            make_student().id, make_course().id, Decimal("25"), "per-class"
        ).registration
        ledger.cancel(reg.id)

        with pytest.raises(InvalidTransitionError):
            ledger.cancel(reg.id)


@pytest.mark.unit
class TestUncancel:
    """Tests for uncancel."""

    def test_uncancel_clears_audit(
        self, ledger: RegistrationLedger, make_course, make_student
    ) -> None:
        """Uncancel returns to pending and clears the cancellation fields."""
        reg = ledger.create(
            make_student().id, make_course().id, Decimal("25"), "per-class"
        ).registration
        ledger.cancel(reg.id, reason="oops")

        result = ledger.uncancel(reg.id)

        assert result.registration.status == PaymentStatus.PENDING
        assert result.registration.canceled_at is None
        assert result.registration.canceled_by is None
        assert result.registration.cancellation_reason is None
        assert result.capacity_available is True

    def test_uncancel_reports_full_course(
        self, ledger: RegistrationLedger, make_course, make_student, make_registration
    ) -> None:
        """Uncancel succeeds on a full course but says there is no room."""
        course = make_course(capacity=1)
        reg = ledger.create(make_student().id, course.id, Decimal("25"), "per-class").registration
        ledger.cancel(reg.id)
        make_registration(make_student(email="b@example.com").id, course.id, status="completed")

        result = ledger.uncancel(reg.id)

        assert result.registration.status == PaymentStatus.PENDING
        assert result.capacity_available is False

    def test_uncancel_conflicts_with_newer_registration(
        self, ledger: RegistrationLedger, make_course, make_student
    ) -> None:
        """A student who registered again cannot have the old one restored."""
        course = make_course()
        student = make_student()
        old = ledger.create(student.id, course.id, Decimal("25"), "per-class").registration
        ledger.cancel(old.id)
        ledger.create(student.id, course.id, Decimal("25"), "per-class")

        with pytest.raises(DuplicateRegistrationError):
            ledger.uncancel(old.id)

    def test_uncancel_requires_canceled(
        self, ledger: RegistrationLedger, make_course, make_student
    ) -> None:
        """Only canceled registrations can be uncanceled."""
        reg = ledger.create(
            make_student().id, make_course().id, Decimal("25"), "per-class"
        ).registration

        with pytest.raises(InvalidTransitionError):
            ledger.uncancel(reg.id)


@pytest.mark.unit
class TestEdit:
    """Tests for edit."""

    def test_edit_amount_and_contact(
        self, ledger: RegistrationLedger, make_course, make_student
    ) -> None:
        """Amount and contact details change; the status does not."""
        student = make_student(dance_experience="2 years")
        reg = ledger.create(student.id, make_course().id, Decimal("25"), "per-class").registration

        edited = ledger.edit(
            reg.id,
            RegistrationEdit(
                payment_amount=Decimal("20"),
                first_name="Robin",
                email="Robin@Example.com",
                phone="555-0199",
                special_requests="  ",
            ),
        )

        assert edited.payment_amount == Decimal("20.00")
        assert edited.status == PaymentStatus.PENDING
        assert edited.special_requests is None
        with ledger.store.unit_of_work() as uow:
            updated = uow.get_student(student.id)
        assert updated.first_name == "Robin"
        assert updated.email == "robin@example.com"
        assert updated.profile_complete is True

    def test_edit_email_taken(
        self, ledger: RegistrationLedger, make_course, make_student
    ) -> None:
        """An email belonging to another student is rejected."""
        make_student(email="taken@example.com")
        student = make_student(email="mine@example.com")
        reg = ledger.create(student.id, make_course().id, Decimal("25"), "per-class").registration

        with pytest.raises(ValidationError) as exc_info:
            ledger.edit(reg.id, RegistrationEdit(email="taken@example.com"))

        assert exc_info.value.field == "email"

    def test_edit_blank_first_name(
        self, ledger: RegistrationLedger, make_course, make_student
    ) -> None:
        """First name cannot be blanked out."""
        reg = ledger.create(
            make_student().id, make_course().id, Decimal("25"), "per-class"
        ).registration

        with pytest.raises(ValidationError) as exc_info:
            ledger.edit(reg.id, RegistrationEdit(first_name="  "))

        assert exc_info.value.field == "first_name"

    def test_edit_negative_amount(
        self, ledger: RegistrationLedger, make_course, make_student
    ) -> None:
        """Negative amounts are rejected and nothing changes."""
        reg = ledger.create(
            make_student().id, make_course().id, Decimal("25"), "per-class"
        ).registration

        with pytest.raises(ValidationError):
            ledger.edit(reg.id, RegistrationEdit(first_name="Robin", payment_amount=Decimal("-5")))

        assert ledger.get(reg.id).payment_amount == Decimal("25.00")
