"""RegistrationPortal - the operations exposed to the web and admin layer."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from studioreg.capacity import CapacityGate
from studioreg.catalog import (
    CatalogReader,
    build_availability,
    build_course,
    price_for,
    split_amount,
)
from studioreg.eligibility import combo_eligible, ensure_course_access
from studioreg.exceptions import ValidationError
from studioreg.notifications import EmailClient, NotificationDispatcher
from studioreg.portal.models import BundleResult, ComboResult, DashboardStats, ProfileUpdate
from studioreg.registration import (
    BundleRejectedError,
    RegistrationClosedError,
    RegistrationLedger,
    RegistrationType,
    normalize_amount,
)
from studioreg.store import CourseType, PaymentStatus, PricingType, StudioStore
from studioreg.students import ProfileIncompleteError, StudentResolver
from studioreg.waitlist import WaitlistCoordinator

if TYPE_CHECKING:
    from collections.abc import Sequence

    from studioreg.catalog import CourseAvailability, CourseDefinition
    from studioreg.config import Settings
    from studioreg.registration import CreateResult, RegistrationEdit, UncancelResult
    from studioreg.store import Course, Registration, StoreSession, Student, WaitlistEntry
    from studioreg.students import ProfileStatus, StudentProfile
    from studioreg.waitlist import JoinResult, NotifyResult

logger = logging.getLogger(__name__)

REGISTRATION_OPEN_KEY = "registration_open"

_DEFAULT_PRICING = {
    CourseType.MULTI_WEEK.value: PricingType.FULL_PACKAGE.value,
    CourseType.DROP_IN.value: PricingType.DROP_IN.value,
    CourseType.CREW_PRACTICE.value: PricingType.DROP_IN.value,
}

_DEFAULT_REGISTRATION_TYPE = {
    CourseType.MULTI_WEEK.value: RegistrationType.FULL_COURSE.value,
    CourseType.DROP_IN.value: RegistrationType.PER_CLASS.value,
    CourseType.CREW_PRACTICE.value: RegistrationType.CREW_PRACTICE.value,
}


def _unique(ids: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(ids))


class RegistrationPortal:
    """Entry point for every registration, waitlist and admin operation.

    Each public method is one transaction. Registration paths run inside a
    unit of work that locks every course they touch, so the student upsert,
    the capacity checks and the inserts commit together or not at all.
    """

    def __init__(
        self,
        store: StudioStore,
        catalog: CatalogReader,
        students: StudentResolver,
        gate: CapacityGate,
        ledger: RegistrationLedger,
        waitlist: WaitlistCoordinator,
        bundle_max_classes: int = 3,
        crew_house_combo_price: Decimal = Decimal("200.00"),
    ) -> None:
        """Initialize the RegistrationPortal.

        Args:
            store: StudioStore instance for persistence.
            catalog: CatalogReader for course listings.
            students: StudentResolver for identity and classification.
            gate: CapacityGate for admission and bundle checks.
            ledger: RegistrationLedger owning registration rows.
            waitlist: WaitlistCoordinator owning waitlist queues.
            bundle_max_classes: Largest allowed drop-in bundle.
            crew_house_combo_price: Total price of the crew + house combo.
        """
        self.store = store
        self.catalog = catalog
        self.students = students
        self.gate = gate
        self.ledger = ledger
        self.waitlist = waitlist
        self.bundle_max_classes = bundle_max_classes
        self.crew_house_combo_price = crew_house_combo_price

    @classmethod
    def from_settings(
        cls, settings: Settings, store: StudioStore | None = None
    ) -> RegistrationPortal:
        """Wire a portal from configuration.

        Email delivery is enabled only when ``email_api_url`` is set.
        """
        store = store if store is not None else StudioStore(settings.database_url)
        sender = None
        if settings.email_api_url:
            sender = EmailClient(
                api_url=settings.email_api_url,
                sender=settings.email_sender,
                api_key=settings.email_api_key,
            )
        dispatcher = NotificationDispatcher(sender)
        gate = CapacityGate(week_gate_cutoff=settings.bundle_week_gate_cutoff)
        return cls(
            store=store,
            catalog=CatalogReader(store),
            students=StudentResolver(store),
            gate=gate,
            ledger=RegistrationLedger(store, gate, dispatcher),
            waitlist=WaitlistCoordinator(
                store,
                dispatcher,
                portal_base_url=settings.portal_base_url,
                default_expires_hours=settings.waitlist_expires_hours,
            ),
            bundle_max_classes=settings.bundle_max_classes,
            crew_house_combo_price=settings.crew_house_combo_price,
        )

    def close(self) -> None:
        """Drain queued emails and release the database."""
        dispatchers = {id(d): d for d in (self.ledger.dispatcher, self.waitlist.dispatcher)}
        for dispatcher in dispatchers.values():
            dispatcher.shutdown(wait=True)
            if isinstance(dispatcher.sender, EmailClient):
                dispatcher.sender.close()
        self.store.close()

    # --- Catalog ---

    def list_courses(self, student_type: str | None = None) -> list[CourseAvailability]:
        """Active courses with availability; filtered by visibility when a type is given."""
        if student_type is None:
            return self.catalog.list_courses()
        return self.catalog.list_eligible_courses(student_type)

    def get_course(self, course_id: str) -> CourseAvailability | None:
        """A course with availability, or None if it doesn't exist."""
        return self.catalog.get_course_with_availability(course_id)

    def add_course(self, definition: CourseDefinition) -> CourseAvailability:
        """Validate and store a new course with its slots and pricing.

        Raises:
            InvalidCourseError: If the definition breaks a catalog rule
        """
        course, slots = build_course(definition)
        with self.store.unit_of_work() as uow:
            uow.add_course(course, slots)
            availability = build_availability(uow, course, 0)
        logger.info("Added %s course %s (%s)", course.course_type, course.id, course.name)
        return availability

    # --- Students ---

    def check_profile(self, email: str) -> ProfileStatus:
        """Report a student's type and profile completeness, creating the record if new."""
        return self.students.check_profile(email)

    def upsert_student(self, profile: StudentProfile) -> ProfileUpdate:
        """Create or update a student's profile.

        Returns:
            ProfileUpdate with the stored student and, once the profile is
            complete, the courses they may register for.

        Raises:
            ValidationError: If the email is missing or malformed
        """
        student = self.students.upsert_student(profile)
        if not student.profile_complete:
            return ProfileUpdate(student=student)
        return ProfileUpdate(
            student=student,
            courses=self.catalog.list_eligible_courses(student.student_type),
        )

    def courses_for_student(self, email: str) -> list[CourseAvailability]:
        """Courses visible to the student, once their profile is complete.

        Raises:
            ProfileIncompleteError: If the student is unknown or their profile is incomplete
        """
        student = self.students.find_by_email(email)
        if student is None or not student.profile_complete:
            raise ProfileIncompleteError(
                "Please complete your profile before browsing courses", field="profile"
            )
        return self.catalog.list_eligible_courses(student.student_type)

    def classify_student(self, student_id: str, student_type: str) -> Student:
        """Admin: set a student's type."""
        return self.students.classify(student_id, student_type)

    # --- Registration ---

    def register_for_course(
        self,
        profile: StudentProfile,
        course_id: str,
        payment_amount: Decimal | None = None,
        registration_type: str | None = None,
        special_requests: str | None = None,
    ) -> CreateResult:
        """Register a student (created or updated from ``profile``) for one course.

        Without an explicit amount the course's own price is used: the
        full-package price for multi-week courses, drop-in otherwise.

        Raises:
            RegistrationClosedError: If registration is switched off
            CourseNotFoundError: If the course doesn't exist or is inactive
            AccessDeniedError: If the course is restricted to another student type
            DuplicateRegistrationError: If the student already holds a completed registration
            CourseFullError: If the course has no capacity left
        """
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            self._ensure_open(uow)
            course = uow.require_course(course_id, active_only=True)
            student = self.students.upsert_in(uow, profile)
            ensure_course_access(course, student)

            if payment_amount is None:
                payment_amount = self._course_price(uow, course)
            return self.ledger.stage(
                uow,
                student.id,
                course.id,
                payment_amount,
                registration_type or _DEFAULT_REGISTRATION_TYPE[course.course_type],
                special_requests=special_requests,
            )

    def register_bundle(
        self,
        profile: StudentProfile,
        course_ids: Sequence[str],
        total_amount: Decimal | None = None,
    ) -> BundleResult:
        """Register for up to ``bundle_max_classes`` drop-in classes in one checkout.

        Every course is checked before anything is written; one rejection
        (final week, mixed class times, a full course, a duplicate) leaves
        no registration behind. The total is split across the classes.

        Raises:
            ValidationError: If the bundle is empty, too large, or names a non drop-in course
            BundleRejectedError: With reason course_full, mixed_levels_not_allowed or week_4_blocked
        """
        ids = _unique(course_ids)
        if not 1 <= len(ids) <= self.bundle_max_classes:
            raise ValidationError(
                f"A bundle holds between 1 and {self.bundle_max_classes} classes",
                field="course_ids",
            )

        with self.store.unit_of_work(lock_courses=ids) as uow:
            self._ensure_open(uow)
            courses = [uow.require_course(course_id, active_only=True) for course_id in ids]
            for course in courses:
                if course.course_type != CourseType.DROP_IN.value:
                    raise ValidationError(
                        f"'{course.name}' is not a drop-in class", field="course_ids"
                    )

            student = self.students.upsert_in(uow, profile)
            for course in courses:
                ensure_course_access(course, student)

            check = self.gate.check_bundle(uow, courses)
            if not check.admitted:
                raise BundleRejectedError(
                    check.message or "Bundle rejected",
                    reason=check.reason,
                    course_id=check.course_id,
                )

            if total_amount is None:
                total_amount = sum(
                    (self._course_price(uow, course) for course in courses), Decimal("0.00")
                )
            total_amount = normalize_amount(total_amount)
            shares = split_amount(total_amount, len(courses))
            registrations = [
                self.ledger.stage(
                    uow, student.id, course.id, share, RegistrationType.DROP_IN_BUNDLE.value
                ).registration
                for course, share in zip(courses, shares, strict=True)
            ]

        logger.info(
            "Bundle of %d class(es) registered for student %s", len(registrations), student.id
        )
        # A pending registration that already existed keeps its own amount
        total = sum((r.payment_amount for r in registrations), Decimal("0.00"))
        return BundleResult(registrations=registrations, total_amount=total)

    def register_crew_house_combo(
        self, profile: StudentProfile, house_course_ids: Sequence[str]
    ) -> ComboResult:
        """Crew members only: house classes at the combo price plus every crew practice.

        The combo price is split across the house classes. Each active crew
        practice gets a free ``crew_unlimited`` registration unless the
        student already holds one for it.

        Raises:
            ValidationError: If no house class is given or one is a crew practice
            AccessDeniedError: If the student is not a crew member
            CourseFullError: If any course in the combo is full
            DuplicateRegistrationError: If a house class is already paid for
        """
        house_ids = _unique(house_course_ids)
        if not house_ids:
            raise ValidationError("Select at least one house class", field="house_course_ids")

        with self.store.unit_of_work() as uow:
            crew_ids = [
                c.id
                for c in uow.list_courses(course_type=CourseType.CREW_PRACTICE.value)
                if c.id not in house_ids
            ]

        with self.store.unit_of_work(lock_courses=[*house_ids, *crew_ids]) as uow:
            self._ensure_open(uow)
            house_courses = [
                uow.require_course(course_id, active_only=True) for course_id in house_ids
            ]
            for course in house_courses:
                if course.course_type == CourseType.CREW_PRACTICE.value:
                    raise ValidationError(
                        f"'{course.name}' is a crew practice, not a house class",
                        field="house_course_ids",
                    )

            student = self.students.upsert_in(uow, profile)
            combo_eligible(student)
            for course in house_courses:
                ensure_course_access(course, student)

            shares = split_amount(self.crew_house_combo_price, len(house_courses))
            house = [
                self.ledger.stage(
                    uow, student.id, course.id, share, RegistrationType.CREW_HOUSE_COMBO.value
                ).registration
                for course, share in zip(house_courses, shares, strict=True)
            ]

            crew = []
            for course_id in crew_ids:
                course = uow.require_course(course_id, active_only=True)
                if uow.find_registration(student.id, course.id, [PaymentStatus.COMPLETED]):
                    continue
                crew.append(
                    self.ledger.stage(
                        uow,
                        student.id,
                        course.id,
                        Decimal("0.00"),
                        RegistrationType.CREW_UNLIMITED.value,
                    ).registration
                )

        logger.info(
            "Crew + house combo for student %s: %d house, %d crew",
            student.id,
            len(house),
            len(crew),
        )
        return ComboResult(house_registrations=house, crew_registrations=crew)

    def register_from_waitlist(
        self, token: str, payment_amount: Decimal | None = None
    ) -> CreateResult:
        """Register the notified student holding ``token``; the token is single use.

        Raises:
            InvalidTokenError: If the token is unknown or already used
            TokenExpiredError: If the token has expired
            RegistrationClosedError: If registration is switched off
            CourseFullError: If the spot has been taken in the meantime
        """
        course_id = self.waitlist.course_for_token(token)
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            self._ensure_open(uow)
            entry = self.waitlist.stage_redeem(uow, token)
            course = uow.require_course(course_id, active_only=True)
            student = uow.get_student(entry.student_id)
            ensure_course_access(course, student)

            if payment_amount is None:
                payment_amount = self._course_price(uow, course)
            return self.ledger.stage(
                uow,
                student.id,
                course.id,
                payment_amount,
                _DEFAULT_REGISTRATION_TYPE[course.course_type],
                created_from_waitlist=True,
            )

    # --- Registration admin ---

    def confirm_payment(
        self, registration_id: str, payment_method: str = "Venmo", note: str | None = None
    ) -> Registration:
        """Admin: mark a registration paid and drop the student's waitlist entry."""
        registration = self.ledger.confirm_payment(registration_id, payment_method, note)
        self.waitlist.supersede(registration.student_id, registration.course_id)
        return registration

    def mark_failed(self, registration_id: str, note: str | None = None) -> Registration:
        """Admin: record a failed payment."""
        return self.ledger.mark_failed(registration_id, note)

    def cancel_registration(
        self, registration_id: str, reason: str | None = None, actor_id: str = "admin"
    ) -> Registration:
        """Admin: cancel a registration. Waitlist promotion stays a separate admin step."""
        return self.ledger.cancel(registration_id, reason, actor_id)

    def uncancel_registration(self, registration_id: str) -> UncancelResult:
        """Admin: restore a canceled registration to pending."""
        return self.ledger.uncancel(registration_id)

    def edit_registration(self, registration_id: str, changes: RegistrationEdit) -> Registration:
        """Admin: edit amount and student contact details."""
        return self.ledger.edit(registration_id, changes)

    def get_registration(self, registration_id: str) -> Registration:
        return self.ledger.get(registration_id)

    def list_registrations(
        self, course_id: str | None = None, status: PaymentStatus | None = None
    ) -> list[Registration]:
        return self.ledger.list_registrations(course_id=course_id, status=status)

    # --- Waitlist ---

    def join_waitlist(self, profile: StudentProfile, course_id: str) -> JoinResult:
        """Put a student (created or updated from ``profile``) on a course's waitlist.

        Raises:
            CourseNotFoundError: If the course doesn't exist or is inactive
            AccessDeniedError: If the course is restricted to another student type
            DuplicateRegistrationError: If the student already holds a completed registration
        """
        with self.store.unit_of_work(lock_courses=[course_id]) as uow:
            course = uow.require_course(course_id, active_only=True)
            student = self.students.upsert_in(uow, profile)
            ensure_course_access(course, student)
            return self.waitlist.stage_join(uow, student.id, course.id)

    def notify_waitlist_entry(
        self, entry_id: str, expires_hours: int | None = None
    ) -> NotifyResult:
        return self.waitlist.notify(entry_id, expires_hours)

    def notify_next_on_waitlist(
        self, course_id: str, expires_hours: int | None = None
    ) -> NotifyResult:
        return self.waitlist.notify_next(course_id, expires_hours)

    def remove_from_waitlist(self, entry_id: str) -> None:
        self.waitlist.remove(entry_id)

    def reorder_waitlist(self, entry_id: str, new_position: int) -> WaitlistEntry:
        return self.waitlist.reorder(entry_id, new_position)

    def list_waitlist(self, course_id: str) -> list[WaitlistEntry]:
        return self.waitlist.list_for_course(course_id)

    # --- Settings and maintenance ---

    def is_registration_open(self) -> bool:
        """Registration is open unless the setting exists and is not ``"true"``."""
        with self.store.unit_of_work() as uow:
            return self._registration_open(uow)

    def set_registration_open(self, is_open: bool) -> None:
        """Admin: switch public registration on or off."""
        self.update_setting(REGISTRATION_OPEN_KEY, "true" if is_open else "false")

    def get_settings(self) -> dict[str, str]:
        with self.store.unit_of_work() as uow:
            return uow.list_settings()

    def update_setting(self, key: str, value: str) -> None:
        """Admin: store a system setting."""
        key = key.strip()
        if not key:
            raise ValidationError("Setting key is required", field="key")
        with self.store.unit_of_work() as uow:
            uow.set_setting(key, value)
        logger.info("Setting %s updated to %r", key, value)

    def bulk_reset(
        self, include_courses: bool = False, actor_id: str = "admin"
    ) -> dict[str, int]:
        """Admin: delete waitlists, registrations and students (and courses if asked)."""
        with self.store.unit_of_work() as uow:
            counts = uow.reset(include_courses=include_courses)
        logger.warning("Bulk reset by %s: %s", actor_id, counts)
        return counts

    def dashboard_stats(self) -> DashboardStats:
        """Admin: registration count, completed revenue, active courses and pending payments."""
        with self.store.unit_of_work() as uow:
            return DashboardStats(**uow.dashboard_stats())

    # --- Helpers ---

    @staticmethod
    def _registration_open(uow: StoreSession) -> bool:
        value = uow.get_setting(REGISTRATION_OPEN_KEY)
        return value is None or value.strip().lower() == "true"

    def _ensure_open(self, uow: StoreSession) -> None:
        if not self._registration_open(uow):
            logger.info("Registration attempt while registration is closed")
            raise RegistrationClosedError("Registration is currently closed")

    @staticmethod
    def _course_price(uow: StoreSession, course: Course) -> Decimal:
        view = build_availability(uow, course, uow.count_completed_registrations(course.id))
        price = price_for(view.slots, _DEFAULT_PRICING[course.course_type])
        if price is None:
            price = price_for(view.slots, PricingType.DROP_IN.value)
        if price is None:
            raise ValidationError(
                f"'{course.name}' has no price; a payment amount is required",
                field="payment_amount",
            )
        return price
