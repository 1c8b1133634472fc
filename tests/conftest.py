"""Shared pytest fixtures and configuration."""

from collections.abc import Callable
from datetime import date
from decimal import Decimal
from typing import Any
from unittest.mock import MagicMock

import pytest

from studioreg.capacity import CapacityGate
from studioreg.catalog import CatalogReader, CourseDefinition, SlotDefinition, build_course
from studioreg.notifications import NotificationDispatcher
from studioreg.portal import RegistrationPortal
from studioreg.registration import RegistrationLedger
from studioreg.store import Course, Registration, Student, StudioStore
from studioreg.students import StudentProfile, StudentResolver
from studioreg.waitlist import WaitlistCoordinator

WEEK_GATE_CUTOFF = date(2026, 1, 27)


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def store() -> StudioStore:
    """Create an in-memory StudioStore."""
    s = StudioStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def make_course(store: StudioStore) -> Callable[..., Course]:
    """Factory creating a course with one slot (or the given slots)."""

    def _make(
        name: str = "House Foundations",
        course_type: str = "drop_in",
        capacity: int = 2,
        prices: dict[str, Any] | None = None,
        slots: list[SlotDefinition] | None = None,
        required_student_type: str = "any",
        start_time: str = "7:00 PM",
        end_time: str = "8:00 PM",
        practice_date: date | None = None,
        day_of_week: str | None = "Tuesday",
        is_active: bool = True,
        **course_fields: Any,
    ) -> Course:
        if prices is None:
            prices = {"drop_in": "25.00"}
            if course_type == "multi-week":
                prices["full_package"] = "120.00"
        if slots is None:
            slots = [
                SlotDefinition(
                    capacity=capacity,
                    prices={k: Decimal(str(v)) for k, v in prices.items()},
                    day_of_week=day_of_week,
                    practice_date=practice_date,
                    start_time=start_time,
                    end_time=end_time,
                    location="Studio A",
                )
            ]
        course, course_slots = build_course(
            CourseDefinition(
                name=name,
                course_type=course_type,
                slots=slots,
                required_student_type=required_student_type,
                is_active=is_active,
                **course_fields,
            )
        )
        with store.unit_of_work() as uow:
            uow.add_course(course, course_slots)
        return course

    return _make


@pytest.fixture
def make_student(store: StudioStore) -> Callable[..., Student]:
    """Factory inserting a student directly."""

    def _make(
        email: str = "dancer@example.com",
        student_type: str = "general",
        **fields: Any,
    ) -> Student:
        fields.setdefault("first_name", "Dana")
        fields.setdefault("last_name", "Dancer")
        with store.unit_of_work() as uow:
            student = uow.insert_student(
                Student(email=email, student_type=student_type, **fields)
            )
        return student

    return _make


@pytest.fixture
def mock_sender() -> MagicMock:
    """Create a mock email transport."""
    return MagicMock()


@pytest.fixture
def dispatcher(mock_sender: MagicMock) -> NotificationDispatcher:
    """Create a dispatcher delivering to the mock transport."""
    d = NotificationDispatcher(sender=mock_sender)
    yield d
    d.shutdown(wait=True)


@pytest.fixture
def gate() -> CapacityGate:
    """Create a CapacityGate with the final-week cutoff configured."""
    return CapacityGate(week_gate_cutoff=WEEK_GATE_CUTOFF)


@pytest.fixture
def ledger(
    store: StudioStore, gate: CapacityGate, dispatcher: NotificationDispatcher
) -> RegistrationLedger:
    """Create a RegistrationLedger."""
    return RegistrationLedger(store, gate, dispatcher)


@pytest.fixture
def waitlist(store: StudioStore, dispatcher: NotificationDispatcher) -> WaitlistCoordinator:
    """Create a WaitlistCoordinator."""
    return WaitlistCoordinator(
        store, dispatcher, portal_base_url="https://studio.test/", default_expires_hours=48
    )


@pytest.fixture
def portal(
    store: StudioStore,
    gate: CapacityGate,
    ledger: RegistrationLedger,
    waitlist: WaitlistCoordinator,
) -> RegistrationPortal:
    """Create a RegistrationPortal over the shared components."""
    return RegistrationPortal(
        store=store,
        catalog=CatalogReader(store),
        students=StudentResolver(store),
        gate=gate,
        ledger=ledger,
        waitlist=waitlist,
        bundle_max_classes=3,
        crew_house_combo_price=Decimal("200.00"),
    )


@pytest.fixture
def make_registration(store: StudioStore) -> Callable[..., Registration]:
    """Factory inserting a registration directly, bypassing the capacity gate."""

    def _make(
        student_id: str,
        course_id: str,
        status: str = "pending",
        amount: str = "25.00",
        registration_type: str = "per-class",
    ) -> Registration:
        with store.unit_of_work() as uow:
            registration = uow.insert_registration(
                Registration(
                    student_id=student_id,
                    course_id=course_id,
                    payment_amount=Decimal(amount),
                    registration_type=registration_type,
                    payment_status=status,
                )
            )
        return registration

    return _make


@pytest.fixture
def make_profile() -> Callable[..., StudentProfile]:
    """Factory for a complete general-student profile."""

    def _make(email: str = "dancer@example.com", **fields: Any) -> StudentProfile:
        fields.setdefault("first_name", "Dana")
        fields.setdefault("last_name", "Dancer")
        fields.setdefault("phone", "555-0100")
        fields.setdefault("dance_experience", "2 years")
        return StudentProfile(email=email, **fields)

    return _make
