"""Unit tests for the Catalog: reader, schedule and pricing."""

from datetime import date
from decimal import Decimal

import pytest

from studioreg.catalog import (
    CatalogReader,
    SlotAvailability,
    SlotDefinition,
    compute_schedule_info,
    price_for,
    split_amount,
)
from studioreg.store import Course, CourseSlot, StudioStore


@pytest.fixture
def reader(store: StudioStore) -> CatalogReader:
    """Create a CatalogReader."""
    return CatalogReader(store)


@pytest.mark.unit
class TestCatalogReader:
    """Tests for CatalogReader."""

    def test_capacity_is_sum_of_slots(self, reader: CatalogReader, make_course) -> None:
        """Total capacity adds up every slot."""
        course = make_course(
            slots=[
                SlotDefinition(capacity=4, prices={"drop_in": Decimal("20")}),
                SlotDefinition(capacity=6, prices={"drop_in": Decimal("15")}),
            ]
        )

        view = reader.get_course_with_availability(course.id)

        assert view is not None
        assert view.total_capacity == 10
        assert view.available_spots == 10
        assert [s.prices["drop_in"] for s in view.slots] == [Decimal("20.00"), Decimal("15.00")]

    def test_only_completed_registrations_take_spots(
        self, reader: CatalogReader, make_course, make_student, make_registration
    ) -> None:
        """Pending registrations do not reduce availability."""
        course = make_course(capacity=3)
        s1 = make_student(email="one@example.com")
        s2 = make_student(email="two@example.com")
        make_registration(s1.id, course.id, status="completed")
        make_registration(s2.id, course.id, status="pending")

        view = reader.get_course_with_availability(course.id)

        assert view.completed_count == 1
        assert view.available_spots == 2
        assert view.slots[0].available_spots == 2

    def test_missing_course_returns_none(self, reader: CatalogReader) -> None:
        """Unknown course IDs return None."""
        assert reader.get_course_with_availability("missing") is None

    def test_list_courses_excludes_inactive(self, reader: CatalogReader, make_course) -> None:
        """Inactive courses are not listed."""
        make_course(name="Open")
        make_course(name="Closed", is_active=False)

        assert [v.course.name for v in reader.list_courses()] == ["Open"]

    def test_eligible_courses_by_student_type(self, reader: CatalogReader, make_course) -> None:
        """Crew-only courses are listed for crew members only."""
        make_course(name="House")
        make_course(
            name="Crew Practice",
            course_type="crew_practice",
            required_student_type="crew_member",
            practice_date=date(2026, 1, 10),
        )

        general = {v.course.name for v in reader.list_eligible_courses("general")}
        crew = {v.course.name for v in reader.list_eligible_courses("crew_member")}

        assert general == {"House"}
        assert crew == {"House", "Crew Practice"}

    def test_schedule_info_included(self, reader: CatalogReader, make_course) -> None:
        """Views carry a schedule summary."""
        course = make_course(start_time="6:15 PM", end_time="7:30 PM")

        view = reader.get_course_with_availability(course.id)

        assert view.schedule_info == "Tuesdays 6:15 PM - 7:30 PM at Studio A"


@pytest.mark.unit
class TestScheduleInfo:
    """Tests for compute_schedule_info."""

    def test_weekly_course_with_date_range(self) -> None:
        """Weekly slots show the day, times, location and course dates."""
        course = Course(
            name="Series",
            course_type="multi-week",
            start_date=date(2026, 1, 6),
            end_date=date(2026, 1, 27),
        )
        slot = CourseSlot(
            capacity=10,
            day_of_week="Tuesday",
            start_time="6:15 PM",
            end_time="7:30 PM",
            location="Studio G",
        )

        info = compute_schedule_info(course, [slot])

        assert info == "Tuesdays 6:15 PM - 7:30 PM at Studio G (1/6/2026 - 1/27/2026)"

    def test_start_date_only(self) -> None:
        """A course with only a start date says when it starts."""
        course = Course(name="Series", course_type="multi-week", start_date=date(2026, 3, 2))
        slot = CourseSlot(capacity=10, day_of_week="Monday", start_time="7:00 PM")

        assert compute_schedule_info(course, [slot]) == "Mondays 7:00 PM (Starts 3/2/2026)"

    def test_crew_practice_uses_practice_date(self) -> None:
        """Crew practice slots show their own date and skip the course range."""
        course = Course(
            name="Crew",
            course_type="crew_practice",
            start_date=date(2026, 1, 1),
            end_date=date(2026, 1, 31),
        )
        slot = CourseSlot(
            capacity=20,
            practice_date=date(2026, 1, 10),
            start_time="7:00 PM",
            end_time="9:00 PM",
            location="Studio A",
        )

        assert compute_schedule_info(course, [slot]) == "1/10/2026 7:00 PM - 9:00 PM at Studio A"

    def test_multiple_slots_joined(self) -> None:
        """Slot descriptions are separated by a pipe."""
        course = Course(name="Drop In", course_type="drop_in")
        slots = [
            CourseSlot(capacity=5, day_of_week="Tuesday", start_time="7:00 PM"),
            CourseSlot(capacity=5, day_of_week="Thursday", start_time="7:00 PM"),
        ]

        assert compute_schedule_info(course, slots) == "Tuesdays 7:00 PM | Thursdays 7:00 PM"

    def test_no_slot_details(self) -> None:
        """Nothing to describe gives an empty string."""
        course = Course(name="Bare", course_type="drop_in")

        assert compute_schedule_info(course, [CourseSlot(capacity=5)]) == ""


@pytest.mark.unit
class TestPricing:
    """Tests for price lookup and amount splitting."""

    def test_price_for_lowest(self) -> None:
        """The lowest price of the requested type wins."""
        slots = [
            SlotAvailability(
                slot=CourseSlot(capacity=1), prices={"drop_in": Decimal(p)}, available_spots=1
            )
            for p in ("30", "25")
        ]

        assert price_for(slots, "drop_in") == Decimal("25")
        assert price_for(slots, "full_package") is None

    def test_split_even(self) -> None:
        """Even totals split into equal shares."""
        assert split_amount(Decimal("75.00"), 3) == [Decimal("25.00")] * 3

    def test_split_remainder_on_first_share(self) -> None:
        """The first share absorbs the rounding remainder."""
        shares = split_amount(Decimal("100.00"), 3)

        assert shares == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
        assert sum(shares) == Decimal("100.00")

    def test_split_single(self) -> None:
        """One part gets the whole total."""
        assert split_amount(Decimal("200"), 1) == [Decimal("200.00")]

    def test_split_requires_parts(self) -> None:
        """Zero parts is an error."""
        with pytest.raises(ValueError):
            split_amount(Decimal("10"), 0)
