"""Unit tests for eligibility rules."""

from datetime import date

import pytest

from studioreg.eligibility import (
    AccessDeniedError,
    bundle_single_track,
    combo_eligible,
    course_visible_to,
    ensure_course_access,
    is_week_gated,
)
from studioreg.store import Course, CourseSlot, Student


def _course(required: str = "any") -> Course:
    return Course(name="Crew Practice", course_type="crew_practice", required_student_type=required)


@pytest.mark.unit
class TestCourseVisibility:
    """Tests for course_visible_to and ensure_course_access."""

    @pytest.mark.parametrize("student_type", ["general", "crew_member", "test"])
    def test_open_course_visible_to_all(self, student_type: str) -> None:
        """Courses open to anyone are visible to every student type."""
        assert course_visible_to(_course("any"), student_type)

    def test_crew_course_visible_to_crew(self) -> None:
        """Crew-only courses are visible to crew members."""
        assert course_visible_to(_course("crew_member"), "crew_member")

    @pytest.mark.parametrize("student_type", ["general", "test"])
    def test_crew_course_hidden_from_others(self, student_type: str) -> None:
        """Crew-only courses are hidden from everyone else."""
        assert not course_visible_to(_course("crew_member"), student_type)

    def test_ensure_access_raises_with_required_type(self) -> None:
        """Access denial names the required student type."""
        student = Student(email="a@example.com", student_type="general")

        with pytest.raises(AccessDeniedError) as exc_info:
            ensure_course_access(_course("crew_member"), student)

        assert exc_info.value.required_type == "crew_member"

    def test_ensure_access_allows(self) -> None:
        """Crew members pass the access check for crew courses."""
        student = Student(email="a@example.com", student_type="crew_member")

        ensure_course_access(_course("crew_member"), student)


@pytest.mark.unit
class TestBundleRules:
    """Tests for bundle policy helpers."""

    def test_single_track_same_times(self) -> None:
        """Slots sharing start and end time form a single track."""
        slots = [
            CourseSlot(capacity=5, start_time="7:00 PM", end_time="8:00 PM"),
            CourseSlot(capacity=5, start_time="7:00 PM", end_time="8:00 PM"),
        ]

        assert bundle_single_track(slots)

    def test_single_track_mixed_times(self) -> None:
        """Different end times mean different levels."""
        slots = [
            CourseSlot(capacity=5, start_time="7:00 PM", end_time="8:00 PM"),
            CourseSlot(capacity=5, start_time="7:00 PM", end_time="8:30 PM"),
        ]

        assert not bundle_single_track(slots)

    def test_single_track_empty(self) -> None:
        """No slots trivially form a single track."""
        assert bundle_single_track([])

    def test_week_gated_on_and_after_cutoff(self) -> None:
        """Slots on or after the cutoff are gated."""
        cutoff = date(2026, 1, 27)

        assert is_week_gated(CourseSlot(capacity=1, practice_date=date(2026, 1, 27)), cutoff)
        assert is_week_gated(CourseSlot(capacity=1, practice_date=date(2026, 2, 3)), cutoff)
        assert not is_week_gated(CourseSlot(capacity=1, practice_date=date(2026, 1, 20)), cutoff)

    def test_week_gate_disabled(self) -> None:
        """No cutoff, or an undated slot, is never gated."""
        assert not is_week_gated(CourseSlot(capacity=1, practice_date=date(2026, 2, 3)), None)
        assert not is_week_gated(CourseSlot(capacity=1), date(2026, 1, 27))

    def test_combo_requires_crew_member(self) -> None:
        """Only crew members may buy the crew + house combo."""
        combo_eligible(Student(email="c@example.com", student_type="crew_member"))

        with pytest.raises(AccessDeniedError) as exc_info:
            combo_eligible(Student(email="g@example.com", student_type="general"))
        assert exc_info.value.required_type == "crew_member"
