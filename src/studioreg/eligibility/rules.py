"""Eligibility rules - pure decisions about who may see and buy what."""

from __future__ import annotations

from typing import TYPE_CHECKING

from studioreg.eligibility.exceptions import AccessDeniedError
from studioreg.store.models import RequiredStudentType, StudentType

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date

    from studioreg.store.models import Course, CourseSlot, Student


def course_visible_to(course: Course, student_type: str) -> bool:
    """Whether a student of ``student_type`` may see (and register for) ``course``.

    Open courses are visible to everyone; crew-only courses only to crew members.
    """
    if course.required_student_type == RequiredStudentType.ANY.value:
        return True
    return (
        student_type == StudentType.CREW_MEMBER.value
        and course.required_student_type == RequiredStudentType.CREW_MEMBER.value
    )


def ensure_course_access(course: Course, student: Student) -> None:
    """Raise AccessDeniedError if ``student`` may not register for ``course``."""
    if not course_visible_to(course, student.student_type):
        raise AccessDeniedError(
            f"Course '{course.name}' is restricted to {course.required_student_type} students",
            required_type=course.required_student_type,
        )


def bundle_single_track(slots: Iterable[CourseSlot]) -> bool:
    """True iff every slot runs at the same (start_time, end_time)."""
    times = {(slot.start_time, slot.end_time) for slot in slots}
    return len(times) <= 1


def is_week_gated(slot: CourseSlot, cutoff_date: date | None) -> bool:
    """True iff the slot falls on or after the final-week cutoff."""
    if cutoff_date is None or slot.practice_date is None:
        return False
    return slot.practice_date >= cutoff_date


def combo_eligible(student: Student) -> None:
    """Crew + house combos are sold to crew members only.

    Raises:
        AccessDeniedError: If the student is not a crew member
    """
    if student.student_type != StudentType.CREW_MEMBER.value:
        raise AccessDeniedError(
            "Crew + house combo is available to crew_member students only",
            required_type=StudentType.CREW_MEMBER.value,
        )
