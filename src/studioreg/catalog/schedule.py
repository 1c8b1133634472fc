"""Human readable schedule summaries for courses."""

from __future__ import annotations

from typing import TYPE_CHECKING

from studioreg.store.models import CourseType

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from studioreg.store.models import Course, CourseSlot


def _format_date(value: date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def _describe_slot(course: Course, slot: CourseSlot) -> str:
    parts: list[str] = []
    if course.course_type == CourseType.CREW_PRACTICE.value and slot.practice_date:
        parts.append(_format_date(slot.practice_date))
    elif slot.day_of_week:
        parts.append(f"{slot.day_of_week}s")

    if slot.start_time and slot.end_time:
        parts.append(f"{slot.start_time} - {slot.end_time}")
    elif slot.start_time:
        parts.append(slot.start_time)

    if slot.location:
        parts.append(f"at {slot.location}")
    return " ".join(parts)


def compute_schedule_info(course: Course, slots: Sequence[CourseSlot]) -> str:
    """Summarize a course's slots.

    Example: ``"Tuesdays 6:15 PM - 7:30 PM at Studio G (1/6/2026 - 1/27/2026)"``

    Slot descriptions are joined with ``" | "``. The course date range is
    appended only when no slot carries its own practice date.
    """
    items = [item for item in (_describe_slot(course, slot) for slot in slots) if item]
    if not items:
        return ""

    date_info = ""
    if not any(slot.practice_date for slot in slots):
        if course.start_date and course.end_date:
            date_info = f" ({_format_date(course.start_date)} - {_format_date(course.end_date)})"
        elif course.start_date:
            date_info = f" (Starts {_format_date(course.start_date)})"

    return " | ".join(items) + date_info
