"""CatalogReader - read-side view of courses, slots, pricing and availability."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from studioreg.catalog.models import CourseAvailability, SlotAvailability
from studioreg.catalog.schedule import compute_schedule_info
from studioreg.eligibility import course_visible_to

if TYPE_CHECKING:
    from studioreg.store import Course, StoreSession, StudioStore

logger = logging.getLogger(__name__)


def build_availability(
    uow: StoreSession, course: Course, completed_count: int
) -> CourseAvailability:
    """Assemble a CourseAvailability for ``course`` inside an open unit of work.

    Registrations are course-scoped, so the same completed count is taken off
    every slot as well as the course total.
    """
    slots = uow.list_slots_for_course(course.id)
    slot_views = [
        SlotAvailability(
            slot=slot,
            prices={p.pricing_type: p.price for p in uow.list_pricing_for_slot(slot.id)},
            available_spots=max(slot.capacity - completed_count, 0),
        )
        for slot in slots
    ]
    total_capacity = sum(slot.capacity for slot in slots)
    return CourseAvailability(
        course=course,
        slots=slot_views,
        total_capacity=total_capacity,
        completed_count=completed_count,
        available_spots=max(total_capacity - completed_count, 0),
        schedule_info=compute_schedule_info(course, slots),
    )


class CatalogReader:
    """Read-only catalog queries.

    Missing courses come back as ``None`` rather than raising.
    """

    def __init__(self, store: StudioStore) -> None:
        """Initialize the CatalogReader.

        Args:
            store: StudioStore instance to read from.
        """
        self.store = store

    def get_course_with_availability(self, course_id: str) -> CourseAvailability | None:
        """Get a course with its slots, pricing and remaining capacity.

        Args:
            course_id: The course's unique ID.

        Returns:
            CourseAvailability, or None if the course doesn't exist.
        """
        with self.store.unit_of_work() as uow:
            course = uow.get_course(course_id)
            if course is None:
                return None
            completed = uow.count_completed_registrations(course_id)
            return build_availability(uow, course, completed)

    def list_courses(self, active_only: bool = True) -> list[CourseAvailability]:
        """List courses with availability, unfiltered by student type."""
        with self.store.unit_of_work() as uow:
            courses = uow.list_courses(active_only=active_only)
            counts = uow.completed_counts([c.id for c in courses])
            return [build_availability(uow, c, counts[c.id]) for c in courses]

    def list_eligible_courses(
        self, student_type: str, active_only: bool = True
    ) -> list[CourseAvailability]:
        """List courses a student of ``student_type`` is allowed to see.

        Args:
            student_type: general, crew_member or test.
            active_only: Only include active courses.

        Returns:
            Visible courses with availability, newest first.
        """
        with self.store.unit_of_work() as uow:
            courses = [
                c
                for c in uow.list_courses(active_only=active_only)
                if course_visible_to(c, student_type)
            ]
            counts = uow.completed_counts([c.id for c in courses])
            result = [build_availability(uow, c, counts[c.id]) for c in courses]

        logger.debug("Listed %d course(s) visible to %s students", len(result), student_type)
        return result
