"""CapacityGate - admit/reject decisions made before any registration is written."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from studioreg.capacity.models import BundleCheck, BundleRejection, CapacityCheck
from studioreg.eligibility import bundle_single_track, is_week_gated

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from studioreg.store import Course, StoreSession

logger = logging.getLogger(__name__)


class CapacityGate:
    """Decides whether a course (or a bundle of courses) can take one more student.

    Only completed registrations count toward capacity. Callers run these
    checks inside a unit of work that holds the course locks, so the decision
    and the write that follows it are atomic.
    """

    def __init__(self, week_gate_cutoff: date | None = None) -> None:
        """Initialize the CapacityGate.

        Args:
            week_gate_cutoff: Slots dated on or after this day are excluded
                from drop-in bundles. None disables week gating.
        """
        self.week_gate_cutoff = week_gate_cutoff

    def check_capacity(self, uow: StoreSession, course_id: str) -> CapacityCheck:
        """Compare a course's capacity with its completed registrations.

        Args:
            uow: Open unit of work (holding the course lock when a write follows).
            course_id: The course's unique ID.

        Returns:
            CapacityCheck; ``admitted`` is False when the course is full.
        """
        capacity = sum(slot.capacity for slot in uow.list_slots_for_course(course_id))
        completed = uow.count_completed_registrations(course_id)
        check = CapacityCheck(course_id=course_id, capacity=capacity, completed_count=completed)
        if not check.admitted:
            logger.info("Course %s is full (%d/%d)", course_id, completed, capacity)
        return check

    def check_bundle(self, uow: StoreSession, courses: Sequence[Course]) -> BundleCheck:
        """Check every course of a drop-in bundle; any failure rejects the whole bundle.

        Order of checks: final-week gating, single track (identical start and
        end times across all slots), then capacity of each course.

        Args:
            uow: Open unit of work holding locks on all bundle courses.
            courses: The bundle's courses.

        Returns:
            BundleCheck naming the reason and offending course on rejection.
        """
        slots_by_course = {c.id: uow.list_slots_for_course(c.id) for c in courses}

        for course in courses:
            for slot in slots_by_course[course.id]:
                if is_week_gated(slot, self.week_gate_cutoff):
                    logger.info("Bundle rejected: course %s is in the final week", course.id)
                    return BundleCheck.rejected(
                        BundleRejection.WEEK_4_BLOCKED,
                        f"'{course.name}' falls in the final week and cannot be part of a bundle",
                        course_id=course.id,
                    )

        all_slots = [slot for slots in slots_by_course.values() for slot in slots]
        if not bundle_single_track(all_slots):
            logger.info("Bundle rejected: mixed class times")
            return BundleCheck.rejected(
                BundleRejection.MIXED_LEVELS_NOT_ALLOWED,
                "All classes in a bundle must be the same level (same start and end time)",
            )

        for course in courses:
            check = self.check_capacity(uow, course.id)
            if not check.admitted:
                return BundleCheck.rejected(
                    BundleRejection.COURSE_FULL,
                    f"'{course.name}' is full",
                    course_id=course.id,
                )

        return BundleCheck.ok()
