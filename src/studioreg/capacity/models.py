"""Data models for the Capacity Gate."""

from dataclasses import dataclass
from enum import StrEnum


class BundleRejection(StrEnum):
    """Why a bundle registration was turned away."""

    COURSE_FULL = "course_full"
    MIXED_LEVELS_NOT_ALLOWED = "mixed_levels_not_allowed"
    WEEK_4_BLOCKED = "week_4_blocked"


@dataclass
class CapacityCheck:
    """Outcome of a single-course capacity check.

    Attributes:
        course_id: The checked course.
        capacity: Sum of the course's slot capacities.
        completed_count: Completed registrations already holding a place.
    """

    course_id: str
    capacity: int
    completed_count: int

    @property
    def admitted(self) -> bool:
        """Whether one more completed registration fits."""
        return self.completed_count < self.capacity

    @property
    def available_spots(self) -> int:
        return max(self.capacity - self.completed_count, 0)


@dataclass
class BundleCheck:
    """Outcome of a bundle check; ``reason``/``course_id`` are set on rejection."""

    admitted: bool
    reason: BundleRejection | None = None
    course_id: str | None = None
    message: str | None = None

    @classmethod
    def ok(cls) -> "BundleCheck":
        return cls(admitted=True)

    @classmethod
    def rejected(
        cls, reason: BundleRejection, message: str, course_id: str | None = None
    ) -> "BundleCheck":
        return cls(admitted=False, reason=reason, course_id=course_id, message=message)
