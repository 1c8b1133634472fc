"""Data models for the Catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date  # noqa: TC003 - dataclass field types
from decimal import Decimal  # noqa: TC003 - dataclass field types

from studioreg.store.models import Course, CourseSlot  # noqa: TC001 - dataclass field types


@dataclass
class SlotAvailability:
    """A slot with its prices and remaining spots.

    Attributes:
        slot: The slot row.
        prices: Price per pricing type (``full_package`` / ``drop_in``).
        available_spots: Slot capacity minus the course's completed registrations.
    """

    slot: CourseSlot
    prices: dict[str, Decimal]
    available_spots: int


@dataclass
class CourseAvailability:
    """A course with its slots and aggregate capacity.

    Attributes:
        course: The course row.
        slots: Slots in definition order with their pricing.
        total_capacity: Sum of slot capacities.
        completed_count: Completed registrations for the course.
        available_spots: ``total_capacity - completed_count`` (never negative).
        schedule_info: Human readable schedule summary.
    """

    course: Course
    slots: list[SlotAvailability]
    total_capacity: int
    completed_count: int
    available_spots: int
    schedule_info: str = ""


@dataclass
class SlotDefinition:
    """Admin input describing one slot of a new course."""

    capacity: int
    prices: dict[str, Decimal] = field(default_factory=dict)
    slot_name: str | None = None
    difficulty_level: str | None = None
    day_of_week: str | None = None
    practice_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    location: str | None = None


@dataclass
class CourseDefinition:
    """Admin input describing a new course."""

    name: str
    course_type: str
    slots: list[SlotDefinition]
    description: str | None = None
    duration_weeks: int = 1
    required_student_type: str = "any"
    is_active: bool = True
    start_date: date | None = None
    end_date: date | None = None
