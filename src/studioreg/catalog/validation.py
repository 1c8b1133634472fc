"""Course definition checks applied before a course enters the catalog."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from studioreg.catalog.exceptions import InvalidCourseError
from studioreg.store.models import (
    Course,
    CourseSlot,
    CourseType,
    PricingType,
    RequiredStudentType,
    SlotPricing,
)

if TYPE_CHECKING:
    from studioreg.catalog.models import CourseDefinition, SlotDefinition


def _required_pricing(course_type: CourseType) -> set[str]:
    if course_type == CourseType.MULTI_WEEK:
        return {PricingType.FULL_PACKAGE.value, PricingType.DROP_IN.value}
    return {PricingType.DROP_IN.value}


def _check_slot(index: int, slot: SlotDefinition, required: set[str]) -> None:
    field = f"slots[{index}]"
    if slot.capacity <= 0:
        raise InvalidCourseError(
            "Slot capacity must be a positive integer", field=f"{field}.capacity"
        )

    valid_types = {t.value for t in PricingType}
    unknown = set(slot.prices) - valid_types
    if unknown:
        raise InvalidCourseError(
            f"Unknown pricing type(s): {', '.join(sorted(unknown))}", field=f"{field}.prices"
        )
    missing = required - set(slot.prices)
    if missing:
        raise InvalidCourseError(
            f"Slot is missing required pricing: {', '.join(sorted(missing))}",
            field=f"{field}.prices",
        )
    for pricing_type, price in slot.prices.items():
        if Decimal(price) < 0:
            raise InvalidCourseError(
                f"Price for {pricing_type} must not be negative", field=f"{field}.prices"
            )


def validate_course_definition(definition: CourseDefinition) -> None:
    """Check a course definition against the catalog invariants.

    Raises:
        InvalidCourseError: Naming the offending field
    """
    if not definition.name or not definition.name.strip():
        raise InvalidCourseError("Course name is required", field="name")

    try:
        course_type = CourseType(definition.course_type)
    except ValueError as e:
        raise InvalidCourseError(
            f"Unknown course type '{definition.course_type}'", field="course_type"
        ) from e

    if definition.required_student_type not in {t.value for t in RequiredStudentType}:
        raise InvalidCourseError(
            f"Unknown required student type '{definition.required_student_type}'",
            field="required_student_type",
        )

    if definition.duration_weeks < 1:
        raise InvalidCourseError("Duration must be at least one week", field="duration_weeks")

    if not definition.slots:
        raise InvalidCourseError("A course needs at least one slot", field="slots")

    if course_type == CourseType.CREW_PRACTICE and len(definition.slots) != 1:
        raise InvalidCourseError("Crew practice courses have exactly one slot", field="slots")

    if (
        definition.start_date
        and definition.end_date
        and definition.end_date < definition.start_date
    ):
        raise InvalidCourseError("End date is before start date", field="end_date")

    required = _required_pricing(course_type)
    for index, slot in enumerate(definition.slots):
        _check_slot(index, slot, required)


def build_course(definition: CourseDefinition) -> tuple[Course, list[CourseSlot]]:
    """Validate ``definition`` and turn it into unsaved ORM rows."""
    validate_course_definition(definition)

    course = Course(
        name=definition.name.strip(),
        course_type=definition.course_type,
        description=definition.description,
        duration_weeks=definition.duration_weeks,
        required_student_type=definition.required_student_type,
        is_active=definition.is_active,
        start_date=definition.start_date,
        end_date=definition.end_date,
    )
    slots: list[CourseSlot] = []
    for slot_def in definition.slots:
        slot = CourseSlot(
            capacity=slot_def.capacity,
            slot_name=slot_def.slot_name,
            difficulty_level=slot_def.difficulty_level,
            day_of_week=slot_def.day_of_week,
            practice_date=slot_def.practice_date,
            start_time=slot_def.start_time,
            end_time=slot_def.end_time,
            location=slot_def.location,
        )
        for pricing_type, price in slot_def.prices.items():
            slot.pricing.append(SlotPricing(pricing_type=pricing_type, price=Decimal(price)))
        slots.append(slot)
    return course, slots
