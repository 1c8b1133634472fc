"""Catalog - courses, slots, pricing and availability."""

from studioreg.catalog.exceptions import InvalidCourseError
from studioreg.catalog.models import (
    CourseAvailability,
    CourseDefinition,
    SlotAvailability,
    SlotDefinition,
)
from studioreg.catalog.pricing import price_for, split_amount
from studioreg.catalog.reader import CatalogReader, build_availability
from studioreg.catalog.schedule import compute_schedule_info
from studioreg.catalog.validation import build_course, validate_course_definition

__all__ = [
    "CatalogReader",
    "CourseAvailability",
    "CourseDefinition",
    "InvalidCourseError",
    "SlotAvailability",
    "SlotDefinition",
    "build_availability",
    "build_course",
    "compute_schedule_info",
    "price_for",
    "split_amount",
    "validate_course_definition",
]
