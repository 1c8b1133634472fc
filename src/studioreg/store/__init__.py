"""Store - Persistent storage for courses, students, registrations and waitlists."""

from studioreg.store.exceptions import (
    CourseNotFoundError,
    RegistrationNotFoundError,
    StudentNotFoundError,
    WaitlistEntryNotFoundError,
)
from studioreg.store.models import (
    Course,
    CourseSlot,
    CourseType,
    PaymentStatus,
    PricingType,
    Registration,
    RequiredStudentType,
    SlotPricing,
    Student,
    StudentType,
    WaitlistEntry,
    WaitlistStatus,
)
from studioreg.store.store import StoreSession, StudioStore

__all__ = [
    "Course",
    "CourseNotFoundError",
    "CourseSlot",
    "CourseType",
    "PaymentStatus",
    "PricingType",
    "Registration",
    "RegistrationNotFoundError",
    "RequiredStudentType",
    "SlotPricing",
    "StoreSession",
    "Student",
    "StudentNotFoundError",
    "StudentType",
    "StudioStore",
    "WaitlistEntry",
    "WaitlistEntryNotFoundError",
    "WaitlistStatus",
]
