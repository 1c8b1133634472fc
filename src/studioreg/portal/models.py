"""Data models for the Registration Portal."""

from dataclasses import dataclass, field
from decimal import Decimal

from studioreg.catalog import CourseAvailability
from studioreg.store.models import Registration, Student


@dataclass
class BundleResult:
    """Pending registrations created by one drop-in bundle checkout."""

    registrations: list[Registration]
    total_amount: Decimal

    @property
    def registration_ids(self) -> list[str]:
        return [r.id for r in self.registrations]


@dataclass
class ComboResult:
    """Registrations created by a crew + house combo.

    Attributes:
        house_registrations: One per selected house course, sharing the combo price.
        crew_registrations: Free crew practice registrations (courses the
            student already holds are skipped).
    """

    house_registrations: list[Registration]
    crew_registrations: list[Registration] = field(default_factory=list)

    @property
    def house_registration_ids(self) -> list[str]:
        return [r.id for r in self.house_registrations]

    @property
    def crew_registration_ids(self) -> list[str]:
        return [r.id for r in self.crew_registrations]


@dataclass
class ProfileUpdate:
    """A saved student profile and the courses it unlocks.

    ``courses`` stays empty while the profile is still incomplete.
    """

    student: Student
    courses: list[CourseAvailability] = field(default_factory=list)


@dataclass
class DashboardStats:
    """Admin dashboard totals across every course."""

    total_registrations: int
    total_revenue: Decimal
    active_courses: int
    pending_payments: int
