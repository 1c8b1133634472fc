"""Data models for student identity."""

from dataclasses import dataclass
from datetime import date

from studioreg.store.models import Student


@dataclass
class StudentProfile:
    """Contact and profile fields submitted with a registration.

    ``email`` is the natural key; everything else overwrites the stored
    student on every contact.
    """

    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    medical_conditions: str | None = None
    dance_experience: str | None = None
    instagram_handle: str | None = None
    how_heard_about_us: str | None = None


@dataclass
class ProfileStatus:
    """Result of a profile check.

    Attributes:
        student: The (possibly just created) student.
        created: Whether this check created the student record.
    """

    student: Student
    created: bool

    @property
    def profile_complete(self) -> bool:
        return self.student.profile_complete

    @property
    def student_type(self) -> str:
        return self.student.student_type
