"""Students - identity resolution and classification."""

from studioreg.students.exceptions import InvalidStudentTypeError, ProfileIncompleteError
from studioreg.students.models import ProfileStatus, StudentProfile
from studioreg.students.resolver import (
    StudentResolver,
    normalize_email,
    profile_is_complete,
)

__all__ = [
    "InvalidStudentTypeError",
    "ProfileIncompleteError",
    "ProfileStatus",
    "StudentProfile",
    "StudentResolver",
    "normalize_email",
    "profile_is_complete",
]
