"""StudentResolver - find-or-create students by email and manage their type."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from studioreg.exceptions import ValidationError
from studioreg.store.models import Student, StudentType
from studioreg.students.exceptions import InvalidStudentTypeError
from studioreg.students.models import ProfileStatus, StudentProfile

if TYPE_CHECKING:
    from studioreg.store import StoreSession, StudioStore

logger = logging.getLogger(__name__)

DEFAULT_FIRST_NAME = "Student"


def normalize_email(email: str | None) -> str:
    """Trim and lower-case an email, rejecting obviously malformed values.

    Raises:
        ValidationError: If the email is missing or malformed
    """
    value = (email or "").strip().lower()
    if not value or "@" not in value or value.startswith("@") or value.endswith("@"):
        raise ValidationError("A valid email address is required", field="email")
    return value


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _profile_fields(profile: StudentProfile) -> dict[str, Any]:
    fields = {name: _clean(value) for name, value in asdict(profile).items() if name != "email"}
    fields["first_name"] = fields["first_name"] or DEFAULT_FIRST_NAME
    fields["last_name"] = fields["last_name"] or ""
    if fields["instagram_handle"]:
        fields["instagram_handle"] = fields["instagram_handle"].lstrip("@") or None
    return fields


def missing_crew_details(student: Student) -> bool:
    """Crew members must have an instagram handle and dance experience on file."""
    return not student.instagram_handle or not student.dance_experience


def profile_is_complete(student: Student) -> bool:
    """Whether the student has filled in everything their type requires.

    Everyone needs a first name and their dance experience; crew members
    also need an instagram handle.
    """
    has_basics = bool(
        student.first_name
        and student.first_name != DEFAULT_FIRST_NAME
        and student.dance_experience
    )
    if not has_basics:
        return False
    if student.student_type == StudentType.CREW_MEMBER.value:
        return not missing_crew_details(student)
    return True


class StudentResolver:
    """Resolves students by email and applies admin classification."""

    def __init__(self, store: StudioStore) -> None:
        """Initialize the StudentResolver.

        Args:
            store: StudioStore instance for persistence.
        """
        self.store = store

    def upsert_in(self, uow: StoreSession, profile: StudentProfile) -> Student:
        """Create or overwrite the student for ``profile.email`` inside ``uow``.

        Existing students get every mutable field replaced (last write wins);
        their type and classification flags are left alone.
        """
        email = normalize_email(profile.email)
        fields = _profile_fields(profile)

        student = uow.find_student_by_email(email)
        created = False
        if student is None:
            student, created = uow.insert_student_if_absent(Student(email=email, **fields))
        if created:
            logger.info("Created student %s", student.id)
        else:
            uow.update_student(student, **fields)
            logger.debug("Updated student %s", student.id)

        uow.update_student(student, profile_complete=profile_is_complete(student))
        return student

    def upsert_student(self, profile: StudentProfile) -> Student:
        """Create or update a student by email.

        Args:
            profile: Submitted contact/profile fields.

        Returns:
            The stored Student.

        Raises:
            ValidationError: If the email is missing or malformed
        """
        with self.store.unit_of_work() as uow:
            return self.upsert_in(uow, profile)

    def check_profile(self, email: str) -> ProfileStatus:
        """Touch the student for ``email``, creating a bare record if needed.

        Returns:
            ProfileStatus with the student and whether it was just created.
        """
        normalized = normalize_email(email)
        with self.store.unit_of_work() as uow:
            student = uow.find_student_by_email(normalized)
            if student is not None:
                return ProfileStatus(student=student, created=False)
            student, created = uow.insert_student_if_absent(Student(email=normalized))
            if created:
                logger.info("Created student %s from profile check", student.id)
            return ProfileStatus(student=student, created=created)

    def find_by_email(self, email: str) -> Student | None:
        """Look up a student by email without creating one."""
        with self.store.unit_of_work() as uow:
            return uow.find_student_by_email(normalize_email(email))

    def get_student(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        with self.store.unit_of_work() as uow:
            return uow.get_student(student_id)

    def classify(self, student_id: str, new_type: str) -> Student:
        """Set a student's type on an admin's behalf.

        Promoting to crew_member without an instagram handle or dance
        experience on file marks the profile incomplete, so the student must
        finish it before courses are listed for them again.

        Args:
            student_id: The student's unique ID.
            new_type: general, crew_member or test.

        Returns:
            The updated Student.

        Raises:
            StudentNotFoundError: If student doesn't exist
            InvalidStudentTypeError: If new_type is not a known type
        """
        try:
            student_type = StudentType(new_type)
        except ValueError as e:
            raise InvalidStudentTypeError(
                f"Unknown student type '{new_type}'", field="student_type"
            ) from e

        with self.store.unit_of_work() as uow:
            student = uow.get_student(student_id)
            previous = student.student_type
            fields: dict[str, Any] = {
                "student_type": student_type.value,
                "admin_classified": True,
            }
            if student_type == StudentType.CREW_MEMBER and missing_crew_details(student):
                fields["profile_complete"] = False
            uow.update_student(student, **fields)

        logger.info(
            "Student %s classified %s -> %s by admin", student_id, previous, student_type.value
        )
        return student
