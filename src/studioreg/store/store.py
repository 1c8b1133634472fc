"""StudioStore - persistence operations for courses, students, registrations and waitlists."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from studioreg.store.database import Database
from studioreg.store.exceptions import (
    CourseNotFoundError,
    RegistrationNotFoundError,
    StudentNotFoundError,
    WaitlistEntryNotFoundError,
)
from studioreg.store.locks import CourseLocks
from studioreg.store.models import (
    Course,
    CourseSlot,
    PaymentStatus,
    Registration,
    SlotPricing,
    Student,
    SystemSetting,
    WaitlistEntry,
    WaitlistStatus,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")

# INSERT constructs supporting ON CONFLICT, by dialect name
_DIALECT_INSERTS = {"sqlite": sqlite_insert, "postgresql": postgresql_insert}


class StoreSession:
    """Operations bound to one open transaction.

    Obtained from ``StudioStore.unit_of_work``; everything done through one
    instance commits or rolls back together.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # --- Course Operations ---

    def get_course(self, course_id: str) -> Course | None:
        """Get course by ID, or None if it doesn't exist."""
        return self.session.get(Course, course_id)

    def require_course(self, course_id: str, active_only: bool = False) -> Course:
        """Get course by ID.

        Raises:
            CourseNotFoundError: If course doesn't exist, or is inactive and
                ``active_only`` is set
        """
        course = self.session.get(Course, course_id)
        if course is None or (active_only and not course.is_active):
            raise CourseNotFoundError(f"Course with id '{course_id}' not found")
        return course

    def list_courses(
        self, active_only: bool = True, course_type: str | None = None
    ) -> list[Course]:
        """List courses, newest first."""
        stmt = select(Course)
        if active_only:
            stmt = stmt.where(Course.is_active.is_(True))
        if course_type is not None:
            stmt = stmt.where(Course.course_type == course_type)
        stmt = stmt.order_by(Course.created_at.desc(), Course.name)
        return list(self.session.execute(stmt).scalars().all())

    def lock_courses(self, course_ids: Sequence[str]) -> None:
        """Take row locks on the given courses (no-op on SQLite)."""
        stmt = (
            select(Course.id)
            .where(Course.id.in_(list(course_ids)))
            .order_by(Course.id)
            .with_for_update()
        )
        self.session.execute(stmt).all()

    def add_course(self, course: Course, slots: Sequence[CourseSlot]) -> Course:
        """Insert a course together with its slots (and their pricing)."""
        for index, slot in enumerate(slots):
            slot.sort_order = index
            course.slots.append(slot)
        self.session.add(course)
        self.session.flush()
        return course

    def list_slots_for_course(self, course_id: str) -> list[CourseSlot]:
        """List a course's slots in definition order."""
        stmt = (
            select(CourseSlot)
            .where(CourseSlot.course_id == course_id)
            .order_by(CourseSlot.sort_order)
        )
        return list(self.session.execute(stmt).scalars().all())

    def list_pricing_for_slot(self, slot_id: str) -> list[SlotPricing]:
        """List pricing entries for a slot."""
        stmt = (
            select(SlotPricing)
            .where(SlotPricing.slot_id == slot_id)
            .order_by(SlotPricing.pricing_type)
        )
        return list(self.session.execute(stmt).scalars().all())

    # --- Student Operations ---

    def get_student(self, student_id: str) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If student doesn't exist
        """
        student = self.session.get(Student, student_id)
        if student is None:
            raise StudentNotFoundError(f"Student with id '{student_id}' not found")
        return student

    def find_student_by_email(self, email: str) -> Student | None:
        """Find a student by (normalized) email."""
        stmt = select(Student).where(Student.email == email)
        return self.session.execute(stmt).scalar_one_or_none()

    def insert_student(self, student: Student) -> Student:
        """Insert a new student."""
        self.session.add(student)
        self.session.flush()
        return student

    def insert_student_if_absent(self, student: Student) -> tuple[Student, bool]:
        """Insert ``student`` unless its email is already taken.

        A concurrent request may create the same email between a lookup and
        the insert; the conflict is skipped at the database and the stored
        row is returned instead.

        Returns:
            The stored student and whether this call created it.
        """
        values = {
            column.key: getattr(student, column.key)
            for column in Student.__table__.columns
            if column.server_default is None
        }
        insert = _DIALECT_INSERTS[self.session.get_bind().dialect.name]
        self.session.execute(
            insert(Student.__table__)
            .values(**values)
            .on_conflict_do_nothing(index_elements=["email"])
        )
        stmt = select(Student).where(Student.email == student.email)
        stored = self.session.execute(stmt).scalar_one()
        return stored, stored.id == student.id

    def update_student(self, student: Student, **fields: Any) -> Student:
        """Overwrite the given student fields."""
        for name, value in fields.items():
            setattr(student, name, value)
        self.session.flush()
        return student

    # --- Registration Operations ---

    def get_registration(self, registration_id: str) -> Registration:
        """Get registration by ID.

        Raises:
            RegistrationNotFoundError: If registration doesn't exist
        """
        registration = self.session.get(Registration, registration_id)
        if registration is None:
            raise RegistrationNotFoundError(
                f"Registration with id '{registration_id}' not found"
            )
        return registration

    def find_registration(
        self,
        student_id: str,
        course_id: str,
        statuses: Iterable[PaymentStatus],
        exclude_id: str | None = None,
    ) -> Registration | None:
        """Find the oldest registration for (student, course) in one of ``statuses``."""
        stmt = select(Registration).where(
            Registration.student_id == student_id,
            Registration.course_id == course_id,
            Registration.payment_status.in_([s.value for s in statuses]),
        )
        if exclude_id is not None:
            stmt = stmt.where(Registration.id != exclude_id)
        stmt = stmt.order_by(Registration.created_at, Registration.id).limit(1)
        return self.session.execute(stmt).scalar_one_or_none()

    def count_completed_registrations(self, course_id: str) -> int:
        """Count registrations holding a place in the course."""
        stmt = select(func.count(Registration.id)).where(
            Registration.course_id == course_id,
            Registration.payment_status == PaymentStatus.COMPLETED.value,
        )
        return int(self.session.execute(stmt).scalar_one())

    def completed_counts(self, course_ids: Sequence[str]) -> dict[str, int]:
        """Completed registration counts for several courses at once."""
        if not course_ids:
            return {}
        stmt = (
            select(Registration.course_id, func.count(Registration.id))
            .where(
                Registration.course_id.in_(list(course_ids)),
                Registration.payment_status == PaymentStatus.COMPLETED.value,
            )
            .group_by(Registration.course_id)
        )
        counts = {course_id: 0 for course_id in course_ids}
        for course_id, count in self.session.execute(stmt).all():
            counts[course_id] = int(count)
        return counts

    def insert_registration(self, registration: Registration) -> Registration:
        """Insert a new registration."""
        self.session.add(registration)
        self.session.flush()
        return registration

    def update_registration_status(
        self, registration: Registration, status: PaymentStatus, **fields: Any
    ) -> Registration:
        """Set a registration's payment status along with any audit fields."""
        registration.payment_status = status.value
        for name, value in fields.items():
            setattr(registration, name, value)
        self.session.flush()
        return registration

    def list_registrations(
        self,
        course_id: str | None = None,
        status: PaymentStatus | None = None,
    ) -> list[Registration]:
        """List registrations, most recent first."""
        stmt = select(Registration)
        if course_id is not None:
            stmt = stmt.where(Registration.course_id == course_id)
        if status is not None:
            stmt = stmt.where(Registration.payment_status == status.value)
        stmt = stmt.order_by(Registration.created_at.desc(), Registration.id)
        return list(self.session.execute(stmt).scalars().all())

    # --- Waitlist Operations ---

    def get_waitlist_entry(self, entry_id: str) -> WaitlistEntry:
        """Get waitlist entry by ID.

        Raises:
            WaitlistEntryNotFoundError: If entry doesn't exist
        """
        entry = self.session.get(WaitlistEntry, entry_id)
        if entry is None:
            raise WaitlistEntryNotFoundError(f"Waitlist entry with id '{entry_id}' not found")
        return entry

    def find_waitlist_entry(self, student_id: str, course_id: str) -> WaitlistEntry | None:
        """Find a student's waitlist entry for a course, whatever its status."""
        stmt = select(WaitlistEntry).where(
            WaitlistEntry.student_id == student_id,
            WaitlistEntry.course_id == course_id,
        )
        return self.session.execute(stmt).scalars().first()

    def find_waitlist_entry_by_token(self, token: str) -> WaitlistEntry | None:
        """Find the entry holding a payment link token."""
        stmt = select(WaitlistEntry).where(WaitlistEntry.payment_link_token == token)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_waitlist(
        self, course_id: str, status: WaitlistStatus | None = None
    ) -> list[WaitlistEntry]:
        """List a course's waitlist entries ordered by position."""
        stmt = select(WaitlistEntry).where(WaitlistEntry.course_id == course_id)
        if status is not None:
            stmt = stmt.where(WaitlistEntry.status == status.value)
        stmt = stmt.order_by(WaitlistEntry.waitlist_position, WaitlistEntry.created_at)
        return list(self.session.execute(stmt).scalars().all())

    def insert_waitlist_entry(self, entry: WaitlistEntry) -> WaitlistEntry:
        """Insert a new waitlist entry."""
        self.session.add(entry)
        self.session.flush()
        return entry

    def delete_waitlist_entry(self, entry: WaitlistEntry) -> None:
        """Delete a waitlist entry. Callers re-sequence the remaining queue."""
        self.session.delete(entry)
        self.session.flush()

    def resequence_waitlist(self, ordered: Sequence[WaitlistEntry]) -> None:
        """Persist ``ordered`` as positions 1..N in a single flush."""
        for position, entry in enumerate(ordered, start=1):
            if entry.waitlist_position != position:
                entry.waitlist_position = position
        self.session.flush()

    # --- Settings Operations ---

    def get_setting(self, key: str) -> str | None:
        """Get a system setting value, or None if unset."""
        setting = self.session.get(SystemSetting, key)
        return setting.setting_value if setting is not None else None

    def list_settings(self) -> dict[str, str]:
        """All system settings as a dict."""
        rows = self.session.execute(select(SystemSetting)).scalars().all()
        return {row.setting_key: row.setting_value for row in rows}

    def set_setting(self, key: str, value: str) -> None:
        """Insert or replace a system setting."""
        setting = self.session.get(SystemSetting, key)
        if setting is None:
            self.session.add(SystemSetting(setting_key=key, setting_value=value))
        else:
            setting.setting_value = value
        self.session.flush()

    # --- Administrative ---

    def dashboard_stats(self) -> dict[str, Any]:
        """Registration totals for the admin dashboard.

        Revenue only counts completed payments.
        """
        total = select(func.count(Registration.id))
        revenue = select(func.coalesce(func.sum(Registration.payment_amount), 0)).where(
            Registration.payment_status == PaymentStatus.COMPLETED.value
        )
        pending = select(func.count(Registration.id)).where(
            Registration.payment_status == PaymentStatus.PENDING.value
        )
        active = select(func.count(Course.id)).where(Course.is_active.is_(True))
        revenue_total = self.session.execute(revenue).scalar_one()
        return {
            "total_registrations": int(self.session.execute(total).scalar_one()),
            "total_revenue": Decimal(str(revenue_total)).quantize(_CENTS),
            "active_courses": int(self.session.execute(active).scalar_one()),
            "pending_payments": int(self.session.execute(pending).scalar_one()),
        }

    def reset(self, include_courses: bool = False) -> dict[str, int]:
        """Delete waitlists, registrations and students (and courses if asked).

        Returns:
            Deleted row counts per table
        """
        counts = {
            "waitlist_entries": self.session.execute(delete(WaitlistEntry)).rowcount,
            "registrations": self.session.execute(delete(Registration)).rowcount,
            "students": self.session.execute(delete(Student)).rowcount,
        }
        if include_courses:
            counts["slot_pricing"] = self.session.execute(delete(SlotPricing)).rowcount
            counts["course_slots"] = self.session.execute(delete(CourseSlot)).rowcount
            counts["courses"] = self.session.execute(delete(Course)).rowcount
        self.session.flush()
        return counts


class StudioStore:
    """Main entry point for persistence.

    Owns the database and the per-course lock registry; every operation runs
    inside ``unit_of_work``.
    """

    def __init__(self, database_url: str = "studioreg.db") -> None:
        """Initialize the store.

        Creates database and tables if they don't exist.

        Args:
            database_url: SQLite path, ":memory:", or SQLAlchemy URL
        """
        self._db = Database(database_url)
        self._db.create_tables()
        self._locks = CourseLocks()

    @property
    def database(self) -> Database:
        """The underlying database manager."""
        return self._db

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    @contextmanager
    def unit_of_work(self, lock_courses: Iterable[str] = ()) -> Iterator[StoreSession]:
        """Open a transaction, optionally serialized per course.

        Locks for ``lock_courses`` are held (in-process, and as row locks where
        the database supports them) until the transaction commits or rolls
        back. Any exception rolls back every write made in the block.

        Args:
            lock_courses: Course IDs whose admission/waitlist state is mutated
        """
        with self._locks.hold(lock_courses) as course_ids:
            session = self._db.get_session()
            try:
                uow = StoreSession(session)
                if course_ids:
                    uow.lock_courses(course_ids)
                yield uow
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()
