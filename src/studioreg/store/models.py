"""SQLAlchemy models for the registration store."""

from __future__ import annotations

import uuid
from datetime import date, datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from decimal import Decimal  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class CourseType(StrEnum):
    """Kind of course offered in the catalog."""

    MULTI_WEEK = "multi-week"
    DROP_IN = "drop_in"
    CREW_PRACTICE = "crew_practice"


class RequiredStudentType(StrEnum):
    """Student type a course is restricted to."""

    ANY = "any"
    CREW_MEMBER = "crew_member"


class StudentType(StrEnum):
    """Classification of a student."""

    GENERAL = "general"
    CREW_MEMBER = "crew_member"
    TEST = "test"


class PricingType(StrEnum):
    """How a slot is sold."""

    FULL_PACKAGE = "full_package"
    DROP_IN = "drop_in"


class PaymentStatus(StrEnum):
    """Registration payment status."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"


class WaitlistStatus(StrEnum):
    """Waitlist entry status."""

    ACTIVE = "active"
    NOTIFIED = "notified"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Course(Base):
    """Course model - a catalog entry owning its slots."""

    __tablename__ = "courses"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    course_type: Mapped[str] = mapped_column(String(20), nullable=False)
    duration_weeks: Mapped[int] = mapped_column(Integer, nullable=False)
    required_student_type: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    slots: Mapped[list[CourseSlot]] = relationship(
        "CourseSlot", back_populates="course", cascade="all, delete-orphan"
    )

    def __init__(
        self,
        name: str,
        course_type: str,
        id: str | None = None,
        description: str | None = None,
        duration_weeks: int = 1,
        required_student_type: str = RequiredStudentType.ANY.value,
        is_active: bool = True,
        start_date: date | None = None,
        end_date: date | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.description = description
        self.course_type = course_type
        self.duration_weeks = duration_weeks
        self.required_student_type = required_student_type
        self.is_active = is_active
        self.start_date = start_date
        self.end_date = end_date

    @property
    def type(self) -> CourseType:
        """Get course_type as CourseType enum."""
        return CourseType(self.course_type)

    def __repr__(self) -> str:
        return f"<Course(id={self.id!r}, name={self.name!r}, type={self.course_type!r})>"


class CourseSlot(Base):
    """Slot model - a dated or weekly time/location/capacity unit of a course."""

    __tablename__ = "course_slots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    slot_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    difficulty_level: Mapped[str | None] = mapped_column(String(100), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    day_of_week: Mapped[str | None] = mapped_column(String(20), nullable=True)
    practice_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    start_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    course: Mapped[Course] = relationship("Course", back_populates="slots")
    pricing: Mapped[list[SlotPricing]] = relationship(
        "SlotPricing", back_populates="slot", cascade="all, delete-orphan"
    )

    def __init__(
        self,
        capacity: int,
        id: str | None = None,
        course_id: str | None = None,
        slot_name: str | None = None,
        difficulty_level: str | None = None,
        day_of_week: str | None = None,
        practice_date: date | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
        location: str | None = None,
        sort_order: int = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        if course_id is not None:
            self.course_id = course_id
        self.slot_name = slot_name
        self.difficulty_level = difficulty_level
        self.capacity = capacity
        self.day_of_week = day_of_week
        self.practice_date = practice_date
        self.start_time = start_time
        self.end_time = end_time
        self.location = location
        self.sort_order = sort_order

    def __repr__(self) -> str:
        return (
            f"<CourseSlot(id={self.id!r}, course_id={self.course_id!r}, "
            f"capacity={self.capacity})>"
        )


class SlotPricing(Base):
    """Pricing model - one price per (slot, pricing_type)."""

    __tablename__ = "slot_pricing"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    slot_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("course_slots.id", ondelete="CASCADE"), nullable=False
    )
    pricing_type: Mapped[str] = mapped_column(String(20), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Relationships
    slot: Mapped[CourseSlot] = relationship("CourseSlot", back_populates="pricing")

    def __init__(
        self,
        pricing_type: str,
        price: Decimal,
        id: str | None = None,
        slot_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        if slot_id is not None:
            self.slot_id = slot_id
        self.pricing_type = pricing_type
        self.price = price

    def __repr__(self) -> str:
        return (
            f"<SlotPricing(slot_id={self.slot_id!r}, type={self.pricing_type!r}, "
            f"price={self.price})>"
        )


class Student(Base):
    """Student model - identified by email."""

    __tablename__ = "students"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    emergency_contact_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emergency_contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    medical_conditions: Mapped[str | None] = mapped_column(Text, nullable=True)
    dance_experience: Mapped[str | None] = mapped_column(Text, nullable=True)
    instagram_handle: Mapped[str | None] = mapped_column(String(100), nullable=True)
    how_heard_about_us: Mapped[str | None] = mapped_column(String(255), nullable=True)
    student_type: Mapped[str] = mapped_column(String(20), nullable=False)
    profile_complete: Mapped[bool] = mapped_column(Boolean, nullable=False)
    admin_classified: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __init__(
        self,
        email: str,
        id: str | None = None,
        first_name: str = "Student",
        last_name: str = "",
        student_type: str = StudentType.GENERAL.value,
        profile_complete: bool = False,
        admin_classified: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.email = email
        self.first_name = first_name
        self.last_name = last_name
        self.student_type = student_type
        self.profile_complete = profile_complete
        self.admin_classified = admin_classified

    @property
    def type(self) -> StudentType:
        """Get student_type as StudentType enum."""
        return StudentType(self.student_type)

    def __repr__(self) -> str:
        return f"<Student(id={self.id!r}, email={self.email!r}, type={self.student_type!r})>"


class Registration(Base):
    """Registration model - one student's claim on one course."""

    __tablename__ = "registrations"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id"), nullable=False, index=True
    )
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id"), nullable=False, index=True
    )
    payment_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False)
    registration_type: Mapped[str] = mapped_column(String(50), nullable=False)
    created_from_waitlist: Mapped[bool] = mapped_column(Boolean, nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    transaction_reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)
    canceled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    canceled_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __init__(
        self,
        student_id: str,
        course_id: str,
        payment_amount: Decimal,
        registration_type: str,
        id: str | None = None,
        payment_status: str | None = None,
        created_from_waitlist: bool = False,
        special_requests: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.student_id = student_id
        self.course_id = course_id
        self.payment_amount = payment_amount
        self.payment_status = (
            payment_status if payment_status is not None else PaymentStatus.PENDING.value
        )
        self.registration_type = registration_type
        self.created_from_waitlist = created_from_waitlist
        self.special_requests = special_requests

    @property
    def status(self) -> PaymentStatus:
        """Get payment_status as PaymentStatus enum."""
        return PaymentStatus(self.payment_status)

    def __repr__(self) -> str:
        return (
            f"<Registration(id={self.id!r}, student_id={self.student_id!r}, "
            f"course_id={self.course_id!r}, status={self.payment_status!r})>"
        )


class WaitlistEntry(Base):
    """Waitlist entry model - a student's place in a course's queue."""

    __tablename__ = "waitlist_entries"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id"), nullable=False, index=True
    )
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id"), nullable=False, index=True
    )
    waitlist_position: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    notification_sent: Mapped[bool] = mapped_column(Boolean, nullable=False)
    notification_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    notification_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    payment_link_token: Mapped[str | None] = mapped_column(
        String(64), nullable=True, unique=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __init__(
        self,
        student_id: str,
        course_id: str,
        waitlist_position: int,
        id: str | None = None,
        status: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.student_id = student_id
        self.course_id = course_id
        self.waitlist_position = waitlist_position
        self.status = status if status is not None else WaitlistStatus.ACTIVE.value
        self.notification_sent = False
        self.notification_sent_at = None
        self.notification_expires_at = None
        self.payment_link_token = None

    @property
    def waitlist_status(self) -> WaitlistStatus:
        """Get status as WaitlistStatus enum."""
        return WaitlistStatus(self.status)

    def __repr__(self) -> str:
        return (
            f"<WaitlistEntry(id={self.id!r}, course_id={self.course_id!r}, "
            f"position={self.waitlist_position}, status={self.status!r})>"
        )


class SystemSetting(Base):
    """Key/value system setting (e.g. registration_open)."""

    __tablename__ = "system_settings"
    __mapper_args__ = {"eager_defaults": True}

    setting_key: Mapped[str] = mapped_column(String(100), primary_key=True)
    setting_value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<SystemSetting({self.setting_key!r}={self.setting_value!r})>"
