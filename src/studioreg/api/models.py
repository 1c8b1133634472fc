"""Pydantic models for REST API."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from studioreg.catalog import CourseAvailability, CourseDefinition, SlotDefinition
from studioreg.portal import BundleResult, ComboResult, ProfileUpdate
from studioreg.registration import CreateResult, RegistrationEdit, UncancelResult
from studioreg.students import ProfileStatus, StudentProfile
from studioreg.waitlist import JoinResult, NotifyResult

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper.

    ``code`` is a machine readable error category (``course_full``,
    ``mixed_levels_not_allowed`` ...) set alongside ``error``.
    """

    data: T | None = None
    error: str | None = None
    code: str | None = None


# Student models


class StudentProfileRequest(BaseModel):
    """Contact and profile fields submitted with a registration or waitlist request."""

    email: str = Field(..., min_length=3, max_length=255)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    date_of_birth: date | None = None
    emergency_contact_name: str | None = Field(default=None, max_length=255)
    emergency_contact_phone: str | None = Field(default=None, max_length=50)
    medical_conditions: str | None = None
    dance_experience: str | None = None
    instagram_handle: str | None = Field(default=None, max_length=100)
    how_heard_about_us: str | None = Field(default=None, max_length=255)

    def to_profile(self) -> StudentProfile:
        return StudentProfile(**self.model_dump())


class ProfileCheckRequest(BaseModel):
    """Request model for a profile check."""

    email: str = Field(..., min_length=3, max_length=255)


class ClassifyRequest(BaseModel):
    """Request model for setting a student's type."""

    student_type: str = Field(..., min_length=1)


class StudentResponse(BaseModel):
    """Response model for a student."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str
    last_name: str
    phone: str | None
    instagram_handle: str | None
    student_type: str
    profile_complete: bool
    admin_classified: bool


class ProfileCheckResponse(BaseModel):
    """Response model for a profile check."""

    student_id: str
    email: str
    student_type: str
    profile_complete: bool
    created: bool


def profile_status_to_response(status: ProfileStatus) -> ProfileCheckResponse:
    """Convert a ProfileStatus to ProfileCheckResponse."""
    return ProfileCheckResponse(
        student_id=status.student.id,
        email=status.student.email,
        student_type=status.student_type,
        profile_complete=status.profile_complete,
        created=status.created,
    )


# Course models


class SlotCreate(BaseModel):
    """Request model for one slot of a new course."""

    capacity: int
    prices: dict[str, Decimal] = Field(default_factory=dict)
    slot_name: str | None = None
    difficulty_level: str | None = None
    day_of_week: str | None = None
    practice_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    location: str | None = None


class CourseCreate(BaseModel):
    """Request model for creating a course."""

    name: str = Field(..., min_length=1, max_length=255)
    course_type: str
    slots: list[SlotCreate] = Field(..., min_length=1)
    description: str | None = None
    duration_weeks: int = 1
    required_student_type: str = "any"
    is_active: bool = True
    start_date: date | None = None
    end_date: date | None = None

    def to_definition(self) -> CourseDefinition:
        data = self.model_dump(exclude={"slots"})
        return CourseDefinition(
            slots=[SlotDefinition(**slot.model_dump()) for slot in self.slots], **data
        )


class SlotResponse(BaseModel):
    """Response model for a slot with prices and remaining spots."""

    id: str
    slot_name: str | None
    difficulty_level: str | None
    capacity: int
    day_of_week: str | None
    practice_date: date | None
    start_time: str | None
    end_time: str | None
    location: str | None
    prices: dict[str, Decimal]
    available_spots: int


class CourseResponse(BaseModel):
    """Response model for a course with availability."""

    id: str
    name: str
    description: str | None
    course_type: str
    duration_weeks: int
    required_student_type: str
    is_active: bool
    start_date: date | None
    end_date: date | None
    total_capacity: int
    completed_count: int
    available_spots: int
    schedule_info: str
    slots: list[SlotResponse]


def course_to_response(view: CourseAvailability) -> CourseResponse:
    """Convert a CourseAvailability to CourseResponse."""
    course = view.course
    return CourseResponse(
        id=course.id,
        name=course.name,
        description=course.description,
        course_type=course.course_type,
        duration_weeks=course.duration_weeks,
        required_student_type=course.required_student_type,
        is_active=course.is_active,
        start_date=course.start_date,
        end_date=course.end_date,
        total_capacity=view.total_capacity,
        completed_count=view.completed_count,
        available_spots=view.available_spots,
        schedule_info=view.schedule_info,
        slots=[
            SlotResponse(
                id=s.slot.id,
                slot_name=s.slot.slot_name,
                difficulty_level=s.slot.difficulty_level,
                capacity=s.slot.capacity,
                day_of_week=s.slot.day_of_week,
                practice_date=s.slot.practice_date,
                start_time=s.slot.start_time,
                end_time=s.slot.end_time,
                location=s.slot.location,
                prices=s.prices,
                available_spots=s.available_spots,
            )
            for s in view.slots
        ],
    )


class ProfileUpdateResponse(BaseModel):
    """Response model for a profile update: the student and the courses now open to them."""

    student: StudentResponse
    courses: list[CourseResponse]


def profile_update_to_response(result: ProfileUpdate) -> ProfileUpdateResponse:
    """Convert a ProfileUpdate to ProfileUpdateResponse."""
    return ProfileUpdateResponse(
        student=StudentResponse.model_validate(result.student),
        courses=[course_to_response(c) for c in result.courses],
    )


# Registration models


class RegisterRequest(BaseModel):
    """Request model for registering for one course."""

    student: StudentProfileRequest
    course_id: str
    payment_amount: Decimal | None = Field(default=None, ge=0)
    registration_type: str | None = Field(default=None, max_length=50)
    special_requests: str | None = None


class BundleRequest(BaseModel):
    """Request model for a drop-in bundle."""

    student: StudentProfileRequest
    course_ids: list[str] = Field(..., min_length=1)
    total_amount: Decimal | None = Field(default=None, ge=0)


class ComboRequest(BaseModel):
    """Request model for the crew + house combo."""

    student: StudentProfileRequest
    house_course_ids: list[str] = Field(..., min_length=1)


class WaitlistRegisterRequest(BaseModel):
    """Request model for registering through a waitlist link."""

    token: str = Field(..., min_length=1)
    payment_amount: Decimal | None = Field(default=None, ge=0)


class ConfirmPaymentRequest(BaseModel):
    """Request model for confirming a payment."""

    payment_method: str = Field(default="Venmo", max_length=50)
    note: str | None = Field(default=None, max_length=255)


class FailPaymentRequest(BaseModel):
    """Request model for marking a payment failed."""

    note: str | None = Field(default=None, max_length=255)


class CancelRequest(BaseModel):
    """Request model for canceling a registration."""

    reason: str | None = None


class RegistrationUpdate(BaseModel):
    """Request model for editing a registration (partial update)."""

    payment_amount: Decimal | None = Field(default=None, ge=0)
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    special_requests: str | None = None

    def to_edit(self) -> RegistrationEdit:
        return RegistrationEdit(**self.model_dump())


class RegistrationResponse(BaseModel):
    """Response model for a registration."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    payment_amount: Decimal
    payment_status: str
    registration_type: str
    created_from_waitlist: bool
    payment_method: str | None
    transaction_reference: str | None
    special_requests: str | None
    canceled_at: datetime | None
    canceled_by: str | None
    cancellation_reason: str | None
    created_at: datetime


def registration_to_response(registration: Any) -> RegistrationResponse:
    """Convert a Registration model to RegistrationResponse."""
    return RegistrationResponse.model_validate(registration)


class RegisterResponse(BaseModel):
    """Response model for a single-course registration."""

    registration: RegistrationResponse
    deduped: bool


def create_result_to_response(result: CreateResult) -> RegisterResponse:
    """Convert a CreateResult to RegisterResponse."""
    return RegisterResponse(
        registration=registration_to_response(result.registration), deduped=result.deduped
    )


class BundleResponse(BaseModel):
    """Response model for a bundle registration."""

    registration_ids: list[str]
    registrations: list[RegistrationResponse]
    total_amount: Decimal


def bundle_to_response(result: BundleResult) -> BundleResponse:
    """Convert a BundleResult to BundleResponse."""
    return BundleResponse(
        registration_ids=result.registration_ids,
        registrations=[registration_to_response(r) for r in result.registrations],
        total_amount=result.total_amount,
    )


class ComboResponse(BaseModel):
    """Response model for a crew + house combo."""

    house_registration_ids: list[str]
    crew_registration_ids: list[str]
    registrations: list[RegistrationResponse]


def combo_to_response(result: ComboResult) -> ComboResponse:
    """Convert a ComboResult to ComboResponse."""
    return ComboResponse(
        house_registration_ids=result.house_registration_ids,
        crew_registration_ids=result.crew_registration_ids,
        registrations=[
            registration_to_response(r)
            for r in [*result.house_registrations, *result.crew_registrations]
        ],
    )


class UncancelResponse(BaseModel):
    """Response model for un-canceling a registration."""

    registration: RegistrationResponse
    capacity_available: bool


def uncancel_to_response(result: UncancelResult) -> UncancelResponse:
    """Convert an UncancelResult to UncancelResponse."""
    return UncancelResponse(
        registration=registration_to_response(result.registration),
        capacity_available=result.capacity_available,
    )


# Waitlist models


class WaitlistJoinRequest(BaseModel):
    """Request model for joining a waitlist."""

    student: StudentProfileRequest
    course_id: str


class NotifyRequest(BaseModel):
    """Request model for notifying a waitlist entry."""

    expires_hours: int | None = Field(default=None, ge=1)


class ReorderRequest(BaseModel):
    """Request model for moving a waitlist entry."""

    new_position: int


class WaitlistEntryResponse(BaseModel):
    """Response model for a waitlist entry (the payment link token is never exposed)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    waitlist_position: int
    status: str
    notification_sent: bool
    notification_sent_at: datetime | None
    notification_expires_at: datetime | None
    created_at: datetime


def waitlist_entry_to_response(entry: Any) -> WaitlistEntryResponse:
    """Convert a WaitlistEntry model to WaitlistEntryResponse."""
    return WaitlistEntryResponse.model_validate(entry)


class WaitlistJoinResponse(BaseModel):
    """Response model for joining a waitlist."""

    position: int
    created: bool
    reactivated: bool
    entry: WaitlistEntryResponse


def join_result_to_response(result: JoinResult) -> WaitlistJoinResponse:
    """Convert a JoinResult to WaitlistJoinResponse."""
    return WaitlistJoinResponse(
        position=result.position,
        created=result.created,
        reactivated=result.reactivated,
        entry=waitlist_entry_to_response(result.entry),
    )


class NotifyResponse(BaseModel):
    """Response model for a waitlist notification."""

    notified: bool
    entry: WaitlistEntryResponse | None
    email_sent: bool
    email_error: str | None


def notify_result_to_response(result: NotifyResult) -> NotifyResponse:
    """Convert a NotifyResult to NotifyResponse."""
    return NotifyResponse(
        notified=result.notified,
        entry=waitlist_entry_to_response(result.entry) if result.entry is not None else None,
        email_sent=result.email_sent,
        email_error=result.email_error,
    )


# Settings models


class SettingUpdate(BaseModel):
    """Request model for updating one system setting."""

    key: str = Field(..., min_length=1, max_length=100)
    value: str


class SettingsResponse(BaseModel):
    """Response model for system settings."""

    registration_open: bool
    settings: dict[str, str]


class ResetRequest(BaseModel):
    """Request model for a bulk reset."""

    include_courses: bool = False


class ResetResponse(BaseModel):
    """Response model for a bulk reset."""

    deleted: dict[str, int]


class DashboardStatsResponse(BaseModel):
    """Response model for the admin dashboard totals."""

    model_config = ConfigDict(from_attributes=True)

    total_registrations: int
    total_revenue: Decimal
    active_courses: int
    pending_payments: int
