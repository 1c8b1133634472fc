"""Data models for the Registration Ledger."""

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from studioreg.store.models import PaymentStatus, Registration


class RegistrationType(StrEnum):
    """Known registration type tags (the column itself is free text)."""

    FULL_COURSE = "full-course"
    PER_CLASS = "per-class"
    CREW_PRACTICE = "crew-practice"
    DROP_IN_BUNDLE = "drop_in_bundle"
    CREW_HOUSE_COMBO = "crew_house_combo"
    CREW_UNLIMITED = "crew_unlimited"


# Allowed payment status transitions
TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset(
        {PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.CANCELED}
    ),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.CANCELED}),
    PaymentStatus.CANCELED: frozenset({PaymentStatus.PENDING}),
    PaymentStatus.FAILED: frozenset(),
}


@dataclass
class CreateResult:
    """Outcome of a registration create.

    Attributes:
        registration: The new or pre-existing pending registration.
        deduped: True when an existing pending registration was returned.
    """

    registration: Registration
    deduped: bool


@dataclass
class UncancelResult:
    """Outcome of an un-cancel: back to pending, plus current room in the course."""

    registration: Registration
    capacity_available: bool


@dataclass
class RegistrationEdit:
    """Admin edits to a registration; None leaves a field unchanged."""

    payment_amount: Decimal | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    special_requests: str | None = None
