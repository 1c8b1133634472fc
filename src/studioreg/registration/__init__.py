"""Registration Ledger - the registration state machine."""

from studioreg.registration.exceptions import (
    BundleRejectedError,
    CourseFullError,
    DuplicateRegistrationError,
    InvalidTransitionError,
    RegistrationClosedError,
)
from studioreg.registration.ledger import RegistrationLedger, normalize_amount
from studioreg.registration.models import (
    TRANSITIONS,
    CreateResult,
    RegistrationEdit,
    RegistrationType,
    UncancelResult,
)

__all__ = [
    "TRANSITIONS",
    "BundleRejectedError",
    "CourseFullError",
    "CreateResult",
    "DuplicateRegistrationError",
    "InvalidTransitionError",
    "RegistrationClosedError",
    "RegistrationEdit",
    "RegistrationLedger",
    "RegistrationType",
    "UncancelResult",
    "normalize_amount",
]
