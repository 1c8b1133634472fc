"""Registration Portal - service facade over the registration core."""

from studioreg.portal.models import BundleResult, ComboResult, DashboardStats, ProfileUpdate
from studioreg.portal.portal import REGISTRATION_OPEN_KEY, RegistrationPortal

__all__ = [
    "REGISTRATION_OPEN_KEY",
    "BundleResult",
    "ComboResult",
    "DashboardStats",
    "ProfileUpdate",
    "RegistrationPortal",
]
