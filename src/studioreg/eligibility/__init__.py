"""Eligibility rules - student-type access control and bundle policy."""

from studioreg.eligibility.exceptions import AccessDeniedError
from studioreg.eligibility.rules import (
    bundle_single_track,
    combo_eligible,
    course_visible_to,
    ensure_course_access,
    is_week_gated,
)

__all__ = [
    "AccessDeniedError",
    "bundle_single_track",
    "combo_eligible",
    "course_visible_to",
    "ensure_course_access",
    "is_week_gated",
]
