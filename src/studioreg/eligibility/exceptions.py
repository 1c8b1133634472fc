"""Exceptions for eligibility rules."""

from studioreg.exceptions import AccessDeniedError

__all__ = ["AccessDeniedError"]
