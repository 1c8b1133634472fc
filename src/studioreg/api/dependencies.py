"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends, Header

from studioreg.portal import RegistrationPortal

DEFAULT_ADMIN_ID = "admin"

# Global RegistrationPortal instance (initialized on app startup)
_portal: RegistrationPortal | None = None


def init_portal(portal: RegistrationPortal) -> RegistrationPortal:
    """Initialize the global RegistrationPortal instance."""
    global _portal  # noqa: PLW0603
    _portal = portal
    return _portal


def close_portal() -> None:
    """Close the global RegistrationPortal instance."""
    global _portal  # noqa: PLW0603
    if _portal is not None:
        _portal.close()
        _portal = None


def get_portal() -> Generator[RegistrationPortal, None, None]:
    """Dependency that provides the RegistrationPortal instance."""
    if _portal is None:
        raise RuntimeError("RegistrationPortal not initialized. Call init_portal() first.")
    yield _portal


# Type alias for dependency injection
PortalDep = Annotated[RegistrationPortal, Depends(get_portal)]


def get_admin_id(x_admin_id: Annotated[str | None, Header()] = None) -> str:
    """Acting admin, taken from the ``X-Admin-Id`` header."""
    return (x_admin_id or "").strip() or DEFAULT_ADMIN_ID


AdminIdDep = Annotated[str, Depends(get_admin_id)]
