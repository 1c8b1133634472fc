"""REST API for studioreg."""

from studioreg.api.app import create_app
from studioreg.api.models import APIResponse

__all__ = [
    "APIResponse",
    "create_app",
]
