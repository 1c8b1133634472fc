"""Fixtures for API route tests."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from studioreg.api.app import register_exception_handlers
from studioreg.api.dependencies import get_portal
from studioreg.api.routes import courses, registrations, students, system, waitlist
from studioreg.portal import RegistrationPortal


@pytest.fixture
def app(portal: RegistrationPortal) -> FastAPI:
    """Create a test FastAPI app backed by an in-memory portal."""
    app = FastAPI()

    def override_get_portal():
        yield portal

    app.dependency_overrides[get_portal] = override_get_portal
    register_exception_handlers(app)
    for module in (courses, students, registrations, waitlist, system):
        app.include_router(module.router, prefix="/api/v1")

    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
