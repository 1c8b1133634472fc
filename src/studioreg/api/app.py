"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from studioreg.api.dependencies import close_portal, init_portal
from studioreg.api.models import APIResponse
from studioreg.api.routes import courses, registrations, students, system, waitlist
from studioreg.config import Settings, get_settings
from studioreg.exceptions import (
    AccessDeniedError,
    CapacityError,
    DuplicateError,
    InvalidStateError,
    NotFoundError,
    StudioRegError,
    ValidationError,
)
from studioreg.portal import RegistrationPortal
from studioreg.registration import BundleRejectedError, CourseFullError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)


def _error(
    status_code: int, error: str, code: str, data: dict[str, Any] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[dict[str, Any]](data=data, error=error, code=code).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map error categories to HTTP responses in the APIResponse envelope."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
        return _error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            str(exc),
            "validation_error",
            {"field": exc.field} if exc.field else None,
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc), "not_found")

    @app.exception_handler(AccessDeniedError)
    async def access_denied_handler(_request: Request, exc: AccessDeniedError) -> JSONResponse:
        return _error(
            status.HTTP_403_FORBIDDEN,
            str(exc),
            "access_denied",
            {"required_type": exc.required_type},
        )

    @app.exception_handler(CapacityError)
    async def capacity_handler(_request: Request, exc: CapacityError) -> JSONResponse:
        data = {"course_id": exc.course_id} if isinstance(exc, CourseFullError) else None
        return _error(status.HTTP_409_CONFLICT, str(exc), "course_full", data)

    @app.exception_handler(DuplicateError)
    async def duplicate_handler(_request: Request, exc: DuplicateError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc), "duplicate")

    @app.exception_handler(BundleRejectedError)
    async def bundle_rejected_handler(
        _request: Request, exc: BundleRejectedError
    ) -> JSONResponse:
        return _error(
            status.HTTP_409_CONFLICT,
            str(exc),
            str(exc.reason),
            {"reason": str(exc.reason), "course_id": exc.course_id},
        )

    @app.exception_handler(InvalidStateError)
    async def invalid_state_handler(_request: Request, exc: InvalidStateError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc), "invalid_state")

    @app.exception_handler(StudioRegError)
    async def studioreg_error_handler(_request: Request, exc: StudioRegError) -> JSONResponse:
        logger.error("Unhandled registration error: %s", exc)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "internal_error"
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    portal = RegistrationPortal.from_settings(app.state.settings)
    init_portal(portal)
    logger.info("Registration portal started")

    yield
    # Shutdown
    close_portal()


def create_app(database_url: str | None = None, settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings if settings is not None else get_settings()
    if database_url is not None:
        settings = settings.model_copy(update={"database_url": database_url})

    app = FastAPI(
        title="Studio Registration API",
        description="REST API for dance studio course registration and waitlists",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(courses.router, prefix="/api/v1")
    app.include_router(students.router, prefix="/api/v1")
    app.include_router(registrations.router, prefix="/api/v1")
    app.include_router(waitlist.router, prefix="/api/v1")
    app.include_router(system.router, prefix="/api/v1")

    return app
