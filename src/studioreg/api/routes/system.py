"""System settings and maintenance endpoints."""

from fastapi import APIRouter

from studioreg.api.dependencies import AdminIdDep, PortalDep
from studioreg.api.models import (
    APIResponse,
    DashboardStatsResponse,
    ResetRequest,
    ResetResponse,
    SettingsResponse,
    SettingUpdate,
)
from studioreg.portal import RegistrationPortal

router = APIRouter(tags=["system"])


def _settings_response(portal: RegistrationPortal) -> SettingsResponse:
    return SettingsResponse(
        registration_open=portal.is_registration_open(),
        settings=portal.get_settings(),
    )


@router.get("/settings", response_model=APIResponse[SettingsResponse])
def get_settings(portal: PortalDep) -> APIResponse[SettingsResponse]:
    """Current system settings, including whether registration is open."""
    return APIResponse(data=_settings_response(portal))


@router.put("/admin/settings", response_model=APIResponse[SettingsResponse])
def update_setting(request: SettingUpdate, portal: PortalDep) -> APIResponse[SettingsResponse]:
    """Store one system setting (e.g. ``registration_open``)."""
    portal.update_setting(request.key, request.value)
    return APIResponse(data=_settings_response(portal))


@router.post("/admin/reset", response_model=APIResponse[ResetResponse])
def reset(
    portal: PortalDep, admin_id: AdminIdDep, request: ResetRequest | None = None
) -> APIResponse[ResetResponse]:
    """Delete all waitlists, registrations and students (and courses if asked)."""
    include_courses = request.include_courses if request is not None else False
    deleted = portal.bulk_reset(include_courses=include_courses, actor_id=admin_id)
    return APIResponse(data=ResetResponse(deleted=deleted))


@router.get("/admin/dashboard/stats", response_model=APIResponse[DashboardStatsResponse])
def dashboard_stats(portal: PortalDep) -> APIResponse[DashboardStatsResponse]:
    """Registration totals, completed revenue, active courses and pending payments."""
    stats = portal.dashboard_stats()
    return APIResponse(data=DashboardStatsResponse.model_validate(stats))
