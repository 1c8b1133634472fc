"""Waitlist endpoints."""

from fastapi import APIRouter, Response, status

from studioreg.api.dependencies import PortalDep
from studioreg.api.models import (
    APIResponse,
    NotifyRequest,
    NotifyResponse,
    ReorderRequest,
    WaitlistEntryResponse,
    WaitlistJoinRequest,
    WaitlistJoinResponse,
    join_result_to_response,
    notify_result_to_response,
    waitlist_entry_to_response,
)

router = APIRouter(tags=["waitlist"])


@router.post(
    "/waitlist",
    response_model=APIResponse[WaitlistJoinResponse],
    status_code=status.HTTP_201_CREATED,
)
def join_waitlist(
    request: WaitlistJoinRequest, response: Response, portal: PortalDep
) -> APIResponse[WaitlistJoinResponse]:
    """Join a course's waitlist; re-joining returns the existing position."""
    result = portal.join_waitlist(request.student.to_profile(), request.course_id)
    if not result.created:
        response.status_code = status.HTTP_200_OK
    return APIResponse(data=join_result_to_response(result))


@router.get(
    "/admin/courses/{course_id}/waitlist",
    response_model=APIResponse[list[WaitlistEntryResponse]],
)
def list_waitlist(course_id: str, portal: PortalDep) -> APIResponse[list[WaitlistEntryResponse]]:
    """List a course's waitlist: active entries in order, then notified ones."""
    entries = portal.list_waitlist(course_id)
    return APIResponse(data=[waitlist_entry_to_response(e) for e in entries])


@router.post("/admin/waitlist/{entry_id}/notify", response_model=APIResponse[NotifyResponse])
def notify_entry(
    entry_id: str, portal: PortalDep, request: NotifyRequest | None = None
) -> APIResponse[NotifyResponse]:
    """Email a registration link to a waitlisted student."""
    expires_hours = request.expires_hours if request is not None else None
    result = portal.notify_waitlist_entry(entry_id, expires_hours)
    return APIResponse(data=notify_result_to_response(result))


@router.post(
    "/admin/courses/{course_id}/waitlist/notify-next",
    response_model=APIResponse[NotifyResponse],
)
def notify_next(
    course_id: str, portal: PortalDep, request: NotifyRequest | None = None
) -> APIResponse[NotifyResponse]:
    """Notify the first active entry; an empty waitlist notifies nobody."""
    expires_hours = request.expires_hours if request is not None else None
    result = portal.notify_next_on_waitlist(course_id, expires_hours)
    return APIResponse(data=notify_result_to_response(result))


@router.delete("/admin/waitlist/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_entry(entry_id: str, portal: PortalDep) -> None:
    """Remove an entry from the waitlist."""
    portal.remove_from_waitlist(entry_id)


@router.put(
    "/admin/waitlist/{entry_id}/position",
    response_model=APIResponse[WaitlistEntryResponse],
)
def reorder_entry(
    entry_id: str, request: ReorderRequest, portal: PortalDep
) -> APIResponse[WaitlistEntryResponse]:
    """Move an active entry to a new position."""
    entry = portal.reorder_waitlist(entry_id, request.new_position)
    return APIResponse(data=waitlist_entry_to_response(entry))
