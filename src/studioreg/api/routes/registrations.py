"""Registration endpoints (public checkout and admin payment handling)."""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from studioreg.api.dependencies import AdminIdDep, PortalDep
from studioreg.api.models import (
    APIResponse,
    BundleRequest,
    BundleResponse,
    CancelRequest,
    ComboRequest,
    ComboResponse,
    ConfirmPaymentRequest,
    FailPaymentRequest,
    RegisterRequest,
    RegisterResponse,
    RegistrationResponse,
    RegistrationUpdate,
    UncancelResponse,
    WaitlistRegisterRequest,
    bundle_to_response,
    combo_to_response,
    create_result_to_response,
    registration_to_response,
    uncancel_to_response,
)
from studioreg.store import PaymentStatus

router = APIRouter(tags=["registrations"])


@router.post(
    "/registrations",
    response_model=APIResponse[RegisterResponse],
    status_code=status.HTTP_201_CREATED,
)
def register(
    request: RegisterRequest, response: Response, portal: PortalDep
) -> APIResponse[RegisterResponse]:
    """Register for one course. A repeated request returns the existing pending registration."""
    result = portal.register_for_course(
        request.student.to_profile(),
        request.course_id,
        payment_amount=request.payment_amount,
        registration_type=request.registration_type,
        special_requests=request.special_requests,
    )
    if result.deduped:
        response.status_code = status.HTTP_200_OK
    return APIResponse(data=create_result_to_response(result))


@router.post(
    "/registrations/bundle",
    response_model=APIResponse[BundleResponse],
    status_code=status.HTTP_201_CREATED,
)
def register_bundle(request: BundleRequest, portal: PortalDep) -> APIResponse[BundleResponse]:
    """Register for a bundle of drop-in classes; all or nothing."""
    result = portal.register_bundle(
        request.student.to_profile(), request.course_ids, total_amount=request.total_amount
    )
    return APIResponse(data=bundle_to_response(result))


@router.post(
    "/registrations/crew-house-combo",
    response_model=APIResponse[ComboResponse],
    status_code=status.HTTP_201_CREATED,
)
def register_crew_house_combo(
    request: ComboRequest, portal: PortalDep
) -> APIResponse[ComboResponse]:
    """Register a crew member for house classes plus unlimited crew practice."""
    result = portal.register_crew_house_combo(
        request.student.to_profile(), request.house_course_ids
    )
    return APIResponse(data=combo_to_response(result))


@router.post(
    "/registrations/from-waitlist",
    response_model=APIResponse[RegisterResponse],
    status_code=status.HTTP_201_CREATED,
)
def register_from_waitlist(
    request: WaitlistRegisterRequest, portal: PortalDep
) -> APIResponse[RegisterResponse]:
    """Register using the link sent to a notified waitlist student."""
    result = portal.register_from_waitlist(request.token, payment_amount=request.payment_amount)
    return APIResponse(data=create_result_to_response(result))


@router.get("/admin/registrations", response_model=APIResponse[list[RegistrationResponse]])
def list_registrations(
    portal: PortalDep,
    course_id: str | None = None,
    payment_status: Annotated[PaymentStatus | None, Query(alias="status")] = None,
) -> APIResponse[list[RegistrationResponse]]:
    """List registrations, optionally filtered by course and payment status."""
    registrations = portal.list_registrations(course_id=course_id, status=payment_status)
    return APIResponse(data=[registration_to_response(r) for r in registrations])


@router.get(
    "/admin/registrations/{registration_id}",
    response_model=APIResponse[RegistrationResponse],
)
def get_registration(
    registration_id: str, portal: PortalDep
) -> APIResponse[RegistrationResponse]:
    """Get a registration by ID."""
    registration = portal.get_registration(registration_id)
    return APIResponse(data=registration_to_response(registration))


@router.put(
    "/admin/registrations/{registration_id}/confirm-payment",
    response_model=APIResponse[RegistrationResponse],
)
def confirm_payment(
    registration_id: str,
    portal: PortalDep,
    request: ConfirmPaymentRequest | None = None,
) -> APIResponse[RegistrationResponse]:
    """Mark a pending registration as paid."""
    request = request or ConfirmPaymentRequest()
    registration = portal.confirm_payment(
        registration_id, payment_method=request.payment_method, note=request.note
    )
    return APIResponse(data=registration_to_response(registration))


@router.put(
    "/admin/registrations/{registration_id}/fail",
    response_model=APIResponse[RegistrationResponse],
)
def mark_failed(
    registration_id: str,
    portal: PortalDep,
    request: FailPaymentRequest | None = None,
) -> APIResponse[RegistrationResponse]:
    """Mark a pending registration's payment as failed."""
    note = request.note if request is not None else None
    registration = portal.mark_failed(registration_id, note=note)
    return APIResponse(data=registration_to_response(registration))


@router.put(
    "/admin/registrations/{registration_id}/cancel",
    response_model=APIResponse[RegistrationResponse],
)
def cancel_registration(
    registration_id: str,
    portal: PortalDep,
    admin_id: AdminIdDep,
    request: CancelRequest | None = None,
) -> APIResponse[RegistrationResponse]:
    """Cancel a registration, freeing its place in the course."""
    reason = request.reason if request is not None else None
    registration = portal.cancel_registration(registration_id, reason=reason, actor_id=admin_id)
    return APIResponse(data=registration_to_response(registration))


@router.put(
    "/admin/registrations/{registration_id}/uncancel",
    response_model=APIResponse[UncancelResponse],
)
def uncancel_registration(
    registration_id: str, portal: PortalDep
) -> APIResponse[UncancelResponse]:
    """Restore a canceled registration to pending."""
    result = portal.uncancel_registration(registration_id)
    return APIResponse(data=uncancel_to_response(result))


@router.patch(
    "/admin/registrations/{registration_id}",
    response_model=APIResponse[RegistrationResponse],
)
def edit_registration(
    registration_id: str, request: RegistrationUpdate, portal: PortalDep
) -> APIResponse[RegistrationResponse]:
    """Edit the amount and the student's contact details (partial update)."""
    registration = portal.edit_registration(registration_id, request.to_edit())
    return APIResponse(data=registration_to_response(registration))
