"""Student profile and classification endpoints."""

from fastapi import APIRouter

from studioreg.api.dependencies import PortalDep
from studioreg.api.models import (
    APIResponse,
    ClassifyRequest,
    CourseResponse,
    ProfileCheckRequest,
    ProfileCheckResponse,
    ProfileUpdateResponse,
    StudentProfileRequest,
    StudentResponse,
    course_to_response,
    profile_status_to_response,
    profile_update_to_response,
)

router = APIRouter(tags=["students"])


@router.post("/students/profile-check", response_model=APIResponse[ProfileCheckResponse])
def check_profile(
    request: ProfileCheckRequest, portal: PortalDep
) -> APIResponse[ProfileCheckResponse]:
    """Report the student's type and whether their profile is complete."""
    result = portal.check_profile(request.email)
    return APIResponse(data=profile_status_to_response(result))


@router.put("/students/profile", response_model=APIResponse[ProfileUpdateResponse])
def update_profile(
    request: StudentProfileRequest, portal: PortalDep
) -> APIResponse[ProfileUpdateResponse]:
    """Create or update a student's profile and list the courses it unlocks."""
    result = portal.upsert_student(request.to_profile())
    return APIResponse(data=profile_update_to_response(result))


@router.get("/students/courses", response_model=APIResponse[list[CourseResponse]])
def list_student_courses(email: str, portal: PortalDep) -> APIResponse[list[CourseResponse]]:
    """List the courses a student with a complete profile may register for."""
    courses = portal.courses_for_student(email)
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.put("/admin/students/{student_id}/type", response_model=APIResponse[StudentResponse])
def classify_student(
    student_id: str, request: ClassifyRequest, portal: PortalDep
) -> APIResponse[StudentResponse]:
    """Set a student's type (general, crew_member or test)."""
    student = portal.classify_student(student_id, request.student_type)
    return APIResponse(data=StudentResponse.model_validate(student))
