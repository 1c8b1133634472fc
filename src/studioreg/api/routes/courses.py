"""Course catalog endpoints."""

from fastapi import APIRouter, status

from studioreg.api.dependencies import PortalDep
from studioreg.api.models import (
    APIResponse,
    CourseCreate,
    CourseResponse,
    course_to_response,
)
from studioreg.store import CourseNotFoundError

router = APIRouter(tags=["courses"])


@router.get("/courses", response_model=APIResponse[list[CourseResponse]])
def list_courses(
    portal: PortalDep, student_type: str | None = None
) -> APIResponse[list[CourseResponse]]:
    """List active courses, filtered to those visible to ``student_type`` when given."""
    courses = portal.list_courses(student_type=student_type)
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.get("/courses/{course_id}", response_model=APIResponse[CourseResponse])
def get_course(course_id: str, portal: PortalDep) -> APIResponse[CourseResponse]:
    """Get a course with its slots, pricing and available spots."""
    course = portal.get_course(course_id)
    if course is None:
        raise CourseNotFoundError(f"Course with id '{course_id}' not found")
    return APIResponse(data=course_to_response(course))


@router.post(
    "/admin/courses",
    response_model=APIResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_course(course: CourseCreate, portal: PortalDep) -> APIResponse[CourseResponse]:
    """Create a course with its slots and pricing."""
    created = portal.add_course(course.to_definition())
    return APIResponse(data=course_to_response(created))
