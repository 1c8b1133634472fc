"""Unit tests for course and student routes."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from studioreg.portal import RegistrationPortal


@pytest.mark.unit
class TestCourseRoutes:
    """Tests for course catalog routes."""

    def test_list_courses(
        self, client: TestClient, make_course, make_student, make_registration
    ) -> None:
        """Listed courses report capacity and remaining spots."""
        course = make_course(capacity=3)
        make_registration(make_student().id, course.id, status="completed")

        response = client.get("/api/v1/courses")

        assert response.status_code == 200
        [listed] = response.json()["data"]
        assert listed["id"] == course.id
        assert listed["total_capacity"] == 3
        assert listed["completed_count"] == 1
        assert listed["available_spots"] == 2
        assert Decimal(listed["slots"][0]["prices"]["drop_in"]) == Decimal("25")

    def test_list_hides_crew_courses_from_general(self, client: TestClient, make_course) -> None:
        """A student_type filter hides crew-only courses from others."""
        open_course = make_course(name="House")
        make_course(
            name="Crew", course_type="crew_practice", required_student_type="crew_member"
        )

        general = client.get("/api/v1/courses", params={"student_type": "general"})
        crew = client.get("/api/v1/courses", params={"student_type": "crew_member"})

        assert [c["id"] for c in general.json()["data"]] == [open_course.id]
        assert len(crew.json()["data"]) == 2

    def test_get_course(self, client: TestClient, make_course) -> None:
        """A single course includes its schedule summary."""
        course = make_course()

        response = client.get(f"/api/v1/courses/{course.id}")

        assert response.status_code == 200
        assert response.json()["data"]["schedule_info"]

    def test_get_missing_course(self, client: TestClient) -> None:
        """Unknown courses return 404."""
        response = client.get("/api/v1/courses/missing")

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_create_course(self, client: TestClient) -> None:
        """Admins can create a course with slots and prices."""
        response = client.post(
            "/api/v1/admin/courses",
            json={
                "name": "Hip Hop Series",
                "course_type": "multi-week",
                "duration_weeks": 4,
                "slots": [
                    {
                        "capacity": 12,
                        "prices": {"full_package": "100", "drop_in": "30"},
                        "day_of_week": "Thursday",
                        "start_time": "6:00 PM",
                        "end_time": "7:00 PM",
                    }
                ],
            },
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["total_capacity"] == 12
        assert data["available_spots"] == 12
        assert data["duration_weeks"] == 4

    def test_create_invalid_course(self, client: TestClient) -> None:
        """Catalog rule violations return 422 naming the field."""
        response = client.post(
            "/api/v1/admin/courses",
            json={
                "name": "Broken",
                "course_type": "drop_in",
                "slots": [{"capacity": 0, "prices": {"drop_in": "20"}}],
            },
        )

        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"
        assert response.json()["data"] == {"field": "slots[0].capacity"}


@pytest.mark.unit
class TestStudentRoutes:
    """Tests for student routes."""

    def test_profile_check_creates_student(self, client: TestClient) -> None:
        """An unknown email gets a bare, incomplete student record."""
        response = client.post(
            "/api/v1/students/profile-check", json={"email": "New@Example.com"}
        )

        data = response.json()["data"]
        assert data["created"] is True
        assert data["email"] == "new@example.com"
        assert data["student_type"] == "general"
        assert data["profile_complete"] is False

    def test_courses_require_complete_profile(self, client: TestClient, make_course) -> None:
        """Students with incomplete profiles cannot browse courses."""
        make_course()
        client.post("/api/v1/students/profile-check", json={"email": "new@example.com"})

        response = client.get("/api/v1/students/courses", params={"email": "new@example.com"})

        assert response.status_code == 422
        assert response.json()["data"] == {"field": "profile"}

    def test_courses_for_complete_profile(
        self, client: TestClient, portal: RegistrationPortal, make_course, make_profile
    ) -> None:
        """A complete profile lists the courses visible to the student."""
        course = make_course()
        portal.students.upsert_student(make_profile())

        response = client.get(
            "/api/v1/students/courses", params={"email": "dancer@example.com"}
        )

        assert response.status_code == 200
        assert [c["id"] for c in response.json()["data"]] == [course.id]

    def test_profile_update_unlocks_courses(self, client: TestClient, make_course) -> None:
        """A new student checks in, fills in the profile form and can then browse."""
        course = make_course()
        client.post("/api/v1/students/profile-check", json={"email": "new@example.com"})

        response = client.put(
            "/api/v1/students/profile",
            json={
                "email": "new@example.com",
                "first_name": "Noor",
                "last_name": "Haddad",
                "instagram_handle": "@noor.moves",
                "dance_experience": "1-2 years",
            },
        )

        data = response.json()["data"]
        assert response.status_code == 200
        assert data["student"]["profile_complete"] is True
        assert data["student"]["instagram_handle"] == "noor.moves"
        assert [c["id"] for c in data["courses"]] == [course.id]
        listed = client.get("/api/v1/students/courses", params={"email": "new@example.com"})
        assert listed.status_code == 200
        assert [c["id"] for c in listed.json()["data"]] == [course.id]

    def test_profile_update_still_incomplete(self, client: TestClient, make_course) -> None:
        """Without dance experience no courses are offered yet."""
        make_course()

        response = client.put(
            "/api/v1/students/profile", json={"email": "new@example.com", "first_name": "Noor"}
        )

        data = response.json()["data"]
        assert data["student"]["profile_complete"] is False
        assert data["courses"] == []

    def test_profile_update_bad_email(self, client: TestClient) -> None:
        """Malformed emails are rejected on the email field."""
        response = client.put(
            "/api/v1/students/profile", json={"email": "nope", "first_name": "Noor"}
        )

        assert response.status_code == 422
        assert response.json()["data"] == {"field": "email"}

    def test_classify(self, client: TestClient, make_student) -> None:
        """Admins can make a student a crew member."""
        student = make_student()

        response = client.put(
            f"/api/v1/admin/students/{student.id}/type", json={"student_type": "crew_member"}
        )

        data = response.json()["data"]
        assert data["student_type"] == "crew_member"
        assert data["admin_classified"] is True

    def test_classify_invalid_type(self, client: TestClient, make_student) -> None:
        """Unknown types are rejected."""
        student = make_student()

        response = client.put(
            f"/api/v1/admin/students/{student.id}/type", json={"student_type": "vip"}
        )

        assert response.status_code == 422
        assert response.json()["data"] == {"field": "student_type"}

    def test_classify_unknown_student(self, client: TestClient) -> None:
        """Unknown students return 404."""
        response = client.put(
            "/api/v1/admin/students/missing/type", json={"student_type": "general"}
        )

        assert response.status_code == 404
