"""Unit tests for settings and maintenance routes."""

import pytest
from fastapi.testclient import TestClient


@pytest.mark.unit
class TestSettingsRoutes:
    """Tests for system settings routes."""

    def test_open_by_default(self, client: TestClient) -> None:
        """With no setting stored, registration is open."""
        response = client.get("/api/v1/settings")

        assert response.status_code == 200
        assert response.json()["data"] == {"registration_open": True, "settings": {}}

    def test_close_registration(self, client: TestClient, make_course) -> None:
        """Storing registration_open=false closes public registration."""
        course = make_course()

        response = client.put(
            "/api/v1/admin/settings", json={"key": "registration_open", "value": "false"}
        )

        assert response.json()["data"]["registration_open"] is False
        assert response.json()["data"]["settings"] == {"registration_open": "false"}
        register = client.post(
            "/api/v1/registrations",
            json={"student": {"email": "dancer@example.com"}, "course_id": course.id},
        )
        assert register.status_code == 409

    def test_dashboard_stats(
        self, client: TestClient, make_course, make_student, make_registration
    ) -> None:
        """The dashboard reports totals with revenue from completed payments only."""
        course = make_course()
        paid = make_student(email="paid@example.com")
        waiting = make_student(email="waiting@example.com")
        make_registration(paid.id, course.id, status="completed", amount="30.00")
        make_registration(waiting.id, course.id, status="pending", amount="30.00")

        response = client.get("/api/v1/admin/dashboard/stats")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "total_registrations": 2,
            "total_revenue": "30.00",
            "active_courses": 1,
            "pending_payments": 1,
        }

    def test_blank_key(self, client: TestClient) -> None:
        """A whitespace-only key is rejected."""
        response = client.put("/api/v1/admin/settings", json={"key": "  ", "value": "x"})

        assert response.status_code == 422
        assert response.json()["data"] == {"field": "key"}


@pytest.mark.unit
class TestResetRoute:
    """Tests for the bulk reset route."""

    def test_reset_keeps_courses(
        self, client: TestClient, make_course, make_student, make_registration
    ) -> None:
        """By default the catalog survives a reset."""
        course = make_course()
        make_registration(make_student().id, course.id)

        response = client.post("/api/v1/admin/reset", headers={"X-Admin-Id": "owner"})

        deleted = response.json()["data"]["deleted"]
        assert deleted["registrations"] == 1
        assert deleted["students"] == 1
        assert "courses" not in deleted
        assert len(client.get("/api/v1/courses").json()["data"]) == 1

    def test_reset_including_courses(self, client: TestClient, make_course) -> None:
        """include_courses also clears the catalog."""
        make_course()

        response = client.post("/api/v1/admin/reset", json={"include_courses": True})

        assert response.json()["data"]["deleted"]["courses"] == 1
        assert client.get("/api/v1/courses").json()["data"] == []
