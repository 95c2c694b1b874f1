"""
HTTP-level tests for the sessions router: role guards and error rendering.
"""

from unittest.mock import AsyncMock, patch

from supchaissac.core.errors import InvalidTransitionError
from supchaissac.modules.sessions.models import SessionStatus

SERVICE = "supchaissac.modules.sessions.router.service"


class TestAuthentication:
    def test_anonymous_gets_401(self, api_client):
        response = api_client(None).get("/api/sessions")

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "NOT_AUTHENTICATED"


class TestRoleGuards:
    """Staff endpoints refuse teachers before reaching the service."""

    def test_teacher_cannot_list_all(self, api_client, teacher_user):
        with patch(SERVICE) as mock_service:
            mock_service.list_all_sessions = AsyncMock()
            response = api_client(teacher_user).get("/api/sessions/admin/all")

        assert response.status_code == 403
        detail = response.json()["detail"]
        assert detail["error"] == "FORBIDDEN"
        assert detail["required_roles"] == ["ADMIN", "PRINCIPAL", "SECRETARY"]
        mock_service.list_all_sessions.assert_not_called()

    def test_secretary_cannot_validate(self, api_client, secretary_user):
        response = api_client(secretary_user).put(
            "/api/sessions/1/validate", json={"action": "validate"}
        )

        assert response.status_code == 403
        assert response.json()["detail"]["required_roles"] == ["ADMIN", "PRINCIPAL"]


class TestEndpoints:
    """Tests for successful calls and service errors."""

    def test_create_returns_201(self, api_client, teacher_user, make_session):
        with patch(SERVICE) as mock_service:
            mock_service.create_session = AsyncMock(return_value=make_session())
            response = api_client(teacher_user).post(
                "/api/sessions",
                json={
                    "date": "2025-03-10",
                    "time_slot": "M2",
                    "type": "RCD",
                    "class_name": "6A",
                    "replaced_teacher_last_name": "MARTIN",
                },
            )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING_REVIEW"
        assert body["teacher_id"] == 10

    def test_invalid_body_is_422(self, api_client, teacher_user):
        response = api_client(teacher_user).post(
            "/api/sessions", json={"date": "2025-03-10", "time_slot": "Z9", "type": "RCD"}
        )
        assert response.status_code == 422

    def test_invalid_transition_rendered(self, api_client, secretary_user):
        with patch(SERVICE) as mock_service:
            mock_service.mark_paid = AsyncMock(
                side_effect=InvalidTransitionError("PAID", "PAID")
            )
            response = api_client(secretary_user).put("/api/sessions/1/mark-paid")

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "INVALID_TRANSITION"

    def test_mark_paid(self, api_client, secretary_user, make_session):
        with patch(SERVICE) as mock_service:
            mock_service.mark_paid = AsyncMock(
                return_value=make_session(status=SessionStatus.PAID)
            )
            response = api_client(secretary_user).put("/api/sessions/1/mark-paid")

        assert response.status_code == 200
        assert response.json()["status"] == "PAID"

    def test_blocked_dates(self, api_client, teacher_user):
        response = api_client(teacher_user).get(
            "/api/sessions/calendar/blocked", params={"start": "2025-03-07", "end": "2025-03-10"}
        )

        assert response.status_code == 200
        assert [b["date"] for b in response.json()["blocked"]] == ["2025-03-08", "2025-03-09"]

class TestUpdateFields:
    """Body keys outside the teacher's editable fields are refused, not ignored."""

    def test_teacher_cannot_change_workflow_fields(self, api_client, teacher_user, make_session):
        session = make_session()
        with patch("supchaissac.modules.sessions.service.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=session)
            mock_repo.save = AsyncMock(side_effect=lambda db, s: s)
            response = api_client(teacher_user).put(
                "/api/sessions/1",
                json={"status": "PAID", "teacher_id": 999, "rejection_reason": "x"},
            )

        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "FORBIDDEN"
        mock_repo.save.assert_not_called()

    def test_teacher_comment_update_allowed(self, api_client, teacher_user, make_session):
        session = make_session()
        with patch("supchaissac.modules.sessions.service.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=session)
            mock_repo.save = AsyncMock(side_effect=lambda db, s: s)
            response = api_client(teacher_user).put(
                "/api/sessions/1", json={"comment": "Salle 12"}
            )

        assert response.status_code == 200
        assert response.json()["comment"] == "Salle 12"
