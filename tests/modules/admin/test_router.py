"""
HTTP-level tests for the admin router: every endpoint is ADMIN only.
"""

from unittest.mock import AsyncMock, patch

import pytest

from supchaissac.core.errors import ConflictError
from supchaissac.modules.admin.schemas import SessionsResetResponse

SERVICE = "supchaissac.modules.admin.router.service"


class TestAdminGuard:
    @pytest.mark.parametrize("user_fixture", ["teacher_user", "secretary_user", "principal_user"])
    def test_non_admin_forbidden(self, request, api_client, user_fixture):
        user = request.getfixturevalue(user_fixture)

        response = api_client(user).get("/api/admin/users")

        assert response.status_code == 403
        assert response.json()["detail"]["required_roles"] == ["ADMIN"]

    def test_anonymous(self, api_client):
        assert api_client(None).get("/api/admin/stats").status_code == 401


class TestUserEndpoints:
    def test_delete_returns_no_content(self, api_client, admin_user):
        with patch(SERVICE) as mock_service:
            mock_service.delete_user = AsyncMock()

            response = api_client(admin_user).delete("/api/admin/users/10")

        assert response.status_code == 204
        mock_service.delete_user.assert_awaited_once()

    def test_delete_with_sessions_conflicts(self, api_client, admin_user):
        with patch(SERVICE) as mock_service:
            mock_service.delete_user = AsyncMock(
                side_effect=ConflictError("Cet utilisateur a des sessions déclarées")
            )

            response = api_client(admin_user).delete("/api/admin/users/10")

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "CONFLICT"

    def test_create_user(self, api_client, admin_user, make_user):
        with patch(SERVICE) as mock_service:
            mock_service.create_user = AsyncMock(return_value=make_user(42))

            response = api_client(admin_user).post(
                "/api/admin/users",
                json={
                    "username": "jean.dupont@ac-nantes.fr",
                    "first_name": "Jean",
                    "last_name": "Dupont",
                },
            )

        assert response.status_code == 201
        assert response.json()["id"] == 42


class TestResetEndpoint:
    def test_reset(self, api_client, admin_user):
        with patch(SERVICE) as mock_service:
            mock_service.reset_sessions = AsyncMock(
                return_value=SessionsResetResponse(
                    deleted_sessions=3, deleted_files=1, school_year="2024-2025"
                )
            )

            response = api_client(admin_user).post(
                "/api/admin/sessions/reset",
                json={"confirm": True, "school_year": "2024-2025"},
            )

        assert response.status_code == 200
        mock_service.reset_sessions.assert_awaited_once()
        assert mock_service.reset_sessions.call_args.args[2:] == (True, "2024-2025")
