"""
Unit tests for the auth service.

These tests cover:
- Credential checks (username normalization, same error for both failures)
- Self-service profile changes
- Activation token checks and account activation
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from supchaissac.core.errors import NotFoundError, ValidationError
from supchaissac.core.security import verify_password
from supchaissac.modules.auth.schemas import ProfileUpdate
from supchaissac.modules.auth.service import (
    InvalidCredentialsError,
    activate_account,
    authenticate,
    update_profile,
    verify_activation_token,
)

USER_REPOSITORY = "supchaissac.modules.auth.service.UserRepository"
TOKEN = "f" * 64


class TestAuthenticate:
    """Tests for authenticate."""

    @pytest.mark.asyncio
    async def test_valid_credentials(self, mock_db, make_user):
        user = make_user(10)
        with patch(USER_REPOSITORY) as mock_users:
            mock_users.get_by_username = AsyncMock(return_value=user)

            result = await authenticate(mock_db, "  Jean.Dupont@AC-Nantes.fr ", "motdepasse123")

        assert result is user
        mock_users.get_by_username.assert_awaited_once_with(mock_db, "jean.dupont@ac-nantes.fr")

    @pytest.mark.asyncio
    async def test_not_activated_can_log_in(self, mock_db, make_user):
        user = make_user(10, is_activated=False)
        with patch(USER_REPOSITORY) as mock_users:
            mock_users.get_by_username = AsyncMock(return_value=user)

            assert await authenticate(mock_db, "jean.dupont@ac-nantes.fr", "motdepasse123") is user

    @pytest.mark.asyncio
    async def test_wrong_password(self, mock_db, make_user):
        with patch(USER_REPOSITORY) as mock_users:
            mock_users.get_by_username = AsyncMock(return_value=make_user(10))

            with pytest.raises(InvalidCredentialsError) as exc_info:
                await authenticate(mock_db, "jean.dupont@ac-nantes.fr", "mauvais")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_user_same_error(self, mock_db):
        with patch(USER_REPOSITORY) as mock_users:
            mock_users.get_by_username = AsyncMock(return_value=None)

            with pytest.raises(InvalidCredentialsError) as exc_info:
                await authenticate(mock_db, "inconnu@ac-nantes.fr", "motdepasse123")

        assert exc_info.value.message == "Identifiants incorrects"


class TestUpdateProfile:
    """Tests for update_profile."""

    @pytest.mark.asyncio
    async def test_first_name(self, mock_db, teacher_user, make_user):
        user = make_user(10)
        with patch(USER_REPOSITORY) as mock_users:
            mock_users.get_by_id = AsyncMock(return_value=user)
            mock_users.update = AsyncMock(return_value=user)

            await update_profile(mock_db, teacher_user, ProfileUpdate(first_name=" Jean-Luc "))

        mock_users.update.assert_awaited_once_with(
            mock_db, user, first_name="Jean-Luc", name="Jean-Luc Dupont", initials="JD"
        )

    @pytest.mark.asyncio
    async def test_password_change(self, mock_db, teacher_user, make_user):
        user = make_user(10)
        with patch(USER_REPOSITORY) as mock_users:
            mock_users.get_by_id = AsyncMock(return_value=user)
            mock_users.update = AsyncMock(return_value=user)

            await update_profile(
                mock_db,
                teacher_user,
                ProfileUpdate(current_password="motdepasse123", new_password="nouveau-secret"),
            )

        new_hash = mock_users.update.call_args.kwargs["password_hash"]
        assert verify_password("nouveau-secret", new_hash)

    @pytest.mark.parametrize(
        "current_password,new_password,error_code",
        [
            (None, "nouveau-secret", "PASSWORD_REQUIRED"),
            ("mauvais", "nouveau-secret", "WRONG_PASSWORD"),
            ("motdepasse123", "court", "PASSWORD_TOO_SHORT"),
        ],
    )
    @pytest.mark.asyncio
    async def test_password_change_refused(
        self, mock_db, teacher_user, make_user, current_password, new_password, error_code
    ):
        with patch(USER_REPOSITORY) as mock_users:
            mock_users.get_by_id = AsyncMock(return_value=make_user(10))
            mock_users.update = AsyncMock()

            with pytest.raises(ValidationError) as exc_info:
                await update_profile(
                    mock_db,
                    teacher_user,
                    ProfileUpdate(current_password=current_password, new_password=new_password),
                )

        assert exc_info.value.error_code == error_code
        mock_users.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_nothing_to_change(self, mock_db, teacher_user, make_user):
        user = make_user(10)
        with patch(USER_REPOSITORY) as mock_users:
            mock_users.get_by_id = AsyncMock(return_value=user)
            mock_users.update = AsyncMock()

            assert await update_profile(mock_db, teacher_user, ProfileUpdate()) is user

        mock_users.update.assert_not_called()


class TestActivation:
    """Tests for activation tokens."""

    @pytest.mark.asyncio
    async def test_unknown_token(self, mock_db):
        with patch(USER_REPOSITORY) as mock_users:
            mock_users.get_by_activation_token = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError):
                await verify_activation_token(mock_db, TOKEN)

    @pytest.mark.asyncio
    async def test_expired_token(self, mock_db, make_user):
        user = make_user(
            10,
            is_activated=False,
            activation_token=TOKEN,
            activation_token_expiry=datetime.now(UTC) - timedelta(minutes=1),
        )
        with patch(USER_REPOSITORY) as mock_users:
            mock_users.get_by_activation_token = AsyncMock(return_value=user)

            with pytest.raises(ValidationError) as exc_info:
                await verify_activation_token(mock_db, TOKEN)

        assert exc_info.value.error_code == "TOKEN_EXPIRED"

    @pytest.mark.asyncio
    async def test_already_activated(self, mock_db, make_user):
        user = make_user(10, is_activated=True, activation_token=TOKEN)
        with patch(USER_REPOSITORY) as mock_users:
            mock_users.get_by_activation_token = AsyncMock(return_value=user)

            with pytest.raises(ValidationError) as exc_info:
                await verify_activation_token(mock_db, TOKEN)

        assert exc_info.value.error_code == "ALREADY_ACTIVATED"

    @pytest.mark.asyncio
    async def test_activate_burns_token(self, mock_db, make_user):
        user = make_user(
            10,
            is_activated=False,
            activation_token=TOKEN,
            activation_token_expiry=datetime.now(UTC) + timedelta(days=7),
        )
        with patch(USER_REPOSITORY) as mock_users:
            mock_users.get_by_activation_token = AsyncMock(return_value=user)
            mock_users.update = AsyncMock(return_value=user)

            await activate_account(mock_db, TOKEN, "mon-nouveau-mdp")

        kwargs = mock_users.update.call_args.kwargs
        assert kwargs["is_activated"] is True
        assert kwargs["activation_token"] is None
        assert kwargs["activation_token_expiry"] is None
        assert verify_password("mon-nouveau-mdp", kwargs["password_hash"])
