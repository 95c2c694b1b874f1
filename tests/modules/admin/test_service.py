"""
Unit tests for the admin service.

These tests cover:
- Account creation, update and deletion rules
- Activation links
- Teacher import (create vs update by username)
- Bulk reset of sessions and their stored files
"""

from datetime import date
from unittest.mock import AsyncMock, call, patch

import pytest
from botocore.exceptions import EndpointConnectionError

from supchaissac.core.email import EmailResult
from supchaissac.core.errors import ConflictError, NotFoundError, ValidationError
from supchaissac.core.security import DEFAULT_PASSWORD, verify_password
from supchaissac.modules.admin.schemas import UserCreate, UserUpdate
from supchaissac.modules.admin.service import (
    create_user,
    delete_user,
    import_teachers,
    initials_from_name,
    reset_sessions,
    send_activation,
    update_user,
)
from supchaissac.modules.users.models import Civility, UserRole

SERVICE = "supchaissac.modules.admin.service"

PRONOTE_EXPORT = (
    "login;civilite;nom;prenom;email;discipline;classes;statutPacte\n"
    "jean.dupont@ac-nantes.fr;M.;Dupont;Jean;;Mathématiques;6A,5B;OUI\n"
    ";Mme;Durand;Marie;MARIE.DURAND@ac-nantes.fr;Anglais;4C;NON\n"
    "sans.nom@ac-nantes.fr;;;Paul;;;;\n"
).encode("cp1252")


def test_initials_from_name():
    assert initials_from_name("Jean Dupont") == "JD"
    assert initials_from_name("secrétariat") == "S"


class TestCreateUser:
    """Tests for create_user."""

    @pytest.mark.asyncio
    async def test_username_taken(self, mock_db, admin_user):
        data = UserCreate(
            username="Jean.Dupont@ac-nantes.fr", first_name="Jean", last_name="Dupont"
        )
        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.username_exists = AsyncMock(return_value=True)

            with pytest.raises(ConflictError):
                await create_user(mock_db, admin_user, data)

        mock_users.username_exists.assert_awaited_once_with(mock_db, "jean.dupont@ac-nantes.fr")

    @pytest.mark.asyncio
    async def test_defaults(self, mock_db, admin_user, make_user):
        data = UserCreate(
            username="secretariat@ac-nantes.fr",
            name="Secrétariat Collège",
            role=UserRole.SECRETARY,
        )
        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.username_exists = AsyncMock(return_value=False)
            mock_users.create = AsyncMock(return_value=make_user(21, role=UserRole.SECRETARY))

            await create_user(mock_db, admin_user, data)

        kwargs = mock_users.create.call_args.kwargs
        assert kwargs["initials"] == "SC"
        assert kwargs["role"] == UserRole.SECRETARY
        assert verify_password(DEFAULT_PASSWORD, kwargs["password_hash"])
        mock_db.commit.assert_awaited_once()

    def test_name_required(self):
        with pytest.raises(ValueError):
            UserCreate(username="anonyme@ac-nantes.fr")


class TestUpdateUser:
    @pytest.mark.asyncio
    async def test_rename_recomputes_initials(self, mock_db, admin_user, make_user):
        user = make_user(10)
        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.get_by_id = AsyncMock(return_value=user)
            mock_users.update = AsyncMock(return_value=user)

            await update_user(mock_db, admin_user, 10, UserUpdate(last_name="Martin"))

        mock_users.update.assert_awaited_once_with(
            mock_db, user, last_name="Martin", initials="JM"
        )

    @pytest.mark.asyncio
    async def test_username_conflict(self, mock_db, admin_user, make_user):
        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.get_by_id = AsyncMock(return_value=make_user(10))
            mock_users.username_exists = AsyncMock(return_value=True)

            with pytest.raises(ConflictError):
                await update_user(
                    mock_db, admin_user, 10, UserUpdate(username="marie.durand@ac-nantes.fr")
                )

    def test_password_field_refused(self):
        with pytest.raises(ValueError):
            UserUpdate(password="nouveau-mot-de-passe")


class TestDeleteUser:
    """Tests for delete_user."""

    @pytest.mark.asyncio
    async def test_cannot_delete_self(self, mock_db, admin_user):
        with pytest.raises(ValidationError) as exc_info:
            await delete_user(mock_db, admin_user, admin_user.id)
        assert exc_info.value.error_code == "CANNOT_DELETE_SELF"

    @pytest.mark.asyncio
    async def test_unknown_user(self, mock_db, admin_user):
        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.get_by_id = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError):
                await delete_user(mock_db, admin_user, 99)

    @pytest.mark.asyncio
    async def test_user_with_sessions(self, mock_db, admin_user, make_user):
        with (
            patch(f"{SERVICE}.UserRepository") as mock_users,
            patch(f"{SERVICE}.session_repository") as mock_sessions,
        ):
            mock_users.get_by_id = AsyncMock(return_value=make_user(10))
            mock_users.delete = AsyncMock()
            mock_sessions.count_for_teacher = AsyncMock(return_value=3)

            with pytest.raises(ConflictError):
                await delete_user(mock_db, admin_user, 10)

        mock_users.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete(self, mock_db, admin_user, make_user):
        with (
            patch(f"{SERVICE}.UserRepository") as mock_users,
            patch(f"{SERVICE}.session_repository") as mock_sessions,
        ):
            mock_users.get_by_id = AsyncMock(return_value=make_user(10))
            mock_users.delete = AsyncMock(return_value=True)
            mock_sessions.count_for_teacher = AsyncMock(return_value=0)

            await delete_user(mock_db, admin_user, 10)

        mock_users.delete.assert_awaited_once_with(mock_db, 10)


class TestSendActivation:
    @pytest.mark.asyncio
    async def test_already_activated(self, mock_db, admin_user, make_user):
        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.get_by_id = AsyncMock(return_value=make_user(10, is_activated=True))

            with pytest.raises(ValidationError) as exc_info:
                await send_activation(mock_db, admin_user, 10)

        assert exc_info.value.error_code == "ALREADY_ACTIVATED"

    @pytest.mark.asyncio
    async def test_issues_token_and_sends(self, mock_db, admin_user, make_user):
        user = make_user(10, is_activated=False)
        simulated = EmailResult(sent=False, message="simulated", link="http://localhost/activate")
        with (
            patch(f"{SERVICE}.UserRepository") as mock_users,
            patch(f"{SERVICE}.generate_activation_token", return_value="a" * 64),
            patch(
                f"{SERVICE}.send_activation_email",
                new_callable=AsyncMock,
                return_value=simulated,
            ) as mock_send,
        ):
            mock_users.get_by_id = AsyncMock(return_value=user)
            mock_users.update = AsyncMock(return_value=user)

            result = await send_activation(mock_db, admin_user, 10)

        assert result is simulated
        assert mock_users.update.call_args.kwargs["activation_token"] == "a" * 64
        assert mock_users.update.call_args.kwargs["activation_token_expiry"] is not None
        mock_send.assert_awaited_once_with("jean.dupont@ac-nantes.fr", "Jean Dupont", "a" * 64)


class TestImportTeachers:
    """Tests for the Pronote staff import."""

    @pytest.mark.asyncio
    async def test_create_and_update(self, mock_db, admin_user, make_user):
        existing = make_user(10, subject=None, in_pacte=False)

        async def by_username(db, username):
            return existing if username == "jean.dupont@ac-nantes.fr" else None

        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.get_by_username = AsyncMock(side_effect=by_username)
            mock_users.create = AsyncMock()

            result = await import_teachers(mock_db, admin_user, PRONOTE_EXPORT)

        assert (result.created, result.updated, result.errors) == (1, 1, 1)
        assert result.error_details[0].line == 4

        assert existing.subject == "Mathématiques"
        assert existing.in_pacte is True
        assert existing.civility == Civility.MR

        kwargs = mock_users.create.call_args.kwargs
        assert kwargs["username"] == "marie.durand@ac-nantes.fr"
        assert kwargs["role"] == UserRole.TEACHER
        assert kwargs["name"] == "Marie Durand"
        assert kwargs["initials"] == "MD"
        assert kwargs["in_pacte"] is False
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_file(self, mock_db, admin_user):
        with pytest.raises(ValidationError) as exc_info:
            await import_teachers(mock_db, admin_user, b"login;nom;prenom\n")
        assert exc_info.value.error_code == "EMPTY_FILE"


class TestResetSessions:
    """Tests for reset_sessions."""

    @pytest.mark.asyncio
    async def test_confirmation_required(self, mock_db, admin_user):
        with patch(f"{SERVICE}.session_repository") as mock_sessions:
            mock_sessions.delete_all = AsyncMock()

            with pytest.raises(ValidationError) as exc_info:
                await reset_sessions(mock_db, admin_user, confirm=False)

        assert exc_info.value.error_code == "CONFIRMATION_REQUIRED"
        mock_sessions.delete_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_year_reset_removes_files_best_effort(self, mock_db, admin_user):
        keys = ["sessions/1/a.pdf", "sessions/2/b.pdf"]
        with (
            patch(f"{SERVICE}.session_repository") as mock_sessions,
            patch(f"{SERVICE}.attachment_repository") as mock_attachments,
            patch(f"{SERVICE}.storage") as mock_storage,
        ):
            mock_attachments.list_keys = AsyncMock(return_value=keys)
            mock_sessions.delete_all = AsyncMock(return_value=14)
            mock_storage.is_storage_configured.return_value = True
            mock_storage.delete_file = AsyncMock(
                side_effect=[None, EndpointConnectionError(endpoint_url="https://s3.example.test")]
            )

            result = await reset_sessions(mock_db, admin_user, True, "2024-2025")

        assert result.deleted_sessions == 14
        assert result.deleted_files == 1
        assert result.school_year == "2024-2025"
        bounds = (date(2024, 9, 1), date(2025, 8, 31))
        mock_attachments.list_keys.assert_awaited_once_with(mock_db, *bounds)
        mock_sessions.delete_all.assert_awaited_once_with(mock_db, *bounds)
        assert mock_storage.delete_file.await_args_list == [call(k) for k in keys]

    @pytest.mark.asyncio
    async def test_reset_without_storage(self, mock_db, admin_user):
        with (
            patch(f"{SERVICE}.session_repository") as mock_sessions,
            patch(f"{SERVICE}.attachment_repository") as mock_attachments,
            patch(f"{SERVICE}.storage") as mock_storage,
        ):
            mock_attachments.list_keys = AsyncMock(return_value=["sessions/1/a.pdf"])
            mock_sessions.delete_all = AsyncMock(return_value=2)
            mock_storage.is_storage_configured.return_value = False
            mock_storage.delete_file = AsyncMock()

            result = await reset_sessions(mock_db, admin_user, True)

        assert result.deleted_files == 0
        assert result.school_year is None
        mock_sessions.delete_all.assert_awaited_once_with(mock_db, None, None)
        mock_storage.delete_file.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_year(self, mock_db, admin_user):
        with pytest.raises(ValidationError) as exc_info:
            await reset_sessions(mock_db, admin_user, True, "2024-2023")
        assert exc_info.value.error_code == "INVALID_SCHOOL_YEAR"
