"""
Unit tests for PACTE follow-up.
"""

from unittest.mock import AsyncMock, patch

import pytest

from supchaissac.core.errors import NotFoundError
from supchaissac.modules.pacte.schemas import PacteContractUpdate, PacteStatusUpdate
from supchaissac.modules.pacte.service import (
    PACTE_TARGET_FIELDS,
    get_statistics,
    list_teachers,
    percentage,
    update_contract,
    update_status,
)
from supchaissac.modules.sessions.models import SessionType
from supchaissac.modules.users.models import UserRole

SERVICE = "supchaissac.modules.pacte.service"


def test_percentage():
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67
    assert percentage(0, 0) == 0


class TestListTeachers:
    @pytest.mark.asyncio
    async def test_counts_by_declared_type(self, mock_db, make_user):
        jean = make_user(10, in_pacte=True, pacte_hours_target=36)
        marie = make_user(11, username="marie.durand@ac-nantes.fr", first_name="Marie")
        counts = {
            (10, SessionType.RCD): 4,
            (10, SessionType.DEVOIRS_FAITS): 6,
            (10, SessionType.HSE): 1,
        }
        with (
            patch(f"{SERVICE}.UserRepository") as mock_users,
            patch(f"{SERVICE}.session_repository") as mock_sessions,
            patch(f"{SERVICE}.current_school_year", return_value="2025-2026"),
        ):
            mock_users.list_teachers = AsyncMock(return_value=[jean, marie])
            mock_sessions.count_consumed_by_teacher = AsyncMock(return_value=counts)

            result = await list_teachers(mock_db)

        first, second = result
        assert first.name == "Jean Dupont"
        assert first.stats.rcd_sessions == 4
        assert first.stats.devoirs_faits_sessions == 6
        assert first.stats.validated_sessions == 11
        assert second.stats.validated_sessions == 0


class TestStatistics:
    @pytest.mark.asyncio
    async def test_statistics(self, mock_db, make_user):
        teachers = [
            make_user(10, in_pacte=True, pacte_hours_target=36, pacte_hours_completed=12),
            make_user(11, in_pacte=True, pacte_hours_target=18, pacte_hours_completed=18),
            make_user(12),
        ]
        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.list_teachers = AsyncMock(return_value=teachers)

            stats = await get_statistics(mock_db)

        assert stats.total_teachers == 3
        assert stats.teachers_with_pacte == 2
        assert stats.teachers_without_pacte == 1
        assert stats.pacte_percentage == 67
        assert stats.hours_target == 54
        assert stats.hours_completed == 30


class TestUpdateStatus:
    """Tests for update_status."""

    @pytest.mark.asyncio
    async def test_leaving_resets_figures(self, mock_db, make_user, secretary_user):
        teacher = make_user(10, in_pacte=True, pacte_hours_target=36, pacte_hours_rcd=10)
        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.get_by_id = AsyncMock(return_value=teacher)
            mock_users.update = AsyncMock(return_value=teacher)

            await update_status(mock_db, secretary_user, 10, PacteStatusUpdate(in_pacte=False))

        changes = mock_users.update.call_args.kwargs
        assert changes["in_pacte"] is False
        assert all(changes[field] == 0 for field in PACTE_TARGET_FIELDS)

    @pytest.mark.asyncio
    async def test_entering_sets_target(self, mock_db, make_user, secretary_user):
        teacher = make_user(10)
        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.get_by_id = AsyncMock(return_value=teacher)
            mock_users.update = AsyncMock(return_value=teacher)

            await update_status(
                mock_db,
                secretary_user,
                10,
                PacteStatusUpdate(in_pacte=True, pacte_hours_target=24),
            )

        mock_users.update.assert_awaited_once_with(
            mock_db, teacher, in_pacte=True, pacte_hours_target=24
        )

    @pytest.mark.asyncio
    async def test_non_teacher_not_found(self, mock_db, make_user, secretary_user):
        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.get_by_id = AsyncMock(return_value=make_user(20, role=UserRole.SECRETARY))

            with pytest.raises(NotFoundError):
                await update_status(mock_db, secretary_user, 20, PacteStatusUpdate(in_pacte=True))


class TestUpdateContract:
    @pytest.mark.asyncio
    async def test_only_given_fields_change(self, mock_db, make_user, secretary_user):
        teacher = make_user(10, in_pacte=True)
        with patch(f"{SERVICE}.UserRepository") as mock_users:
            mock_users.get_by_id = AsyncMock(return_value=teacher)
            mock_users.update = AsyncMock(return_value=teacher)

            await update_contract(
                mock_db,
                secretary_user,
                10,
                PacteContractUpdate(pacte_hours_df=12, pacte_hours_completed_df=3),
            )

        mock_users.update.assert_awaited_once_with(
            mock_db, teacher, pacte_hours_df=12, pacte_hours_completed_df=3
        )
