"""
Tests for the statements built by the session repository.
"""

from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from supchaissac.modules.sessions import repository
from supchaissac.modules.sessions.models import SessionStatus, SessionType


def compiled_statement(mock_db):
    statement = mock_db.execute.call_args.args[0]
    return statement.compile(dialect=postgresql.dialect())


class TestCountConsumed:
    """Quota consumption counts only validated or paid sessions in the period."""

    @pytest.mark.asyncio
    async def test_filters_on_consuming_statuses_and_period(self, mock_db):
        result = MagicMock()
        result.scalar_one.return_value = 3
        mock_db.execute.return_value = result

        count = await repository.count_consumed(
            mock_db, SessionType.RCD, date(2024, 9, 1), date(2025, 8, 31)
        )

        assert count == 3
        compiled = compiled_statement(mock_db)
        sql = str(compiled)
        params = list(compiled.params.values())

        assert "IN" in sql
        assert ">=" in sql
        assert "<=" in sql
        status_values = [list(p) for p in params if isinstance(p, (list, tuple))]
        assert status_values == [[SessionStatus.VALIDATED, SessionStatus.PAID]]
        assert SessionType.RCD in params
        assert date(2024, 9, 1) in params
        assert date(2025, 8, 31) in params

    def test_statuses_are_validated_and_paid(self):
        assert set(repository.CONSUMING_STATUSES) == {
            SessionStatus.VALIDATED,
            SessionStatus.PAID,
        }
