"""
Quota Service Layer

Budgets are compared with consumption: the number of VALIDATED or PAID
sessions of the type dated between September 1 and August 31 of the
school year.
"""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import CurrentUser
from supchaissac.core.errors import ValidationError
from supchaissac.core.school_calendar import current_school_year, school_year_bounds
from supchaissac.modules.quotas import repository
from supchaissac.modules.quotas.schemas import QUOTA_TYPES, QuotaResponse, QuotaUpdate
from supchaissac.modules.sessions import repository as session_repository

logger = logging.getLogger(__name__)


def resolve_school_year(school_year: str | None) -> tuple[str, date, date]:
    """
    Label and bounds of the requested (or current) school year.

    Raises:
        ValidationError: If the label is malformed
    """
    year = school_year or current_school_year()
    try:
        start, end = school_year_bounds(year)
    except ValueError as e:
        raise ValidationError(str(e), error_code="INVALID_SCHOOL_YEAR") from e
    return year, start, end


async def get_quotas(db: AsyncSession, school_year: str | None = None) -> list[QuotaResponse]:
    """HSE, DEVOIRS_FAITS and RCD budgets with their consumption."""
    year, start, end = resolve_school_year(school_year)
    quotas = await repository.list_for_year(db, year)

    result = []
    for session_type in QUOTA_TYPES:
        quota = quotas.get(session_type)
        budget = quota.budget_hours if quota else 0
        consumed = await session_repository.count_consumed(db, session_type, start, end)
        result.append(
            QuotaResponse(
                id=quota.id if quota else None,
                type=session_type,
                school_year=year,
                budget_hours=budget,
                consumed_hours=consumed,
                remaining_hours=budget - consumed,
            )
        )
    return result


async def update_quotas(
    db: AsyncSession,
    user: CurrentUser,
    data: QuotaUpdate,
) -> list[QuotaResponse]:
    year, _, _ = resolve_school_year(data.school_year)

    for entry in data.quotas:
        await repository.upsert(
            db,
            session_type=entry.type,
            school_year=year,
            budget_hours=entry.budget_hours,
            updated_by=user.id,
        )
    await db.commit()

    logger.info(f"User {user.id} updated {len(data.quotas)} quotas for {year}")
    return await get_quotas(db, year)
