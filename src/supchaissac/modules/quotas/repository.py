"""
Quota Repository
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.modules.quotas.models import HourQuota
from supchaissac.modules.sessions.models import SessionType

logger = logging.getLogger(__name__)


async def list_for_year(db: AsyncSession, school_year: str) -> dict[SessionType, HourQuota]:
    result = await db.execute(select(HourQuota).where(HourQuota.school_year == school_year))
    return {quota.type: quota for quota in result.scalars().all()}


async def upsert(
    db: AsyncSession,
    *,
    session_type: SessionType,
    school_year: str,
    budget_hours: int,
    updated_by: int,
) -> HourQuota:
    """Create or update the budget of a type for a year, without committing."""
    result = await db.execute(
        select(HourQuota).where(
            HourQuota.type == session_type,
            HourQuota.school_year == school_year,
        )
    )
    quota = result.scalar_one_or_none()

    if quota is None:
        quota = HourQuota(
            type=session_type,
            school_year=school_year,
            budget_hours=budget_hours,
            updated_by=updated_by,
        )
        db.add(quota)
        logger.info(f"Quota created: {session_type.value} {school_year} = {budget_hours}h")
    else:
        quota.budget_hours = budget_hours
        quota.updated_by = updated_by
        logger.info(f"Quota updated: {session_type.value} {school_year} = {budget_hours}h")

    await db.flush()
    return quota
