"""
Quotas Router (principal, admin)

Endpoints:
- GET /quotas - Budgets and consumption of a school year
- PUT /quotas - Set budgets
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import CurrentUser, require_principal
from supchaissac.core.database import get_db
from supchaissac.modules.quotas import service
from supchaissac.modules.quotas.schemas import QuotaResponse, QuotaUpdate

router = APIRouter()


@router.get(
    "",
    response_model=list[QuotaResponse],
    summary="Hour quotas",
    description="""
One row per type (HSE, DEVOIRS_FAITS, RCD). `consumed_hours` counts
VALIDATED and PAID sessions of the type dated within the school year
(September 1 to August 31). Types without a budget report 0.
""",
)
async def get_quotas(
    year: str | None = Query(None, pattern=r"^\d{4}-\d{4}$"),
    _user: CurrentUser = Depends(require_principal),
    db: AsyncSession = Depends(get_db),
) -> list[QuotaResponse]:
    return await service.get_quotas(db, year)


@router.put("", response_model=list[QuotaResponse], summary="Set hour quotas")
async def update_quotas(
    data: QuotaUpdate,
    user: CurrentUser = Depends(require_principal),
    db: AsyncSession = Depends(get_db),
) -> list[QuotaResponse]:
    return await service.update_quotas(db, user, data)
