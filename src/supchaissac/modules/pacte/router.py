"""
PACTE Router (secretary, principal, admin)

Endpoints:
- GET /pacte/teachers - Teachers with contract figures and session stats
- GET /pacte/statistics - Participation totals
- PATCH /pacte/teachers/{id}/status - Enter or leave the PACTE
- PATCH /pacte/teachers/{id}/contrat - Set contract hours
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import CurrentUser, require_secretary
from supchaissac.core.database import get_db
from supchaissac.modules.pacte import service
from supchaissac.modules.pacte.schemas import (
    PacteContractUpdate,
    PacteStatistics,
    PacteStatusUpdate,
    PacteTeacher,
)

router = APIRouter()


@router.get("/teachers", response_model=list[PacteTeacher], summary="PACTE follow-up")
async def list_teachers(
    _user: CurrentUser = Depends(require_secretary),
    db: AsyncSession = Depends(get_db),
) -> list[PacteTeacher]:
    return await service.list_teachers(db)


@router.get("/statistics", response_model=PacteStatistics, summary="PACTE statistics")
async def statistics(
    _user: CurrentUser = Depends(require_secretary),
    db: AsyncSession = Depends(get_db),
) -> PacteStatistics:
    return await service.get_statistics(db)


@router.patch(
    "/teachers/{teacher_id}/status",
    response_model=PacteTeacher,
    summary="Enter or leave the PACTE",
    description="Leaving the PACTE resets all contract hours to zero.",
)
async def update_status(
    teacher_id: int,
    data: PacteStatusUpdate,
    user: CurrentUser = Depends(require_secretary),
    db: AsyncSession = Depends(get_db),
) -> PacteTeacher:
    teacher = await service.update_status(db, user, teacher_id, data)
    return service.to_pacte_teacher(teacher)


@router.patch(
    "/teachers/{teacher_id}/contrat",
    response_model=PacteTeacher,
    summary="Set PACTE contract hours",
)
async def update_contract(
    teacher_id: int,
    data: PacteContractUpdate,
    user: CurrentUser = Depends(require_secretary),
    db: AsyncSession = Depends(get_db),
) -> PacteTeacher:
    teacher = await service.update_contract(db, user, teacher_id, data)
    return service.to_pacte_teacher(teacher)
