"""
Teachers Router

Endpoints:
- GET /teachers/search - Autocomplete (q >= 2 characters)
- GET /teachers - All teachers
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import CurrentUser, get_current_user
from supchaissac.core.database import get_db
from supchaissac.modules.teachers import service
from supchaissac.modules.teachers.schemas import TeacherEntry

router = APIRouter()


@router.get("/search", response_model=list[TeacherEntry], summary="Search teachers")
async def search_teachers(
    q: str = Query("", max_length=100),
    limit: int = Query(service.DEFAULT_SEARCH_LIMIT, ge=1, le=service.MAX_SEARCH_LIMIT),
    _user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[TeacherEntry]:
    return await service.search_teachers(db, q, limit=limit)


@router.get("", response_model=list[TeacherEntry], summary="List teachers")
async def list_teachers(
    _user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[TeacherEntry]:
    return await service.list_teachers(db)
