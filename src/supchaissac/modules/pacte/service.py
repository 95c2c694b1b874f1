"""
PACTE Service Layer

Follow-up of PACTE contracts by the secretary: contract figures per
teacher and the sessions already counted toward them this school year.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import CurrentUser
from supchaissac.core.errors import NotFoundError
from supchaissac.core.school_calendar import current_school_year, school_year_bounds
from supchaissac.modules.pacte.schemas import (
    PacteContractUpdate,
    PacteSessionStats,
    PacteStatistics,
    PacteStatusUpdate,
    PacteTeacher,
)
from supchaissac.modules.sessions import repository as session_repository
from supchaissac.modules.sessions.models import SessionType
from supchaissac.modules.users.models import User, UserRole
from supchaissac.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

PACTE_TARGET_FIELDS = (
    "pacte_hours_target",
    "pacte_hours_completed",
    "pacte_hours_df",
    "pacte_hours_rcd",
    "pacte_hours_completed_df",
    "pacte_hours_completed_rcd",
)


async def _get_teacher(db: AsyncSession, teacher_id: int) -> User:
    user = await UserRepository.get_by_id(db, teacher_id)
    if user is None or user.role != UserRole.TEACHER:
        raise NotFoundError("Teacher", teacher_id)
    return user


def percentage(part: int, total: int) -> int:
    return round(part * 100 / total) if total else 0


def to_pacte_teacher(user: User, stats: PacteSessionStats | None = None) -> PacteTeacher:
    entry = PacteTeacher.model_validate(user)
    entry.name = user.full_name
    if stats is not None:
        entry.stats = stats
    return entry


async def list_teachers(db: AsyncSession) -> list[PacteTeacher]:
    """Teachers with contract figures and their validated sessions of the year."""
    start, end = school_year_bounds(current_school_year())
    teachers = await UserRepository.list_teachers(db)
    counts = await session_repository.count_consumed_by_teacher(db, start, end)

    result = []
    for user in teachers:
        rcd = counts.get((user.id, SessionType.RCD), 0)
        devoirs_faits = counts.get((user.id, SessionType.DEVOIRS_FAITS), 0)
        validated = sum(count for (teacher_id, _), count in counts.items() if teacher_id == user.id)

        stats = PacteSessionStats(
            rcd_sessions=rcd,
            devoirs_faits_sessions=devoirs_faits,
            validated_sessions=validated,
        )
        result.append(to_pacte_teacher(user, stats))
    return result


async def get_statistics(db: AsyncSession) -> PacteStatistics:
    teachers = await UserRepository.list_teachers(db)
    in_pacte = [t for t in teachers if t.in_pacte]
    return PacteStatistics(
        total_teachers=len(teachers),
        teachers_with_pacte=len(in_pacte),
        teachers_without_pacte=len(teachers) - len(in_pacte),
        pacte_percentage=percentage(len(in_pacte), len(teachers)),
        hours_target=sum(t.pacte_hours_target for t in in_pacte),
        hours_completed=sum(t.pacte_hours_completed for t in in_pacte),
    )


async def update_status(
    db: AsyncSession,
    user: CurrentUser,
    teacher_id: int,
    data: PacteStatusUpdate,
) -> User:
    """
    Enter or leave the PACTE.

    Leaving resets every target and completion figure to zero.
    """
    teacher = await _get_teacher(db, teacher_id)

    changes: dict = {"in_pacte": data.in_pacte}
    if data.in_pacte:
        changes["pacte_hours_target"] = data.pacte_hours_target
    else:
        changes.update({field: 0 for field in PACTE_TARGET_FIELDS})

    teacher = await UserRepository.update(db, teacher, **changes)
    logger.info(f"PACTE status of teacher {teacher_id} set to {data.in_pacte} by user {user.id}")
    return teacher


async def update_contract(
    db: AsyncSession,
    user: CurrentUser,
    teacher_id: int,
    data: PacteContractUpdate,
) -> User:
    teacher = await _get_teacher(db, teacher_id)
    changes = data.model_dump(exclude_none=True)
    teacher = await UserRepository.update(db, teacher, **changes)
    logger.info(f"PACTE contract of teacher {teacher_id} updated by user {user.id}: {changes}")
    return teacher
