"""
Session Repository

Database operations for declared sessions.
"""

import logging
from datetime import date
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.modules.sessions.models import SessionStatus, SessionType, TeachingSession

logger = logging.getLogger(__name__)

CONSUMING_STATUSES = (SessionStatus.VALIDATED, SessionStatus.PAID)


async def create(db: AsyncSession, **fields: Any) -> TeachingSession:
    """Insert a new session and return it with generated columns loaded."""
    session = TeachingSession(**fields)
    db.add(session)
    await db.commit()
    await db.refresh(session)

    logger.info(
        f"Created session {session.id} ({session.type.value}) for teacher {session.teacher_id}"
    )
    return session


async def get_by_id(db: AsyncSession, session_id: int) -> TeachingSession | None:
    result = await db.execute(select(TeachingSession).where(TeachingSession.id == session_id))
    return result.scalar_one_or_none()


async def list_for_teacher(db: AsyncSession, teacher_id: int) -> list[TeachingSession]:
    """A teacher's sessions, newest date first."""
    result = await db.execute(
        select(TeachingSession)
        .where(TeachingSession.teacher_id == teacher_id)
        .order_by(TeachingSession.date.desc(), TeachingSession.created_at.desc())
    )
    return list(result.scalars().all())


async def list_all(
    db: AsyncSession,
    *,
    status: SessionStatus | None = None,
    session_type: SessionType | None = None,
    teacher_id: int | None = None,
    start: date | None = None,
    end: date | None = None,
) -> list[TeachingSession]:
    """All sessions matching the optional filters, newest date first."""
    query = select(TeachingSession).order_by(
        TeachingSession.date.desc(), TeachingSession.created_at.desc()
    )
    if status is not None:
        query = query.where(TeachingSession.status == status)
    if session_type is not None:
        query = query.where(TeachingSession.type == session_type)
    if teacher_id is not None:
        query = query.where(TeachingSession.teacher_id == teacher_id)
    if start is not None:
        query = query.where(TeachingSession.date >= start)
    if end is not None:
        query = query.where(TeachingSession.date <= end)

    result = await db.execute(query)
    return list(result.scalars().all())


async def save(db: AsyncSession, session: TeachingSession) -> TeachingSession:
    """Persist changes made to a loaded session."""
    await db.commit()
    await db.refresh(session)
    return session


async def count_consumed(
    db: AsyncSession,
    session_type: SessionType,
    start: date,
    end: date,
) -> int:
    """
    Count VALIDATED or PAID sessions of a type dated within [start, end].

    This is the quota consumption for that type.
    """
    result = await db.execute(
        select(func.count(TeachingSession.id)).where(
            TeachingSession.type == session_type,
            TeachingSession.status.in_(CONSUMING_STATUSES),
            TeachingSession.date >= start,
            TeachingSession.date <= end,
        )
    )
    return result.scalar_one()


async def count_by_status(db: AsyncSession, start: date, end: date) -> dict[SessionStatus, int]:
    result = await db.execute(
        select(TeachingSession.status, func.count(TeachingSession.id))
        .where(TeachingSession.date >= start, TeachingSession.date <= end)
        .group_by(TeachingSession.status)
    )
    return {status: count for status, count in result.all()}


async def count_by_type(db: AsyncSession, start: date, end: date) -> dict[SessionType, int]:
    result = await db.execute(
        select(TeachingSession.type, func.count(TeachingSession.id))
        .where(TeachingSession.date >= start, TeachingSession.date <= end)
        .group_by(TeachingSession.type)
    )
    return {session_type: count for session_type, count in result.all()}


async def count_consumed_by_teacher(
    db: AsyncSession,
    start: date,
    end: date,
) -> dict[tuple[int, SessionType], int]:
    """VALIDATED/PAID counts per (teacher, declared type) within the date range."""
    declared_type = func.coalesce(TeachingSession.original_type, TeachingSession.type)
    result = await db.execute(
        select(TeachingSession.teacher_id, declared_type, func.count(TeachingSession.id))
        .where(
            TeachingSession.status.in_(CONSUMING_STATUSES),
            TeachingSession.date >= start,
            TeachingSession.date <= end,
        )
        .group_by(TeachingSession.teacher_id, declared_type)
    )
    return {(teacher_id, SessionType(kind)): count for teacher_id, kind, count in result.all()}


async def count_for_teacher(db: AsyncSession, teacher_id: int) -> int:
    result = await db.execute(
        select(func.count(TeachingSession.id)).where(TeachingSession.teacher_id == teacher_id)
    )
    return result.scalar_one()


async def delete_all(db: AsyncSession, start: date | None = None, end: date | None = None) -> int:
    """
    Hard delete sessions, optionally limited to a date range.

    Only used by the administrative bulk reset. Attachments rows cascade.

    Returns:
        Number of deleted sessions
    """
    query = delete(TeachingSession)
    if start is not None:
        query = query.where(TeachingSession.date >= start)
    if end is not None:
        query = query.where(TeachingSession.date <= end)

    result = await db.execute(query)
    await db.commit()
    logger.warning(f"Bulk reset deleted {result.rowcount} sessions")
    return result.rowcount
