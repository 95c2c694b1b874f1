"""
Attachment Repository

Database operations for session attachments.
"""

import logging
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.modules.attachments.models import Attachment
from supchaissac.modules.sessions.models import TeachingSession

logger = logging.getLogger(__name__)


async def create(
    db: AsyncSession,
    *,
    session_id: int,
    file_key: str,
    original_name: str,
    mime_type: str,
    size: int,
    url: str,
    uploaded_by: int,
) -> Attachment:
    attachment = Attachment(
        session_id=session_id,
        file_key=file_key,
        original_name=original_name,
        mime_type=mime_type,
        size=size,
        url=url,
        uploaded_by=uploaded_by,
    )
    db.add(attachment)
    await db.commit()
    await db.refresh(attachment)

    logger.info(f"Attachment {attachment.id} stored for session {session_id}: {file_key}")
    return attachment


async def get_by_id(db: AsyncSession, attachment_id: int) -> Attachment | None:
    result = await db.execute(select(Attachment).where(Attachment.id == attachment_id))
    return result.scalar_one_or_none()


async def list_for_session(db: AsyncSession, session_id: int) -> list[Attachment]:
    result = await db.execute(
        select(Attachment)
        .where(Attachment.session_id == session_id)
        .order_by(Attachment.created_at)
    )
    return list(result.scalars().all())


async def list_keys(
    db: AsyncSession,
    start: date | None = None,
    end: date | None = None,
) -> list[str]:
    """Storage keys of attachments whose session falls within the optional date range."""
    query = select(Attachment.file_key).join(
        TeachingSession, TeachingSession.id == Attachment.session_id
    )
    if start is not None:
        query = query.where(TeachingSession.date >= start)
    if end is not None:
        query = query.where(TeachingSession.date <= end)
    result = await db.execute(query)
    return list(result.scalars().all())


async def mark_verified(db: AsyncSession, attachment: Attachment) -> Attachment:
    attachment.is_verified = True
    await db.commit()
    await db.refresh(attachment)
    return attachment


async def delete_by_id(db: AsyncSession, attachment_id: int) -> bool:
    result = await db.execute(delete(Attachment).where(Attachment.id == attachment_id))
    await db.commit()
    return result.rowcount > 0
