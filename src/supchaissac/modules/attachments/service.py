"""
Attachment Service Layer

Upload, verification and removal of session attachments.

Access follows session visibility: teachers handle attachments of their
own sessions only, staff handle any of them. Files are buffered in
memory (5 MB max) and written to object storage in one call.
"""

import asyncio
import logging

from botocore.exceptions import BotoCoreError, ClientError
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core import storage
from supchaissac.core.auth import CurrentUser
from supchaissac.core.errors import NotFoundError, StorageUnavailableError, ValidationError
from supchaissac.modules.attachments import repository
from supchaissac.modules.attachments.models import Attachment
from supchaissac.modules.roster.spreadsheet import (
    ParsedStudent,
    StudentListResult,
    is_valid_excel_file,
    parse_student_list,
)
from supchaissac.modules.sessions import service as session_service

logger = logging.getLogger(__name__)


async def _load_visible(db: AsyncSession, user: CurrentUser, attachment_id: int) -> Attachment:
    attachment = await repository.get_by_id(db, attachment_id)
    if attachment is None:
        raise NotFoundError("Attachment", attachment_id)
    # Raises NotFoundError for a teacher who does not own the session
    await session_service.get_session(db, user, attachment.session_id)
    return attachment


async def upload_attachment(
    db: AsyncSession,
    user: CurrentUser,
    session_id: int,
    content: bytes,
    filename: str,
    mime_type: str | None,
) -> tuple[Attachment, list[ParsedStudent] | None]:
    """
    Store a file for a session.

    Excel files are also read as a pupil list; a list that cannot be read
    does not fail the upload.

    Returns:
        The attachment and the parsed pupils (None when not an Excel file)

    Raises:
        StorageUnavailableError: If object storage is not configured
        ValidationError: File too large or of a refused type
        NotFoundError: Unknown session, or not the teacher's own
    """
    if not storage.is_storage_configured():
        raise StorageUnavailableError()
    storage.validate_upload(mime_type, len(content))
    await session_service.get_session(db, user, session_id)

    stored = await storage.upload_file(content, filename, mime_type, session_id)
    attachment = await repository.create(
        db,
        session_id=session_id,
        file_key=stored.key,
        original_name=filename,
        mime_type=mime_type,
        size=stored.size,
        url=stored.url,
        uploaded_by=user.id,
    )

    students = None
    if is_valid_excel_file(mime_type, filename):
        try:
            students = (await asyncio.to_thread(parse_student_list, content)).students
        except ValidationError as e:
            logger.warning(f"Attachment {attachment.id} is not a readable pupil list: {e.message}")

    return attachment, students


async def list_for_session(
    db: AsyncSession,
    user: CurrentUser,
    session_id: int,
) -> list[Attachment]:
    await session_service.get_session(db, user, session_id)
    return await repository.list_for_session(db, session_id)


async def verify_attachment(db: AsyncSession, user: CurrentUser, attachment_id: int) -> Attachment:
    attachment = await repository.get_by_id(db, attachment_id)
    if attachment is None:
        raise NotFoundError("Attachment", attachment_id)

    attachment = await repository.mark_verified(db, attachment)
    logger.info(f"Attachment {attachment_id} verified by user {user.id}")
    return attachment


async def delete_attachment(db: AsyncSession, user: CurrentUser, attachment_id: int) -> None:
    """
    Remove an attachment.

    The database row is removed even when the object cannot be deleted
    from storage (already gone, storage down or unconfigured).
    """
    attachment = await _load_visible(db, user, attachment_id)

    try:
        await storage.delete_file(attachment.file_key)
    except (BotoCoreError, ClientError, StorageUnavailableError) as e:
        logger.error(f"Could not delete {attachment.file_key} from storage: {e}")

    await repository.delete_by_id(db, attachment_id)
    logger.info(
        f"Attachment {attachment_id} ({attachment.original_name}) deleted by user {user.id}"
    )


async def download_url(db: AsyncSession, user: CurrentUser, attachment_id: int) -> str:
    attachment = await _load_visible(db, user, attachment_id)
    return await storage.presigned_download_url(attachment.file_key, attachment.original_name)


async def parse_excel(
    content: bytes, mime_type: str | None, filename: str | None
) -> StudentListResult:
    """
    Read a pupil list without storing the file.

    Raises:
        ValidationError: If the file is not an Excel file or cannot be read
    """
    if not is_valid_excel_file(mime_type, filename):
        raise ValidationError(
            "Le fichier doit etre un fichier Excel (.xlsx, .xls)",
            error_code="FILE_TYPE_NOT_ALLOWED",
        )
    return await asyncio.to_thread(parse_student_list, content)
