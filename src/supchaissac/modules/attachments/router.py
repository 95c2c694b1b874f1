"""
Attachments Router

Endpoints:
- POST /attachments/upload/{session_id} - Upload a file for a session
- PATCH /attachments/{id}/verify - Mark as checked (secretary, principal, admin)
- DELETE /attachments/{id} - Remove a file
- GET /attachments/session/{session_id} - Files of a session
- GET /attachments/{id}/download-url - Temporary download link
- POST /attachments/parse-excel - Read a pupil list without storing it
"""

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import CurrentUser, get_current_user, require_secretary
from supchaissac.core.database import get_db
from supchaissac.core.storage import DOWNLOAD_URL_TTL_SECONDS
from supchaissac.modules.attachments import service
from supchaissac.modules.attachments.schemas import (
    AttachmentResponse,
    DownloadUrlResponse,
    ParsedStudentResponse,
    ParseExcelResponse,
    UploadResponse,
)

router = APIRouter()


@router.post(
    "/upload/{session_id}",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an attachment",
    description="""
Accepted types: PDF, Excel (.xls, .xlsx), JPEG, PNG. Maximum size 5 MB.

Excel files are also read as a pupil list (`NOM | Prénom | Classe`),
returned in `students`.
""",
    responses={
        400: {"description": "File too large or of a refused type"},
        404: {"description": "Session not found"},
        503: {"description": "File storage not configured"},
    },
)
async def upload_attachment(
    session_id: int,
    file: UploadFile = File(...),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> UploadResponse:
    content = await file.read()
    attachment, students = await service.upload_attachment(
        db,
        user,
        session_id,
        content,
        filename=file.filename or "file",
        mime_type=file.content_type,
    )
    return UploadResponse(
        attachment=AttachmentResponse.model_validate(attachment),
        students=(
            [ParsedStudentResponse.model_validate(s) for s in students]
            if students is not None
            else None
        ),
    )


@router.patch("/{attachment_id}/verify", response_model=AttachmentResponse, summary="Mark verified")
async def verify_attachment(
    attachment_id: int,
    user: CurrentUser = Depends(require_secretary),
    db: AsyncSession = Depends(get_db),
) -> AttachmentResponse:
    attachment = await service.verify_attachment(db, user, attachment_id)
    return AttachmentResponse.model_validate(attachment)


@router.delete(
    "/{attachment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an attachment",
)
async def delete_attachment(
    attachment_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    await service.delete_attachment(db, user, attachment_id)


@router.get(
    "/session/{session_id}",
    response_model=list[AttachmentResponse],
    summary="Attachments of a session",
)
async def list_session_attachments(
    session_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[AttachmentResponse]:
    attachments = await service.list_for_session(db, user, session_id)
    return [AttachmentResponse.model_validate(a) for a in attachments]


@router.get(
    "/{attachment_id}/download-url",
    response_model=DownloadUrlResponse,
    summary="Temporary download link",
    description="Presigned URL valid for one hour, downloading under the original file name.",
)
async def download_url(
    attachment_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DownloadUrlResponse:
    url = await service.download_url(db, user, attachment_id)
    return DownloadUrlResponse(url=url, expires_in=DOWNLOAD_URL_TTL_SECONDS)


@router.post("/parse-excel", response_model=ParseExcelResponse, summary="Parse a pupil list")
async def parse_excel(
    file: UploadFile = File(...),
    _user: CurrentUser = Depends(get_current_user),
) -> ParseExcelResponse:
    content = await file.read()
    result = await service.parse_excel(content, file.content_type, file.filename)
    return ParseExcelResponse(
        students=[ParsedStudentResponse.model_validate(s) for s in result.students],
        total_rows=result.total_rows,
        success_count=result.success_count,
        errors=result.errors,
    )
