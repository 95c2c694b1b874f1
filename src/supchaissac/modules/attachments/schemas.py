"""
Attachment Schemas
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AttachmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: int
    original_name: str
    mime_type: str
    size: int
    url: str
    uploaded_by: int | None = None
    uploaded_at: datetime
    is_verified: bool


class ParsedStudentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    last_name: str
    first_name: str
    class_name: str


class UploadResponse(BaseModel):
    """Stored attachment, plus the pupils read from it when it is an Excel file."""

    attachment: AttachmentResponse
    students: list[ParsedStudentResponse] | None = None


class ParseExcelResponse(BaseModel):
    students: list[ParsedStudentResponse]
    total_rows: int
    success_count: int
    errors: list[str]


class DownloadUrlResponse(BaseModel):
    url: str
    expires_in: int
