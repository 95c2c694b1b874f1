"""
Session Schemas

Pydantic schemas for request validation and response serialization.
"""

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from supchaissac.modules.sessions.models import GradeLevel, SessionStatus, SessionType, TimeSlot


class StudentEntry(BaseModel):
    """A pupil attending a homework-help session."""

    last_name: str = Field(..., min_length=1, max_length=100)
    first_name: str = Field(..., min_length=1, max_length=100)
    class_name: str | None = Field(None, max_length=50)


class SessionFields(BaseModel):
    """Type-specific and comment fields shared by create and update bodies."""

    # RCD
    class_name: str | None = Field(None, max_length=50)
    replaced_teacher_prefix: str | None = Field(None, max_length=10)
    replaced_teacher_last_name: str | None = Field(None, max_length=100)
    replaced_teacher_first_name: str | None = Field(None, max_length=100)
    subject: str | None = Field(None, max_length=100)

    # DEVOIRS_FAITS
    grade_level: GradeLevel | None = None
    student_count: int | None = Field(None, ge=0, le=200)
    students_list: list[StudentEntry] | None = None

    # AUTRE
    description: str | None = Field(None, max_length=2000)

    comment: str | None = Field(None, max_length=2000)


class SessionCreate(SessionFields):
    """
    Request body for POST /sessions.

    Any teacher id sent by the client is ignored; the declaring teacher
    is always the logged-in user.
    """

    date: dt.date
    time_slot: TimeSlot
    type: SessionType

    @model_validator(mode="after")
    def default_student_count(self) -> "SessionCreate":
        """A homework-help list without an explicit count counts its entries."""
        if (
            self.type == SessionType.DEVOIRS_FAITS
            and self.student_count is None
            and self.students_list
        ):
            self.student_count = len(self.students_list)
        return self


class SessionUpdate(SessionFields):
    """Request body for PUT /sessions/{id}. Only provided fields change."""

    # Unknown keys are kept so the field check can refuse them
    model_config = ConfigDict(extra="allow")

    date: dt.date | None = None
    time_slot: TimeSlot | None = None
    type: SessionType | None = None


class ReviewRequest(BaseModel):
    """Secretary review action."""

    action: Literal["transmit", "request-info"]
    comment: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def comment_required_for_info_request(self) -> "ReviewRequest":
        if self.action == "request-info" and not (self.comment and self.comment.strip()):
            raise ValueError("A comment is required when requesting information")
        return self


class ValidateRequest(BaseModel):
    """Principal decision. The rejection reason is checked by the workflow."""

    action: Literal["validate", "reject"]
    validation_comments: str | None = Field(None, max_length=2000)
    rejection_reason: str | None = Field(None, max_length=2000)
    convert_to_hse: bool = False
    conversion_type: SessionType | None = None

    @property
    def conversion_target(self) -> SessionType | None:
        if self.convert_to_hse:
            return SessionType.HSE
        return self.conversion_type


class SessionResponse(BaseModel):
    """Session as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    date: dt.date
    time_slot: TimeSlot
    type: SessionType
    status: SessionStatus
    teacher_id: int
    teacher_name: str

    class_name: str | None = None
    replaced_teacher_prefix: str | None = None
    replaced_teacher_last_name: str | None = None
    replaced_teacher_first_name: str | None = None
    subject: str | None = None

    grade_level: GradeLevel | None = None
    student_count: int | None = None
    students_list: list[StudentEntry] | None = None

    description: str | None = None

    comment: str | None = None
    review_comments: str | None = None
    validation_comments: str | None = None
    rejection_reason: str | None = None
    original_type: SessionType | None = None

    created_at: dt.datetime
    updated_at: dt.datetime
    updated_by: int | None = None


class BlockedDate(BaseModel):
    """A day on which no session can be declared."""

    date: dt.date
    reason: str


class BlockedDatesResponse(BaseModel):
    start: dt.date
    end: dt.date
    blocked: list[BlockedDate]
