"""
Admin Schemas

Request and response models for the administration endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from supchaissac.core.security import MIN_PASSWORD_LENGTH
from supchaissac.modules.users.models import Civility, UserRole

# ============================================
# Statistics
# ============================================


class SessionCounts(BaseModel):
    total: int = 0
    pending: int = 0
    validated: int = 0
    paid: int = 0
    rejected: int = 0


class AdminStats(BaseModel):
    """Dashboard figures; sessions are those of the current school year."""

    school_year: str
    total_users: int
    total_teachers: int
    teachers_with_pacte: int
    teachers_without_pacte: int
    pacte_percentage: int
    sessions: SessionCounts
    sessions_by_type: dict[str, int]


# ============================================
# Users
# ============================================


class UserCreate(BaseModel):
    """
    Request body for POST /admin/users.

    ``name`` defaults to "First Last"; the password defaults to the
    initial password when omitted.
    """

    username: str = Field(..., min_length=3, max_length=255)
    password: str | None = Field(None, min_length=MIN_PASSWORD_LENGTH, max_length=128)
    name: str | None = Field(None, max_length=200)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    civility: Civility | None = None
    subject: str | None = Field(None, max_length=100)
    role: UserRole = UserRole.TEACHER
    in_pacte: bool = False

    @model_validator(mode="after")
    def name_available(self) -> "UserCreate":
        if not self.name:
            parts = [p for p in (self.first_name, self.last_name) if p]
            if not parts:
                raise ValueError("name or first_name/last_name is required")
            self.name = " ".join(parts)
        return self


class UserUpdate(BaseModel):
    """
    Request body for PATCH /admin/users/{id}.

    Passwords cannot be changed here; use reset-password.
    """

    model_config = ConfigDict(extra="forbid")

    username: str | None = Field(None, min_length=3, max_length=255)
    name: str | None = Field(None, min_length=1, max_length=200)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    civility: Civility | None = None
    subject: str | None = Field(None, max_length=100)
    role: UserRole | None = None
    in_pacte: bool | None = None


class ResetPasswordRequest(BaseModel):
    new_password: str | None = Field(None, min_length=MIN_PASSWORD_LENGTH, max_length=128)


class ActivationResponse(BaseModel):
    """``link`` is returned when the email was not actually sent."""

    sent: bool
    message: str
    link: str | None = None


class MessageResponse(BaseModel):
    message: str


# ============================================
# Imports and reset
# ============================================


class RejectedLine(BaseModel):
    line: int
    reason: str


class TeacherImportResponse(BaseModel):
    created: int
    updated: int
    errors: int
    error_details: list[RejectedLine]


class SessionsResetRequest(BaseModel):
    """Bulk deletion of sessions, all of them or one school year's."""

    confirm: bool = False
    school_year: str | None = Field(None, pattern=r"^\d{4}-\d{4}$")


class SessionsResetResponse(BaseModel):
    deleted_sessions: int
    deleted_files: int
    school_year: str | None = None
