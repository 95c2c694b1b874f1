"""Authentication schemas."""

from pydantic import BaseModel, Field

from supchaissac.core.security import MIN_PASSWORD_LENGTH


class LoginRequest(BaseModel):
    """Login request schema. ``username`` is usually the academic email."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class ProfileUpdate(BaseModel):
    """
    Request body for PATCH /auth/profile.

    ``current_password`` is only checked when ``new_password`` is given.
    """

    first_name: str | None = Field(None, min_length=1, max_length=100)
    current_password: str | None = None
    new_password: str | None = Field(None, max_length=128)


class ActivationRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=128)


class TokenCheckResponse(BaseModel):
    valid: bool = True
    name: str
    username: str


class AuthStatusResponse(BaseModel):
    authenticated: bool
    name: str | None = None
    role: str | None = None


class MessageResponse(BaseModel):
    message: str
