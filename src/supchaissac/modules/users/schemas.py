"""
User Schemas

Account representation shared by the auth and admin endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from supchaissac.modules.users.models import Civility, UserRole


class UserResponse(BaseModel):
    """User data returned by the API. Never includes the password hash or token."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str
    first_name: str | None = None
    last_name: str | None = None
    civility: Civility | None = None
    subject: str | None = None
    initials: str | None = None
    role: UserRole
    in_pacte: bool
    pacte_hours_target: int = 0
    pacte_hours_completed: int = 0
    pacte_hours_df: int = 0
    pacte_hours_rcd: int = 0
    pacte_hours_completed_df: int = 0
    pacte_hours_completed_rcd: int = 0
    is_activated: bool
    created_at: datetime
