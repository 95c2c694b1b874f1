"""
Quota Schemas
"""

from pydantic import BaseModel, Field, field_validator

from supchaissac.modules.sessions.models import SessionType

QUOTA_TYPES = (SessionType.HSE, SessionType.DEVOIRS_FAITS, SessionType.RCD)


class QuotaResponse(BaseModel):
    """
    Budget and consumption of one session type.

    One validated or paid session consumes one hour.
    """

    id: int | None = None
    type: SessionType
    school_year: str
    budget_hours: int
    consumed_hours: int
    remaining_hours: int


class QuotaEntry(BaseModel):
    type: SessionType
    budget_hours: int = Field(..., ge=0, le=100000)

    @field_validator("type")
    @classmethod
    def quota_type_supported(cls, value: SessionType) -> SessionType:
        if value not in QUOTA_TYPES:
            raise ValueError(f"No quota for type {value.value}")
        return value


class QuotaUpdate(BaseModel):
    """Request body for PUT /quotas. ``school_year`` defaults to the current one."""

    school_year: str | None = Field(None, pattern=r"^\d{4}-\d{4}$")
    quotas: list[QuotaEntry]
