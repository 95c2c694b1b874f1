"""
Quota Models

Yearly hour budgets of the school per kind of supplementary work.
"""

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import Mapped, mapped_column

from supchaissac.modules.sessions.models import SessionType
from supchaissac.modules.shared import BaseModel


class HourQuota(BaseModel):
    """Budget ceiling, in hours, for one session type over one school year."""

    __tablename__ = "hour_quotas"

    type: Mapped[SessionType] = mapped_column(
        ENUM(SessionType, name="session_type", create_type=False), nullable=False
    )
    budget_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    school_year: Mapped[str] = mapped_column(String(9), nullable=False, index=True)
    updated_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (UniqueConstraint("type", "school_year", name="uq_hour_quotas_type_year"),)

    def __repr__(self) -> str:
        return f"<HourQuota({self.type.value} {self.school_year}: {self.budget_hours}h)>"
