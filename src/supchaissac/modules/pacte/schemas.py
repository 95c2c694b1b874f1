"""
PACTE Schemas

The PACTE is the optional contract under which a teacher commits to a
number of extra hours (replacements and homework help) over the year.
"""

from pydantic import BaseModel, ConfigDict, Field


class PacteSessionStats(BaseModel):
    """Validated or paid sessions of the current school year, by declared type."""

    rcd_sessions: int = 0
    devoirs_faits_sessions: int = 0
    validated_sessions: int = 0


class PacteTeacher(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    username: str
    initials: str | None = None
    in_pacte: bool
    pacte_hours_target: int
    pacte_hours_completed: int
    pacte_hours_df: int
    pacte_hours_rcd: int
    pacte_hours_completed_df: int
    pacte_hours_completed_rcd: int
    stats: PacteSessionStats = Field(default_factory=PacteSessionStats)


class PacteStatistics(BaseModel):
    total_teachers: int
    teachers_with_pacte: int
    teachers_without_pacte: int
    pacte_percentage: int
    hours_target: int
    hours_completed: int


class PacteStatusUpdate(BaseModel):
    in_pacte: bool
    pacte_hours_target: int = Field(0, ge=0, le=1000)


class PacteContractUpdate(BaseModel):
    """Contract figures; omitted fields are left unchanged."""

    in_pacte: bool | None = None
    pacte_hours_target: int | None = Field(None, ge=0, le=1000)
    pacte_hours_completed: int | None = Field(None, ge=0, le=1000)
    pacte_hours_df: int | None = Field(None, ge=0, le=1000)
    pacte_hours_rcd: int | None = Field(None, ge=0, le=1000)
    pacte_hours_completed_df: int | None = Field(None, ge=0, le=1000)
    pacte_hours_completed_rcd: int | None = Field(None, ge=0, le=1000)
