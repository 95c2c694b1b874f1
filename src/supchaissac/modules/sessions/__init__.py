"""Sessions module - declaration and approval workflow of supplementary hours."""

from supchaissac.modules.sessions.models import (
    GradeLevel,
    SessionStatus,
    SessionType,
    TeachingSession,
    TimeSlot,
)
from supchaissac.modules.sessions.router import router

__all__ = [
    "router",
    "GradeLevel",
    "SessionStatus",
    "SessionType",
    "TeachingSession",
    "TimeSlot",
]
