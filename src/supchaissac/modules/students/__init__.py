"""Students module - yearly pupil roster."""

from supchaissac.modules.students.models import Student
from supchaissac.modules.students.router import router

__all__ = ["router", "Student"]
