"""Teachers module - directory of teaching staff."""

from supchaissac.modules.teachers.router import router

__all__ = ["router"]
