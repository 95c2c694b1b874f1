"""PACTE module - follow-up of teachers' extra-hours contracts."""

from supchaissac.modules.pacte.router import router

__all__ = ["router"]
