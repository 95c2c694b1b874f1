"""Admin module - accounts, imports and maintenance."""

from supchaissac.modules.admin.router import router

__all__ = ["router"]
