"""
Shared model definitions.
"""

from supchaissac.modules.shared.models import BaseModel, TimestampMixin

__all__ = ["BaseModel", "TimestampMixin"]
