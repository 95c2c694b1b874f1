"""Attachments module - files supporting declared sessions."""

from supchaissac.modules.attachments.models import Attachment
from supchaissac.modules.attachments.router import router

__all__ = ["router", "Attachment"]
