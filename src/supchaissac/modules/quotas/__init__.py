"""Quotas module - yearly hour budgets."""

from supchaissac.modules.quotas.models import HourQuota
from supchaissac.modules.quotas.router import router

__all__ = ["router", "HourQuota"]
