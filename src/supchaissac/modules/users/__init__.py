"""
Users module - Staff accounts and roles.
"""

from supchaissac.modules.users.models import Civility, User, UserRole
from supchaissac.modules.users.repository import UserRepository

__all__ = ["Civility", "User", "UserRole", "UserRepository"]
