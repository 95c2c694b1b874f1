"""
Core module - Configuration, database, Redis, security and shared utilities.
"""

from supchaissac.core.config import get_settings, settings
from supchaissac.core.database import Base, close_db, get_db, init_db
from supchaissac.core.redis import close_redis, get_redis, init_redis
from supchaissac.core.security import (
    generate_activation_token,
    hash_password,
    verify_password,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    # Redis
    "get_redis",
    "init_redis",
    "close_redis",
    # Security
    "hash_password",
    "verify_password",
    "generate_activation_token",
]
