"""
Authentication and Authorization Module

FastAPI dependencies resolving the logged-in user from the session cookie
and enforcing role requirements.

The resolved ``CurrentUser`` is passed explicitly to every service call;
services never look up the requester on their own.

Role groups:
- secretary endpoints: SECRETARY, PRINCIPAL, ADMIN
- principal endpoints: PRINCIPAL, ADMIN
- admin endpoints: ADMIN
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fastapi import Depends, Request
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.config import settings
from supchaissac.core.cookie_session import CookieSessionStore, unsign_session_id
from supchaissac.core.database import get_db
from supchaissac.core.errors import AuthenticationRequiredError, AuthorizationError
from supchaissac.core.redis import get_redis
from supchaissac.modules.users.models import User, UserRole
from supchaissac.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

SECRETARY_ROLES = frozenset({UserRole.SECRETARY, UserRole.PRINCIPAL, UserRole.ADMIN})
PRINCIPAL_ROLES = frozenset({UserRole.PRINCIPAL, UserRole.ADMIN})
ADMIN_ROLES = frozenset({UserRole.ADMIN})
STAFF_ROLES = SECRETARY_ROLES


@dataclass(frozen=True)
class CurrentUser:
    """
    The authenticated requester.

    Attributes:
        id: User id
        username: Login
        name: Display name recorded on declared sessions
        role: Role at the time of the request
    """

    id: int
    username: str
    name: str
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> "CurrentUser":
        return cls(id=user.id, username=user.username, name=user.full_name, role=user.role)

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def has_role(self, roles: frozenset[UserRole] | set[UserRole]) -> bool:
        return self.role in roles

    def __str__(self) -> str:
        return f"CurrentUser(id={self.id}, username={self.username}, role={self.role.value})"


async def get_session_store(redis: Redis | None = Depends(get_redis)) -> CookieSessionStore:
    """Session store dependency. Fails with 401 when Redis is unavailable."""
    if redis is None:
        logger.error("Session store unavailable: Redis is not initialized")
        raise AuthenticationRequiredError("Session store unavailable.")
    return CookieSessionStore(redis)


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
) -> CurrentUser | None:
    """
    Resolve the session cookie to a user, or None.

    A cookie pointing at a deleted account counts as anonymous.
    """
    session_id = unsign_session_id(request.cookies.get(settings.session_cookie_name))
    if session_id is None or redis is None:
        return None

    data = await CookieSessionStore(redis).get(session_id)
    if not data:
        return None

    user = await UserRepository.get_by_id(db, int(data["user_id"]))
    if user is None:
        logger.warning(f"Session {session_id[:8]}... references missing user {data['user_id']}")
        return None

    return CurrentUser.from_user(user)


async def get_current_user(
    user: CurrentUser | None = Depends(get_optional_user),
) -> CurrentUser:
    """
    FastAPI dependency that requires a logged-in user.

    Raises:
        AuthenticationRequiredError 401: If there is no valid session
    """
    if user is None:
        raise AuthenticationRequiredError()
    return user


def require_roles(*roles: UserRole) -> Callable[..., Awaitable[CurrentUser]]:
    """
    Build a dependency accepting only the given roles.

    Usage:
        @router.get("/stats")
        async def stats(user: CurrentUser = Depends(require_roles(UserRole.ADMIN))):
            ...

    Raises:
        AuthorizationError 403: Carrying the accepted roles
    """
    allowed = frozenset(roles)

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            logger.warning(
                f"Access denied: user {user.id} has role '{user.role.value}', "
                f"requires one of {sorted(role.value for role in allowed)}"
            )
            raise AuthorizationError(required_roles=[role.value for role in allowed])
        return user

    return dependency


require_secretary = require_roles(*SECRETARY_ROLES)
require_principal = require_roles(*PRINCIPAL_ROLES)
require_admin = require_roles(*ADMIN_ROLES)


__all__ = [
    "CurrentUser",
    "SECRETARY_ROLES",
    "PRINCIPAL_ROLES",
    "ADMIN_ROLES",
    "STAFF_ROLES",
    "get_session_store",
    "get_optional_user",
    "get_current_user",
    "require_roles",
    "require_secretary",
    "require_principal",
    "require_admin",
]
