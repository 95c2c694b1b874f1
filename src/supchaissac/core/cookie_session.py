"""
Cookie Sessions

Server-side login sessions stored in Redis. The browser only holds an
opaque, HMAC-signed session id in the ``supchaissac.sid`` cookie; the
user id and role live in Redis under ``session:<id>`` with a sliding TTL.

Security:
- Cookie is HttpOnly and SameSite=Lax, Secure in production
- Signature uses SESSION_SECRET so forged ids are rejected before any lookup
- Logging out deletes the Redis key, so a stolen cookie stops working
"""

import hashlib
import hmac
import json
import logging
from datetime import UTC, datetime

from fastapi import Response
from redis.asyncio import Redis

from supchaissac.core.config import settings
from supchaissac.core.security import generate_session_id

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"


def _signature(session_id: str) -> str:
    digest = hmac.new(
        settings.session_secret.encode("utf-8"),
        session_id.encode("utf-8"),
        hashlib.sha256,
    )
    return digest.hexdigest()


def sign_session_id(session_id: str) -> str:
    """Return the cookie value for ``session_id``."""
    return f"{session_id}.{_signature(session_id)}"


def unsign_session_id(cookie_value: str | None) -> str | None:
    """
    Extract the session id from a cookie value.

    Returns:
        The session id, or None if the value is missing or the signature is wrong
    """
    if not cookie_value or "." not in cookie_value:
        return None
    session_id, signature = cookie_value.rsplit(".", 1)
    if not hmac.compare_digest(signature, _signature(session_id)):
        return None
    return session_id


class CookieSessionStore:
    """Redis-backed session storage."""

    def __init__(self, redis: Redis, ttl_seconds: int | None = None):
        self.redis = redis
        self.ttl_seconds = ttl_seconds or settings.session_ttl_seconds

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    async def create(self, user_id: int, role: str) -> str:
        """Persist a new session and return its id."""
        session_id = generate_session_id()
        payload = {
            "user_id": user_id,
            "role": role,
            "created_at": datetime.now(UTC).isoformat(),
        }
        await self.redis.set(self._key(session_id), json.dumps(payload), ex=self.ttl_seconds)
        logger.debug(f"Session created for user {user_id}")
        return session_id

    async def get(self, session_id: str) -> dict | None:
        """Load session data and extend its lifetime."""
        raw = await self.redis.get(self._key(session_id))
        if raw is None:
            return None
        await self.redis.expire(self._key(session_id), self.ttl_seconds)
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding corrupted session payload")
            await self.destroy(session_id)
            return None

    async def destroy(self, session_id: str) -> None:
        await self.redis.delete(self._key(session_id))


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=sign_session_id(session_id),
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.session_cookie_name, path="/")
