"""
Security Utilities

Password hashing (bcrypt) and random token generation.
"""

import secrets
from datetime import UTC, datetime, timedelta

import bcrypt

BCRYPT_ROUNDS = 10
ACTIVATION_TOKEN_BYTES = 32
ACTIVATION_TOKEN_TTL = timedelta(days=7)
MIN_PASSWORD_LENGTH = 8

# Initial password given to accounts created without one
DEFAULT_PASSWORD = "password123"


def hash_password(password: str) -> str:
    """Hash a plain text password with bcrypt."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    """
    Check a plain text password against a stored bcrypt hash.

    Returns False for missing or malformed hashes instead of raising.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def generate_activation_token() -> str:
    """Return a 64 character hex token for account activation links."""
    return secrets.token_hex(ACTIVATION_TOKEN_BYTES)


def activation_token_expiry(now: datetime | None = None) -> datetime:
    """Expiry timestamp for a token issued at ``now``."""
    return (now or datetime.now(UTC)) + ACTIVATION_TOKEN_TTL


def generate_session_id() -> str:
    """Opaque identifier stored in the session cookie."""
    return secrets.token_urlsafe(32)
