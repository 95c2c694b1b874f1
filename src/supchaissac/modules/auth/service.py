"""
Auth Service Layer

Credential checks, self-service profile changes and account activation.
Cookie handling stays in the router.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import CurrentUser
from supchaissac.core.errors import NotFoundError, ServiceError, ValidationError
from supchaissac.core.security import MIN_PASSWORD_LENGTH, hash_password, verify_password
from supchaissac.modules.auth.schemas import ProfileUpdate
from supchaissac.modules.shared.text import initials_for
from supchaissac.modules.users.models import User
from supchaissac.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


class InvalidCredentialsError(ServiceError):
    """Unknown username or wrong password. Both cases look the same to the client."""

    def __init__(self):
        super().__init__(
            message="Identifiants incorrects",
            error_code="INVALID_CREDENTIALS",
            status_code=401,
        )


def _token_expired(user: User, now: datetime | None = None) -> bool:
    if user.activation_token_expiry is None:
        return False
    return (now or datetime.now(UTC)) > user.activation_token_expiry


async def authenticate(db: AsyncSession, username: str, password: str) -> User:
    """
    Check a username/password pair.

    Accounts that were never activated can still log in with the
    initial password.

    Raises:
        InvalidCredentialsError: On unknown username or wrong password
    """
    user = await UserRepository.get_by_username(db, username.strip().lower())
    if user is None or not verify_password(password, user.password_hash):
        logger.info(f"Failed login for {username!r}")
        raise InvalidCredentialsError()

    logger.info(f"User {user.id} logged in ({user.role.value})")
    return user


async def get_profile(db: AsyncSession, current_user: CurrentUser) -> User:
    user = await UserRepository.get_by_id(db, current_user.id)
    if user is None:
        raise NotFoundError("User", current_user.id)
    return user


async def update_profile(db: AsyncSession, current_user: CurrentUser, data: ProfileUpdate) -> User:
    """
    Change the usage first name and/or the password.

    Raises:
        ValidationError: Missing or wrong current password, new password too short
    """
    user = await get_profile(db, current_user)
    changes: dict = {}

    if data.first_name is not None:
        first_name = data.first_name.strip()
        changes["first_name"] = first_name
        changes["name"] = " ".join(p for p in (first_name, user.last_name) if p)
        changes["initials"] = initials_for(first_name, user.last_name)

    if data.new_password:
        if not data.current_password:
            raise ValidationError("Mot de passe actuel requis", error_code="PASSWORD_REQUIRED")
        if not verify_password(data.current_password, user.password_hash):
            raise ValidationError("Mot de passe actuel incorrect", error_code="WRONG_PASSWORD")
        if len(data.new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Le nouveau mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères",
                error_code="PASSWORD_TOO_SHORT",
            )
        changes["password_hash"] = hash_password(data.new_password)

    if not changes:
        return user

    user = await UserRepository.update(db, user, **changes)
    logger.info(f"User {user.id} updated profile: {sorted(changes)}")
    return user


async def _get_pending_activation(db: AsyncSession, token: str) -> User:
    user = await UserRepository.get_by_activation_token(db, token)
    if user is None:
        raise NotFoundError("Activation token")
    if user.is_activated:
        raise ValidationError("Ce compte est déjà activé", error_code="ALREADY_ACTIVATED")
    if _token_expired(user):
        raise ValidationError(
            "Ce lien a expiré. Contactez l'administrateur.", error_code="TOKEN_EXPIRED"
        )
    return user


async def verify_activation_token(db: AsyncSession, token: str) -> User:
    """
    Raises:
        NotFoundError: Unknown token
        ValidationError: Account already activated or token expired
    """
    return await _get_pending_activation(db, token)


async def activate_account(db: AsyncSession, token: str, password: str) -> User:
    """Set the chosen password, mark the account activated and burn the token."""
    user = await _get_pending_activation(db, token)
    user = await UserRepository.update(
        db,
        user,
        password_hash=hash_password(password),
        is_activated=True,
        activation_token=None,
        activation_token_expiry=None,
    )
    logger.info(f"Account {user.id} activated")
    return user
