"""
User Repository

Database operations for user management.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.modules.users.models import Civility, User, UserRole

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        username: str,
        password_hash: str,
        name: str,
        role: UserRole,
        first_name: str | None = None,
        last_name: str | None = None,
        civility: Civility | None = None,
        subject: str | None = None,
        initials: str | None = None,
        in_pacte: bool = False,
        is_activated: bool = False,
        activation_token: str | None = None,
        activation_token_expiry: datetime | None = None,
    ) -> User:
        """
        Create a new user record.

        Args:
            db: Database session
            username: Login (unique)
            password_hash: Hashed password
            name: Display name
            role: User's role
            first_name: First name (optional)
            last_name: Last name (optional)
            civility: "M." or "Mme" (optional)
            subject: Taught subject (optional)
            initials: Initials shown on calendars (optional)
            in_pacte: Whether the teacher signed a PACTE contract
            is_activated: Whether the account password has been set by its owner
            activation_token: First-login token (optional)
            activation_token_expiry: Token expiry (optional)

        Returns:
            Created User instance
        """
        user = User(
            username=username,
            password_hash=password_hash,
            name=name,
            role=role,
            first_name=first_name,
            last_name=last_name,
            civility=civility,
            subject=subject,
            initials=initials,
            in_pacte=in_pacte,
            is_activated=is_activated,
            activation_token=activation_token,
            activation_token_expiry=activation_token_expiry,
        )

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"Created user: {user.id} - {user.username} ({user.role.value})")
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> User | None:
        """Get a user by ID."""
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_username(db: AsyncSession, username: str) -> User | None:
        """
        Get a user by login, case-insensitively.

        Args:
            db: Database session
            username: Login

        Returns:
            User instance or None if not found
        """
        result = await db.execute(
            select(User).where(func.lower(User.username) == username.strip().lower())
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def username_exists(db: AsyncSession, username: str) -> bool:
        user = await UserRepository.get_by_username(db, username)
        return user is not None

    @staticmethod
    async def get_by_activation_token(db: AsyncSession, token: str) -> User | None:
        result = await db.execute(select(User).where(User.activation_token == token))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_all(db: AsyncSession, role: UserRole | None = None) -> list[User]:
        """List users ordered by last name then first name, optionally filtered by role."""
        query = select(User).order_by(User.last_name, User.first_name, User.name)
        if role is not None:
            query = query.where(User.role == role)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def list_teachers(db: AsyncSession) -> list[User]:
        return await UserRepository.list_all(db, role=UserRole.TEACHER)

    @staticmethod
    async def count_by_role(db: AsyncSession) -> dict[UserRole, int]:
        result = await db.execute(select(User.role, func.count(User.id)).group_by(User.role))
        return {role: count for role, count in result.all()}

    @staticmethod
    async def update(db: AsyncSession, user: User, **fields: Any) -> User:
        """
        Apply attribute changes and persist them.

        Unknown attribute names are ignored.
        """
        for key, value in fields.items():
            if hasattr(user, key):
                setattr(user, key, value)

        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def delete(db: AsyncSession, user_id: int) -> bool:
        """Delete a user. Returns False when no row matched."""
        result = await db.execute(delete(User).where(User.id == user_id))
        await db.commit()
        return result.rowcount > 0
