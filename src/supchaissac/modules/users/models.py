"""
User Models

Staff accounts (teachers, secretary, principal, administrators) and
their optional PACTE contract figures.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import Mapped, mapped_column

from supchaissac.modules.shared import BaseModel


class UserRole(str, Enum):
    """User roles in the system."""

    TEACHER = "TEACHER"
    SECRETARY = "SECRETARY"
    PRINCIPAL = "PRINCIPAL"
    ADMIN = "ADMIN"


class Civility(str, Enum):
    """Form of address used in teacher display names."""

    MR = "M."
    MRS = "Mme"


class User(BaseModel):
    """
    User model for authentication and authorization.

    ``username`` is the login (usually the academic email address).
    Accounts imported in bulk start with ``is_activated = False`` and an
    activation token that lets the teacher choose a password.
    """

    __tablename__ = "users"

    # Authentication fields
    username: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    # Profile fields
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    civility: Mapped[Civility | None] = mapped_column(
        ENUM(
            Civility,
            name="civility",
            create_type=True,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=True,
    )
    subject: Mapped[str | None] = mapped_column(String(100), nullable=True)
    initials: Mapped[str | None] = mapped_column(String(10), nullable=True)
    signature: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Role and permissions
    role: Mapped[UserRole] = mapped_column(
        ENUM(UserRole, name="user_role", create_type=True),
        nullable=False,
        default=UserRole.TEACHER,
    )

    # PACTE contract
    in_pacte: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    pacte_hours_target: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pacte_hours_completed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pacte_hours_df: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pacte_hours_rcd: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pacte_hours_completed_df: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pacte_hours_completed_rcd: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Account activation
    is_activated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    activation_token: Mapped[str | None] = mapped_column(
        String(64), unique=True, index=True, nullable=True
    )
    activation_token_expiry: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, role={self.role.value})>"

    @property
    def full_name(self) -> str:
        """Return user's full name, falling back to ``name``."""
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.name

