"""
Seed Admin User

Creates the first ADMIN account of a fresh SupChaissac database. Later
accounts are created from the admin screens or by the Pronote import.

Credentials come from the environment:
    SEED_ADMIN_USERNAME (default: admin@supchaissac.fr)
    SEED_ADMIN_PASSWORD (required, at least 8 characters)
    SEED_ADMIN_NAME     (default: Administrateur)

Usage:
    SEED_ADMIN_PASSWORD=... python scripts/seed_admin.py
"""

import asyncio
import os
import sys

from supchaissac.core.database import async_session_maker, engine
from supchaissac.core.security import MIN_PASSWORD_LENGTH, hash_password
from supchaissac.modules.users.models import UserRole
from supchaissac.modules.users.repository import UserRepository


async def seed_admin() -> int:
    """Create the admin user if it doesn't exist. Returns the exit code."""
    username = os.environ.get("SEED_ADMIN_USERNAME", "admin@supchaissac.fr").strip().lower()
    password = os.environ.get("SEED_ADMIN_PASSWORD", "")
    name = os.environ.get("SEED_ADMIN_NAME", "Administrateur")

    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"SEED_ADMIN_PASSWORD must contain at least {MIN_PASSWORD_LENGTH} characters")
        return 1

    async with async_session_maker() as db:
        existing_user = await UserRepository.get_by_username(db, username)
        if existing_user:
            print(f"Admin already exists: {username}")
            print(f"  ID: {existing_user.id}")
            print(f"  Role: {existing_user.role.value}")
            return 0

        admin_user = await UserRepository.create(
            db,
            username=username,
            password_hash=hash_password(password),
            name=name,
            role=UserRole.ADMIN,
            is_activated=True,
        )
        await db.commit()

        print("Admin created successfully!")
        print(f"  Username: {username}")
        print(f"  Name: {name}")
        print(f"  ID: {admin_user.id}")

    await engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(seed_admin()))
