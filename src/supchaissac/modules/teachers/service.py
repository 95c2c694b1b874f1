"""
Teacher Directory Service

Teacher list and autocomplete used when declaring a replacement (RCD):
the replaced colleague is picked by name.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.modules.shared.text import normalize_for_search
from supchaissac.modules.teachers.schemas import TeacherEntry
from supchaissac.modules.users.models import User
from supchaissac.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

DEFAULT_CIVILITY = "M."
MIN_QUERY_LENGTH = 2
DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 20


def split_names(user: User) -> tuple[str, str]:
    """
    (first name, last name) of a teacher.

    Accounts without first/last name fall back to ``name``, read as
    "First Last Name".
    """
    first_name = user.first_name or ""
    last_name = user.last_name or ""
    if not first_name and not last_name and user.name:
        first_name, _, last_name = user.name.partition(" ")
    return first_name, last_name


def to_entry(user: User) -> TeacherEntry:
    first_name, last_name = split_names(user)
    civility = user.civility.value if user.civility else DEFAULT_CIVILITY
    return TeacherEntry(
        id=user.id,
        first_name=first_name,
        last_name=last_name.upper(),
        civility=civility,
        subject=user.subject or "",
        display_name=f"{civility} {last_name.upper()} {first_name}",
    )


def _matches(user: User, term: str) -> bool:
    first_name, last_name = split_names(user)
    return any(
        term in normalize_for_search(value) for value in (last_name, first_name, user.name)
    )


async def list_teachers(db: AsyncSession) -> list[TeacherEntry]:
    teachers = await UserRepository.list_teachers(db)
    return [to_entry(user) for user in teachers]


async def search_teachers(
    db: AsyncSession,
    query: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> list[TeacherEntry]:
    """Accent-insensitive match on last, first or display name."""
    if len(query.strip()) < MIN_QUERY_LENGTH:
        return []

    term = normalize_for_search(query)
    limit = max(1, min(limit, MAX_SEARCH_LIMIT))
    teachers = await UserRepository.list_teachers(db)

    found = [user for user in teachers if _matches(user, term)][:limit]
    logger.debug(f"Teacher search {query!r}: {len(found)} results")
    return [to_entry(user) for user in found]
