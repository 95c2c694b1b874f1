"""
Student Repository

Database operations for the pupil roster.
"""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.modules.students.models import Student

logger = logging.getLogger(__name__)


async def list_for_year(
    db: AsyncSession,
    school_year: str,
    class_name: str | None = None,
) -> list[Student]:
    """Pupils of a school year ordered by class then last name."""
    query = (
        select(Student)
        .where(Student.school_year == school_year)
        .order_by(Student.class_name, Student.last_name, Student.first_name)
    )
    if class_name is not None:
        query = query.where(Student.class_name == class_name)
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_by_name(db: AsyncSession, school_year: str) -> list[Student]:
    result = await db.execute(
        select(Student)
        .where(Student.school_year == school_year)
        .order_by(Student.last_name, Student.first_name)
    )
    return list(result.scalars().all())


async def list_classes(db: AsyncSession, school_year: str) -> list[str]:
    result = await db.execute(
        select(Student.class_name)
        .where(Student.school_year == school_year)
        .group_by(Student.class_name)
        .order_by(Student.class_name)
    )
    return list(result.scalars().all())


async def count_by_class(db: AsyncSession, school_year: str) -> dict[str, int]:
    result = await db.execute(
        select(Student.class_name, func.count(Student.id))
        .where(Student.school_year == school_year)
        .group_by(Student.class_name)
        .order_by(Student.class_name)
    )
    return {class_name: count for class_name, count in result.all()}


async def count_by_project(db: AsyncSession, school_year: str) -> dict[str, int]:
    result = await db.execute(
        select(Student.accompaniment_project, func.count(Student.id))
        .where(
            Student.school_year == school_year,
            Student.accompaniment_project.is_not(None),
        )
        .group_by(Student.accompaniment_project)
    )
    return {project: count for project, count in result.all()}


async def bulk_create(db: AsyncSession, records: list[dict]) -> int:
    """Insert roster rows without committing. Returns the number inserted."""
    db.add_all([Student(**record) for record in records])
    await db.flush()
    return len(records)


async def delete_for_year(db: AsyncSession, school_year: str) -> int:
    """Delete a school year's roster without committing. Returns the row count."""
    result = await db.execute(delete(Student).where(Student.school_year == school_year))
    logger.info(f"Deleted {result.rowcount} students of {school_year}")
    return result.rowcount
