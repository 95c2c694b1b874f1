"""
Student Service Layer

Roster queries and the CSV import, which goes through the roster
normalizer (encoding, delimiter and header detection).
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import CurrentUser
from supchaissac.core.errors import ValidationError
from supchaissac.core.school_calendar import current_school_year
from supchaissac.modules.roster.normalizer import (
    DelimitedTable,
    decode_bytes,
    normalize_student_rows,
    parse_delimited,
    preview_students,
)
from supchaissac.modules.shared.text import normalize_for_search
from supchaissac.modules.students import repository
from supchaissac.modules.students.models import Student
from supchaissac.modules.students.schemas import (
    ImportErrorDetail,
    MatchingClass,
    StudentImportResponse,
    StudentPreviewResponse,
    StudentSearchResponse,
    StudentStatsResponse,
    StudentSummary,
)

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
DEFAULT_SEARCH_LIMIT = 15
MAX_SEARCH_LIMIT = 20
MAX_CLASS_MATCHES = 10
MAX_ERROR_DETAILS = 10


def _read_roster(content: bytes) -> DelimitedTable:
    table = parse_delimited(decode_bytes(content))
    if not table.rows:
        raise ValidationError("Fichier CSV vide ou invalide.", error_code="EMPTY_FILE")
    return table


async def list_students(
    db: AsyncSession,
    school_year: str | None = None,
    class_name: str | None = None,
    search: str | None = None,
) -> list[Student]:
    """Roster of a year (current by default), optionally by class and name fragment."""
    year = school_year or current_school_year()
    if class_name == "all":
        class_name = None

    students = await repository.list_for_year(db, year, class_name=class_name)
    if search:
        term = normalize_for_search(search)
        students = [
            s
            for s in students
            if term in normalize_for_search(s.last_name)
            or term in normalize_for_search(s.first_name)
        ]
    return students


async def search_students(
    db: AsyncSession,
    query: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> StudentSearchResponse:
    """
    Autocomplete over the current school year.

    Matching ignores case and accents. When the query is also the name of
    a class, pupils of that class come first.
    """
    if len(query.strip()) < MIN_QUERY_LENGTH:
        return StudentSearchResponse(students=[])

    limit = max(1, min(limit, MAX_SEARCH_LIMIT))
    term = normalize_for_search(query)
    class_candidate = query.strip().upper()

    students = await repository.list_by_name(db, current_school_year())

    class_students = [s for s in students if s.class_name == class_candidate]
    matching_class = None
    if class_students:
        matching_class = MatchingClass(name=class_candidate, count=len(class_students))

    found = [
        s
        for s in students
        if term in normalize_for_search(s.last_name) or term in normalize_for_search(s.first_name)
    ][:limit]

    if class_students:
        class_ids = {s.id for s in class_students}
        found = class_students[:MAX_CLASS_MATCHES] + [s for s in found if s.id not in class_ids]
        found = found[:limit]

    logger.debug(f"Student search {query!r}: {len(found)} results")
    return StudentSearchResponse(
        students=[StudentSummary.model_validate(s) for s in found],
        matching_class=matching_class,
    )


async def list_class(db: AsyncSession, class_name: str) -> list[Student]:
    return await repository.list_for_year(db, current_school_year(), class_name=class_name.upper())


async def list_classes(db: AsyncSession, school_year: str | None = None) -> list[str]:
    return await repository.list_classes(db, school_year or current_school_year())


async def get_stats(db: AsyncSession, school_year: str | None = None) -> StudentStatsResponse:
    year = school_year or current_school_year()
    class_counts = await repository.count_by_class(db, year)
    project_counts = await repository.count_by_project(db, year)
    return StudentStatsResponse(
        total_students=sum(class_counts.values()),
        total_classes=len(class_counts),
        class_counts=class_counts,
        project_counts=project_counts,
        school_year=year,
    )


async def import_students(
    db: AsyncSession,
    user: CurrentUser,
    content: bytes,
    school_year: str | None = None,
    replace_existing: bool = False,
) -> StudentImportResponse:
    """
    Import a roster CSV.

    Incomplete rows are skipped and reported with their line number; the
    other rows are inserted. With replace_existing the year's previous
    roster is deleted in the same transaction.

    Raises:
        ValidationError: If the file holds no data row
    """
    year = school_year or current_school_year()
    table = _read_roster(content)
    result = normalize_student_rows(table, school_year=year, imported_by=user.name)

    if replace_existing:
        await repository.delete_for_year(db, year)
    if result.accepted:
        await repository.bulk_create(db, result.accepted)
    await db.commit()

    classes = sorted({record["class_name"] for record in result.accepted})
    logger.info(
        f"Student import by user {user.id}: {len(result.accepted)} imported, "
        f"{len(result.rejected)} rejected, {len(classes)} classes ({year})"
    )
    return StudentImportResponse(
        imported=len(result.accepted),
        errors=len(result.rejected),
        error_details=[
            ImportErrorDetail(line=r.line, reason=r.reason)
            for r in result.rejected[:MAX_ERROR_DETAILS]
        ],
        classes=classes,
        school_year=year,
    )


def preview_import(content: bytes) -> StudentPreviewResponse:
    """Detected headers, classes and the first rows, without writing anything."""
    table = _read_roster(content)
    return StudentPreviewResponse(**preview_students(table))


async def delete_roster(
    db: AsyncSession,
    user: CurrentUser,
    school_year: str | None = None,
) -> int:
    year = school_year or current_school_year()
    deleted = await repository.delete_for_year(db, year)
    await db.commit()
    logger.warning(f"User {user.id} deleted the {year} roster ({deleted} students)")
    return deleted
