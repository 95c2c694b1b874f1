"""
Students Router

Endpoints:
- GET /students - Roster of a school year (filters: class, year, search)
- GET /students/search - Autocomplete for homework-help lists
- GET /students/class/{class_name} - Pupils of one class
- GET /students/classes - Class names of a school year
- GET /students/stats - Counts by class and accompaniment project
- POST /students/import - CSV import (admin)
- POST /students/preview - CSV analysis without import (admin)
- DELETE /students - Remove a school year's roster (admin)
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import CurrentUser, get_current_user, require_admin
from supchaissac.core.database import get_db
from supchaissac.core.school_calendar import current_school_year
from supchaissac.modules.students import service
from supchaissac.modules.students.schemas import (
    DeleteRosterResponse,
    StudentImportResponse,
    StudentPreviewResponse,
    StudentResponse,
    StudentSearchResponse,
    StudentStatsResponse,
    StudentSummary,
)

router = APIRouter()

SCHOOL_YEAR_PATTERN = r"^\d{4}-\d{4}$"


@router.get("", response_model=list[StudentResponse], summary="List students")
async def list_students(
    class_name: str | None = Query(None, alias="class"),
    year: str | None = Query(None, pattern=SCHOOL_YEAR_PATTERN),
    search: str | None = Query(None, max_length=100),
    _user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[StudentResponse]:
    students = await service.list_students(
        db, school_year=year, class_name=class_name, search=search
    )
    return [StudentResponse.model_validate(s) for s in students]


@router.get(
    "/search",
    response_model=StudentSearchResponse,
    summary="Search students",
    description="""
Accent-insensitive search on last and first names of the current school year.
Queries shorter than 2 characters return no result. When the query is a
class name ("6A"), that class is reported in `matching_class` and its
pupils are listed first.
""",
)
async def search_students(
    q: str = Query("", max_length=100),
    limit: int = Query(service.DEFAULT_SEARCH_LIMIT, ge=1, le=service.MAX_SEARCH_LIMIT),
    _user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> StudentSearchResponse:
    return await service.search_students(db, q, limit=limit)


@router.get("/class/{class_name}", response_model=list[StudentSummary], summary="Class list")
async def list_class(
    class_name: str,
    _user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[StudentSummary]:
    students = await service.list_class(db, class_name)
    return [StudentSummary.model_validate(s) for s in students]


@router.get("/classes", response_model=list[str], summary="Class names")
async def list_classes(
    year: str | None = Query(None, pattern=SCHOOL_YEAR_PATTERN),
    _user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[str]:
    return await service.list_classes(db, school_year=year)


@router.get("/stats", response_model=StudentStatsResponse, summary="Roster statistics")
async def roster_stats(
    year: str | None = Query(None, pattern=SCHOOL_YEAR_PATTERN),
    _user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> StudentStatsResponse:
    return await service.get_stats(db, school_year=year)


@router.post(
    "/import",
    response_model=StudentImportResponse,
    summary="Import a roster CSV",
    description="""
Pronote-style CSV export (UTF-8 or Windows-1252; tab, semicolon or comma
separated). Rows missing last name, first name or class are reported with
their line number and skipped.

With `replace_existing=true` the school year's previous roster is deleted first.
""",
    responses={400: {"description": "Empty or unreadable file"}},
)
async def import_students(
    file: UploadFile = File(...),
    school_year: str | None = Form(None, pattern=SCHOOL_YEAR_PATTERN),
    replace_existing: bool = Form(False),
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> StudentImportResponse:
    content = await file.read()
    return await service.import_students(
        db, user, content, school_year=school_year, replace_existing=replace_existing
    )


@router.post("/preview", response_model=StudentPreviewResponse, summary="Preview a roster CSV")
async def preview_students(
    file: UploadFile = File(...),
    _user: CurrentUser = Depends(require_admin),
) -> StudentPreviewResponse:
    content = await file.read()
    return service.preview_import(content)


@router.delete("", response_model=DeleteRosterResponse, summary="Delete a school year's roster")
async def delete_roster(
    year: str | None = Query(None, pattern=SCHOOL_YEAR_PATTERN),
    user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> DeleteRosterResponse:
    school_year = year or current_school_year()
    deleted = await service.delete_roster(db, user, school_year=school_year)
    return DeleteRosterResponse(
        deleted=deleted,
        school_year=school_year,
        message=f"Élèves de {school_year} supprimés",
    )
