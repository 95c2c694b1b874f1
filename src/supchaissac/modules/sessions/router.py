"""
Sessions Router

Endpoints:
- POST /sessions - Declare a session (teacher)
- GET /sessions - List own sessions (teacher)
- GET /sessions/admin/all - List all sessions (secretary, principal, admin)
- GET /sessions/calendar/blocked - Blocked dates in a range
- GET /sessions/{id} - Get a session
- PUT /sessions/{id} - Correct a pending declaration (teacher, first hour)
- PUT /sessions/{id}/review - Transmit or request information (secretary)
- PUT /sessions/{id}/validate - Validate or reject (principal)
- PUT /sessions/{id}/mark-paid - Record payment (secretary)

Service errors are rendered by the application-wide handlers in
supchaissac.core.errors.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import (
    CurrentUser,
    get_current_user,
    require_principal,
    require_secretary,
)
from supchaissac.core.database import get_db
from supchaissac.modules.sessions import service
from supchaissac.modules.sessions.models import SessionStatus, SessionType
from supchaissac.modules.sessions.schemas import (
    BlockedDatesResponse,
    ReviewRequest,
    SessionCreate,
    SessionResponse,
    SessionUpdate,
    ValidateRequest,
)

router = APIRouter()

_ERROR_EXAMPLE = {
    "application/json": {
        "example": {"detail": {"error": "DATE_BLOCKED", "message": "Date non disponible: Week-end"}}
    }
}


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Declare a session",
    description="""
Declare a supplementary work session for the logged-in teacher.

The session starts in PENDING_REVIEW. The teacher is always the logged-in
user; a teacher id in the body is ignored.

**Required fields by type:**
- RCD: class_name, replaced_teacher_last_name
- DEVOIRS_FAITS: student_count (or a students_list)
- AUTRE: description
""",
    responses={
        400: {"description": "Blocked date or invalid fields", "content": _ERROR_EXAMPLE},
        401: {"description": "Not logged in"},
        403: {"description": "Only teachers declare sessions"},
    },
)
async def create_session(
    data: SessionCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    session = await service.create_session(db, user, data)
    return SessionResponse.model_validate(session)


@router.get("", response_model=list[SessionResponse], summary="List own sessions")
async def list_own_sessions(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[SessionResponse]:
    sessions = await service.list_own_sessions(db, user)
    return [SessionResponse.model_validate(s) for s in sessions]


@router.get(
    "/admin/all",
    response_model=list[SessionResponse],
    summary="List all sessions",
    description="All declared sessions, newest first. Optional status, type and teacher filters.",
)
async def list_all_sessions(
    status_filter: SessionStatus | None = Query(None, alias="status"),
    type_filter: SessionType | None = Query(None, alias="type"),
    teacher_id: int | None = Query(None),
    user: CurrentUser = Depends(require_secretary),
    db: AsyncSession = Depends(get_db),
) -> list[SessionResponse]:
    sessions = await service.list_all_sessions(
        db, user, status=status_filter, session_type=type_filter, teacher_id=teacher_id
    )
    return [SessionResponse.model_validate(s) for s in sessions]


@router.get(
    "/calendar/blocked",
    response_model=BlockedDatesResponse,
    summary="Blocked dates",
    description="Weekends, public holidays and school holidays between start and end (inclusive).",
)
async def blocked_dates(
    start: date = Query(...),
    end: date = Query(...),
    _user: CurrentUser = Depends(get_current_user),
) -> BlockedDatesResponse:
    return service.get_blocked_dates(start, end)


@router.get("/{session_id}", response_model=SessionResponse, summary="Get a session")
async def get_session(
    session_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    session = await service.get_session(db, user, session_id)
    return SessionResponse.model_validate(session)


@router.put(
    "/{session_id}",
    response_model=SessionResponse,
    summary="Correct a pending declaration",
    description="""
Teachers may correct their own session while it is PENDING_REVIEW and
less than 60 minutes old. Changing the date re-applies the blocked-date
check; changing the type clears the fields of the previous type.
""",
    responses={
        400: {"description": "Session locked, blocked date or invalid fields"},
        403: {"description": "Field not editable by this role"},
        404: {"description": "Session not found"},
    },
)
async def update_session(
    session_id: int,
    data: SessionUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    session = await service.update_session(db, user, session_id, data)
    return SessionResponse.model_validate(session)


@router.put(
    "/{session_id}/review",
    response_model=SessionResponse,
    summary="Secretary review",
    description="""
- `transmit`: PENDING_REVIEW -> PENDING_VALIDATION
- `request-info`: store a comment for the teacher, status unchanged
""",
)
async def review_session(
    session_id: int,
    data: ReviewRequest,
    user: CurrentUser = Depends(require_secretary),
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    session = await service.review_session(db, user, session_id, data)
    return SessionResponse.model_validate(session)


@router.put(
    "/{session_id}/validate",
    response_model=SessionResponse,
    summary="Principal decision",
    description="""
- `validate`: PENDING_VALIDATION -> VALIDATED. `convert_to_hse` or
  `conversion_type` rewrites the type; the declared type is kept in
  `original_type`.
- `reject`: PENDING_VALIDATION -> REJECTED, `rejection_reason` required.
""",
    responses={
        400: {"description": "Invalid transition, missing reason or impossible conversion"},
        403: {"description": "Principal or admin role required"},
    },
)
async def validate_session(
    session_id: int,
    data: ValidateRequest,
    user: CurrentUser = Depends(require_principal),
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    session = await service.decide_session(db, user, session_id, data)
    return SessionResponse.model_validate(session)


@router.put(
    "/{session_id}/mark-paid",
    response_model=SessionResponse,
    summary="Record payment",
)
async def mark_paid(
    session_id: int,
    user: CurrentUser = Depends(require_secretary),
    db: AsyncSession = Depends(get_db),
) -> SessionResponse:
    session = await service.mark_paid(db, user, session_id)
    return SessionResponse.model_validate(session)
