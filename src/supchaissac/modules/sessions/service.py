"""
Session Service Layer

Business logic for declaring sessions and moving them through the
approval workflow:

1. Declaration (teacher):
   - Date must be an ordinary school day (no weekend or holiday)
   - Type-specific fields validated for the declared type
   - Teacher identity taken from the logged-in user, status PENDING_REVIEW

2. Correction (teacher):
   - Own sessions only, while PENDING_REVIEW and during the first hour

3. Review (secretary): transmit to the principal or ask for information

4. Decision (principal): validate (optionally converting the type) or reject

5. Payment (secretary): VALIDATED -> PAID

The requester is always passed in explicitly as a CurrentUser.
"""

import logging
from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from supchaissac.core.auth import CurrentUser
from supchaissac.core.errors import AuthorizationError, NotFoundError, ValidationError
from supchaissac.core.school_calendar import blocked_dates_between
from supchaissac.modules.sessions import repository, workflow
from supchaissac.modules.sessions.models import SessionStatus, SessionType, TeachingSession
from supchaissac.modules.sessions.schemas import (
    BlockedDate,
    BlockedDatesResponse,
    ReviewRequest,
    SessionCreate,
    SessionUpdate,
    ValidateRequest,
)
from supchaissac.modules.users.models import UserRole

logger = logging.getLogger(__name__)

MAX_CALENDAR_RANGE_DAYS = 366


class SessionLockedError(ValidationError):
    """Raised when a teacher edits a session that is no longer editable."""

    def __init__(self, message: str = "Cette déclaration ne peut plus être modifiée."):
        super().__init__(message=message, error_code="SESSION_LOCKED")


def _dump_fields(data: SessionCreate | SessionUpdate, *, exclude_unset: bool) -> dict:
    values = data.model_dump(exclude_unset=exclude_unset, mode="python")
    if values.get("students_list") is not None:
        values["students_list"] = [dict(entry) for entry in values["students_list"]]
    return values


async def _load_visible(db: AsyncSession, user: CurrentUser, session_id: int) -> TeachingSession:
    """
    Load a session the user may see.

    Teachers only see their own sessions; any other id answers 404.
    """
    session = await repository.get_by_id(db, session_id)
    if session is None:
        raise NotFoundError("Session", session_id)
    if user.role == UserRole.TEACHER and session.teacher_id != user.id:
        logger.warning(f"Teacher {user.id} tried to access session {session_id}")
        raise NotFoundError("Session", session_id)
    return session


# ============================================
# Teacher operations
# ============================================


async def create_session(
    db: AsyncSession,
    user: CurrentUser,
    data: SessionCreate,
) -> TeachingSession:
    """
    Declare a new session for the logged-in teacher.

    Raises:
        AuthorizationError: If the user is not a teacher
        BlockedDateError: If the date is a weekend or holiday
        ValidationError: If type-specific fields are invalid
    """
    workflow.check_transition(None, SessionStatus.PENDING_REVIEW, user)
    workflow.ensure_declarable_date(data.date)

    values = _dump_fields(data, exclude_unset=False)
    workflow.validate_type_fields(data.type, values)

    session = await repository.create(
        db,
        **values,
        teacher_id=user.id,
        teacher_name=user.name,
        status=SessionStatus.PENDING_REVIEW,
        updated_by=user.id,
    )
    return session


async def list_own_sessions(db: AsyncSession, user: CurrentUser) -> list[TeachingSession]:
    return await repository.list_for_teacher(db, user.id)


async def get_session(db: AsyncSession, user: CurrentUser, session_id: int) -> TeachingSession:
    return await _load_visible(db, user, session_id)


async def update_session(
    db: AsyncSession,
    user: CurrentUser,
    session_id: int,
    data: SessionUpdate,
) -> TeachingSession:
    """
    Correct a pending declaration.

    Raises:
        NotFoundError: Unknown session or not the teacher's own
        AuthorizationError: Fields the user's role may not change
        SessionLockedError: Session already reviewed or edit window elapsed
        BlockedDateError / ValidationError: Invalid new values
    """
    session = await _load_visible(db, user, session_id)

    requested = data.model_fields_set | set(data.model_extra or {})
    workflow.check_editable_fields(user, requested)

    changes = {
        field: value
        for field, value in _dump_fields(data, exclude_unset=True).items()
        if field in SessionUpdate.model_fields
    }
    for required in ("date", "time_slot", "type"):
        if required in changes and changes[required] is None:
            del changes[required]
    if not changes:
        return session

    if user.role != UserRole.TEACHER:
        raise AuthorizationError(required_roles=[UserRole.TEACHER.value])

    if session.status != SessionStatus.PENDING_REVIEW:
        raise SessionLockedError()
    if not workflow.teacher_can_edit(session):
        raise SessionLockedError("Le délai de modification (60 minutes) est dépassé.")

    new_date = changes.get("date")
    if new_date is not None and new_date != session.date:
        workflow.ensure_declarable_date(new_date)

    new_type: SessionType = changes.get("type") or session.type
    merged = {field: getattr(session, field) for field in workflow.ALL_TYPE_FIELDS}
    if new_type != session.type:
        merged.update(workflow.cleared_type_fields(new_type))
    merged.update({k: v for k, v in changes.items() if k in workflow.ALL_TYPE_FIELDS})
    workflow.validate_type_fields(new_type, merged)

    for field, value in {**changes, **merged}.items():
        setattr(session, field, value)
    session.type = new_type
    session.updated_by = user.id

    session = await repository.save(db, session)
    logger.info(f"Session {session.id} updated by teacher {user.id}")
    return session


# ============================================
# Staff operations
# ============================================


async def list_all_sessions(
    db: AsyncSession,
    user: CurrentUser,
    status: SessionStatus | None = None,
    session_type: SessionType | None = None,
    teacher_id: int | None = None,
) -> list[TeachingSession]:
    logger.debug(f"User {user.id} listing all sessions")
    return await repository.list_all(
        db, status=status, session_type=session_type, teacher_id=teacher_id
    )


async def review_session(
    db: AsyncSession,
    user: CurrentUser,
    session_id: int,
    data: ReviewRequest,
) -> TeachingSession:
    """
    Secretary review.

    "transmit" moves the session to PENDING_VALIDATION; "request-info" only
    stores the review comment for the teacher.
    """
    session = await _load_visible(db, user, session_id)

    if data.action == "transmit":
        workflow.apply_transition(session, SessionStatus.PENDING_VALIDATION, user)
        if data.comment:
            session.review_comments = data.comment.strip()
    else:
        workflow.check_editable_fields(user, ["review_comments"])
        if session.status != SessionStatus.PENDING_REVIEW:
            raise SessionLockedError("La session a déjà été transmise.")
        session.review_comments = data.comment.strip()
        session.updated_by = user.id
        logger.info(f"Information requested on session {session.id} by user {user.id}")

    return await repository.save(db, session)


async def decide_session(
    db: AsyncSession,
    user: CurrentUser,
    session_id: int,
    data: ValidateRequest,
) -> TeachingSession:
    """
    Principal decision: validate (with optional type conversion) or reject.

    Raises:
        InvalidTransitionError: Session not PENDING_VALIDATION
        AuthorizationError: User is not principal/admin
        ValidationError: Missing rejection reason or impossible conversion
    """
    session = await _load_visible(db, user, session_id)

    if data.action == "reject":
        workflow.apply_transition(session, SessionStatus.REJECTED, user, data.rejection_reason)
        return await repository.save(db, session)

    workflow.check_transition(session.status, SessionStatus.VALIDATED, user)

    target = data.conversion_target
    if target is not None:
        workflow.check_editable_fields(user, ["type"])
        if workflow.convert_type(session, target):
            logger.info(
                f"Session {session.id} converted {session.original_type.value} -> {target.value}"
            )

    workflow.apply_transition(session, SessionStatus.VALIDATED, user)
    if data.validation_comments:
        session.validation_comments = data.validation_comments.strip()

    return await repository.save(db, session)


async def mark_paid(db: AsyncSession, user: CurrentUser, session_id: int) -> TeachingSession:
    session = await _load_visible(db, user, session_id)
    workflow.apply_transition(session, SessionStatus.PAID, user)
    return await repository.save(db, session)


# ============================================
# Calendar
# ============================================


def get_blocked_dates(start: date, end: date) -> BlockedDatesResponse:
    """
    Blocked days in [start, end] for calendar widgets.

    Raises:
        ValidationError: If the range is reversed or longer than a year
    """
    if end < start:
        raise ValidationError("La date de fin précède la date de début.")
    if end - start > timedelta(days=MAX_CALENDAR_RANGE_DAYS):
        raise ValidationError(f"Plage limitée à {MAX_CALENDAR_RANGE_DAYS} jours.")

    return BlockedDatesResponse(
        start=start,
        end=end,
        blocked=[
            BlockedDate(date=day, reason=reason)
            for day, reason in blocked_dates_between(start, end)
        ],
    )
