"""
Session Workflow

Declarative rules for who may move a session between statuses and which
fields each role may change.

    PENDING_REVIEW -> PENDING_VALIDATION -> VALIDATED -> PAID
                                 \\
                                  -> REJECTED (reason required)

PAID and REJECTED are terminal. Every check raises a service error:
- InvalidTransitionError when the status change is not in the table
- AuthorizationError when the user's role cannot act on the transition or field
- ValidationError (BlockedDateError) for bad input

Nothing here touches the database; callers persist the mutated session.
"""

import enum
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any

from supchaissac.core.auth import CurrentUser
from supchaissac.core.errors import (
    AuthorizationError,
    BlockedDateError,
    InvalidTransitionError,
    ValidationError,
)
from supchaissac.core.school_calendar import blocked_reason
from supchaissac.modules.sessions.models import SessionStatus, SessionType, TeachingSession
from supchaissac.modules.users.models import UserRole

logger = logging.getLogger(__name__)

TEACHER_EDIT_WINDOW = timedelta(minutes=60)


class Actor(str, enum.Enum):
    """Workflow actors; a user role may act as one or more of them."""

    TEACHER = "teacher"
    SECRETARY = "secretary"
    PRINCIPAL = "principal"


ACTOR_ROLES: dict[Actor, frozenset[UserRole]] = {
    Actor.TEACHER: frozenset({UserRole.TEACHER}),
    Actor.SECRETARY: frozenset({UserRole.SECRETARY, UserRole.ADMIN}),
    Actor.PRINCIPAL: frozenset({UserRole.PRINCIPAL, UserRole.ADMIN}),
}


def actors_for(role: UserRole) -> set[Actor]:
    return {actor for actor, roles in ACTOR_ROLES.items() if role in roles}


@dataclass(frozen=True)
class Transition:
    """One allowed status change. ``source`` None means creation."""

    source: SessionStatus | None
    target: SessionStatus
    actor: Actor
    requires_reason: bool = False


TRANSITIONS: tuple[Transition, ...] = (
    Transition(None, SessionStatus.PENDING_REVIEW, Actor.TEACHER),
    Transition(SessionStatus.PENDING_REVIEW, SessionStatus.PENDING_VALIDATION, Actor.SECRETARY),
    Transition(SessionStatus.PENDING_VALIDATION, SessionStatus.VALIDATED, Actor.PRINCIPAL),
    Transition(
        SessionStatus.PENDING_VALIDATION,
        SessionStatus.REJECTED,
        Actor.PRINCIPAL,
        requires_reason=True,
    ),
    Transition(SessionStatus.VALIDATED, SessionStatus.PAID, Actor.SECRETARY),
)

_TRANSITION_INDEX: dict[tuple[SessionStatus | None, SessionStatus], Transition] = {
    (transition.source, transition.target): transition for transition in TRANSITIONS
}

VALID_STATUS_TRANSITIONS: dict[SessionStatus | None, set[SessionStatus]] = {
    source: {t.target for t in TRANSITIONS if t.source == source}
    for source in (None, *SessionStatus)
}

TERMINAL_STATUSES = frozenset(
    status for status in SessionStatus if not VALID_STATUS_TRANSITIONS[status]
)

# ============================================
# Type-specific fields
# ============================================

TYPE_FIELDS: dict[SessionType, frozenset[str]] = {
    SessionType.RCD: frozenset(
        {
            "class_name",
            "replaced_teacher_prefix",
            "replaced_teacher_last_name",
            "replaced_teacher_first_name",
            "subject",
        }
    ),
    SessionType.DEVOIRS_FAITS: frozenset({"grade_level", "student_count", "students_list"}),
    SessionType.AUTRE: frozenset({"description"}),
    SessionType.HSE: frozenset(),
}

ALL_TYPE_FIELDS = frozenset().union(*TYPE_FIELDS.values())

REQUIRED_TYPE_FIELDS: dict[SessionType, tuple[str, ...]] = {
    SessionType.RCD: ("class_name", "replaced_teacher_last_name"),
    SessionType.DEVOIRS_FAITS: ("student_count",),
    SessionType.AUTRE: ("description",),
    SessionType.HSE: (),
}

# HSE only results from a principal conversion
DECLARABLE_TYPES = frozenset({SessionType.RCD, SessionType.DEVOIRS_FAITS, SessionType.AUTRE})

CONVERSION_TARGETS: dict[SessionType, frozenset[SessionType]] = {
    SessionType.RCD: frozenset({SessionType.HSE}),
    SessionType.DEVOIRS_FAITS: frozenset({SessionType.HSE}),
    SessionType.AUTRE: frozenset({SessionType.HSE, SessionType.RCD, SessionType.DEVOIRS_FAITS}),
    SessionType.HSE: frozenset(),
}

# ============================================
# Field permissions outside status transitions
# ============================================

EDITABLE_FIELDS: dict[Actor, frozenset[str]] = {
    Actor.TEACHER: frozenset({"date", "time_slot", "type", "comment"}) | ALL_TYPE_FIELDS,
    Actor.SECRETARY: frozenset({"review_comments"}),
    Actor.PRINCIPAL: frozenset({"validation_comments", "rejection_reason", "type"}),
}


def _roles_for_actors(actors: Iterable[Actor]) -> list[str]:
    return sorted({role.value for actor in actors for role in ACTOR_ROLES[actor]})


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


# ============================================
# Transitions
# ============================================


def find_transition(current: SessionStatus | None, target: SessionStatus) -> Transition:
    """
    Look up a transition in the table.

    Raises:
        InvalidTransitionError: If ``current -> target`` is not allowed
    """
    transition = _TRANSITION_INDEX.get((current, target))
    if transition is None:
        raise InvalidTransitionError(
            current.value if current else "NEW",
            target.value,
        )
    return transition


def check_transition(
    current: SessionStatus | None,
    target: SessionStatus,
    user: CurrentUser,
    reason: str | None = None,
) -> Transition:
    """
    Validate a status change for ``user``.

    Raises:
        InvalidTransitionError: Transition not in the table
        AuthorizationError: User's role cannot perform it
        ValidationError: Required rejection reason is missing
    """
    transition = find_transition(current, target)

    if user.role not in ACTOR_ROLES[transition.actor]:
        logger.warning(
            f"User {user.id} ({user.role.value}) may not move session "
            f"{current.value if current else 'NEW'} -> {target.value}"
        )
        raise AuthorizationError(required_roles=_roles_for_actors([transition.actor]))

    if transition.requires_reason and _is_blank(reason):
        raise ValidationError(
            "Un motif de rejet est obligatoire.",
            error_code="REJECTION_REASON_REQUIRED",
        )

    return transition


def apply_transition(
    session: TeachingSession,
    target: SessionStatus,
    user: CurrentUser,
    reason: str | None = None,
) -> TeachingSession:
    """Check and apply a status change in place."""
    check_transition(session.status, target, user, reason)

    previous = session.status
    session.status = target
    session.updated_by = user.id
    if target == SessionStatus.REJECTED:
        session.rejection_reason = reason.strip() if reason else reason

    logger.info(
        f"Session {session.id}: {previous.value} -> {target.value} by user {user.id}"
    )
    return session


# ============================================
# Field checks
# ============================================


def check_editable_fields(user: CurrentUser, fields: Iterable[str]) -> None:
    """
    Ensure ``user`` may change every field in ``fields``.

    Raises:
        AuthorizationError: Listing the roles that could change the refused fields
    """
    allowed: set[str] = set()
    for actor in actors_for(user.role):
        allowed |= EDITABLE_FIELDS[actor]

    forbidden = set(fields) - allowed
    if not forbidden:
        return

    owners = [actor for actor, editable in EDITABLE_FIELDS.items() if forbidden & editable]
    logger.warning(
        f"User {user.id} ({user.role.value}) may not change fields {sorted(forbidden)}"
    )
    raise AuthorizationError(required_roles=_roles_for_actors(owners))


def ensure_declarable_date(day: date) -> None:
    """
    Raises:
        BlockedDateError: On weekends, public holidays and school holidays
    """
    reason = blocked_reason(day)
    if reason:
        raise BlockedDateError(reason)


def validate_type_fields(session_type: SessionType, values: Mapping[str, Any]) -> None:
    """
    Check the type-specific fields of a teacher declaration.

    Raises:
        ValidationError: Type not declarable, fields of another type present,
            or required fields missing
    """
    if session_type not in DECLARABLE_TYPES:
        raise ValidationError(
            f"Le type {session_type.value} ne peut pas être déclaré directement.",
            error_code="TYPE_NOT_DECLARABLE",
        )

    foreign = sorted(
        field
        for field in ALL_TYPE_FIELDS - TYPE_FIELDS[session_type]
        if not _is_blank(values.get(field))
    )
    if foreign:
        raise ValidationError(
            f"Champs incompatibles avec le type {session_type.value}: {', '.join(foreign)}",
            error_code="FIELDS_NOT_ALLOWED_FOR_TYPE",
        )

    missing = [
        field for field in REQUIRED_TYPE_FIELDS[session_type] if _is_blank(values.get(field))
    ]
    if missing:
        raise ValidationError(
            f"Champs obligatoires manquants: {', '.join(missing)}",
            error_code="MISSING_REQUIRED_FIELDS",
        )

    if session_type == SessionType.DEVOIRS_FAITS and values["student_count"] < 1:
        raise ValidationError(
            "Le nombre d'élèves doit être au moins 1.",
            error_code="INVALID_STUDENT_COUNT",
        )


def cleared_type_fields(session_type: SessionType) -> dict[str, None]:
    """Null values for every type-specific field not belonging to ``session_type``."""
    return {field: None for field in ALL_TYPE_FIELDS - TYPE_FIELDS[session_type]}


def convert_type(session: TeachingSession, new_type: SessionType) -> bool:
    """
    Rewrite the session type during principal validation.

    The type chosen by the teacher is recorded in ``original_type`` on the
    first conversion only; later conversions leave it untouched.

    Returns:
        True if the type changed

    Raises:
        ValidationError: If ``new_type`` is not a conversion target for the current type
    """
    if new_type == session.type:
        return False

    if new_type not in CONVERSION_TARGETS[session.type]:
        raise ValidationError(
            f"Conversion {session.type.value} -> {new_type.value} impossible.",
            error_code="INVALID_CONVERSION",
        )

    if session.original_type is None:
        session.original_type = session.type
    session.type = new_type
    return True


def teacher_can_edit(session: TeachingSession, now: datetime | None = None) -> bool:
    """Teachers may edit their own pending sessions during the first hour."""
    if session.status != SessionStatus.PENDING_REVIEW:
        return False
    if session.created_at is None:
        return True
    now = now or datetime.now(UTC)
    created_at = session.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return now - created_at <= TEACHER_EDIT_WINDOW
