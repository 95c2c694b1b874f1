"""
Fixtures for session workflow tests.
"""

from datetime import UTC, date, datetime
from unittest.mock import MagicMock

import pytest

from supchaissac.modules.sessions.models import (
    SessionStatus,
    SessionType,
    TeachingSession,
    TimeSlot,
)

# A Monday outside every holiday period
SCHOOL_DAY = date(2025, 3, 10)


def build_session(
    *,
    session_id: int = 1,
    teacher_id: int = 10,
    status: SessionStatus = SessionStatus.PENDING_REVIEW,
    session_type: SessionType = SessionType.RCD,
    created_at: datetime | None = None,
    **fields,
):
    """A session mock with every column set, RCD fields filled by default."""
    session = MagicMock(spec=TeachingSession)
    session.id = session_id
    session.date = SCHOOL_DAY
    session.time_slot = TimeSlot.M2
    session.type = session_type
    session.status = status
    session.teacher_id = teacher_id
    session.teacher_name = "Jean Dupont"
    session.class_name = None
    session.replaced_teacher_prefix = None
    session.replaced_teacher_last_name = None
    session.replaced_teacher_first_name = None
    session.subject = None
    session.grade_level = None
    session.student_count = None
    session.students_list = None
    session.description = None
    session.comment = None
    session.review_comments = None
    session.validation_comments = None
    session.rejection_reason = None
    session.original_type = None
    session.updated_by = teacher_id
    session.created_at = created_at or datetime.now(UTC)
    session.updated_at = session.created_at

    if session_type == SessionType.RCD:
        session.class_name = "6A"
        session.replaced_teacher_prefix = "M."
        session.replaced_teacher_last_name = "MARTIN"
        session.subject = "Mathématiques"
    elif session_type == SessionType.DEVOIRS_FAITS:
        session.student_count = 12
    elif session_type == SessionType.AUTRE:
        session.description = "Sortie pédagogique"

    for field, value in fields.items():
        setattr(session, field, value)
    return session


@pytest.fixture
def make_session():
    return build_session
