"""
Session Models

A "session" is one declared unit of supplementary work (a replacement
hour, a homework-help hour...). Not to be confused with database or
login sessions.
"""

import datetime
import enum

from sqlalchemy import JSON, Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import ENUM
from sqlalchemy.orm import Mapped, mapped_column

from supchaissac.modules.shared import BaseModel


class SessionType(str, enum.Enum):
    """Kinds of supplementary work."""

    RCD = "RCD"  # short-duration class replacement
    DEVOIRS_FAITS = "DEVOIRS_FAITS"  # supervised homework help
    HSE = "HSE"  # effective overtime hour
    AUTRE = "AUTRE"  # anything else, described in free text


class SessionStatus(str, enum.Enum):
    """Workflow status of a declared session."""

    PENDING_REVIEW = "PENDING_REVIEW"
    PENDING_VALIDATION = "PENDING_VALIDATION"
    VALIDATED = "VALIDATED"
    PAID = "PAID"
    REJECTED = "REJECTED"


class TimeSlot(str, enum.Enum):
    """The eight one-hour slots of a school day."""

    M1 = "M1"
    M2 = "M2"
    M3 = "M3"
    M4 = "M4"
    S1 = "S1"
    S2 = "S2"
    S3 = "S3"
    S4 = "S4"

    @property
    def start_hour(self) -> int:
        """M1 starts at 8h, S1 at 13h."""
        base = 8 if self.value.startswith("M") else 13
        return base + int(self.value[1]) - 1


class GradeLevel(str, enum.Enum):
    """Grade of the pupils attending a homework-help session."""

    SIXIEME = "6e"
    CINQUIEME = "5e"
    QUATRIEME = "4e"
    TROISIEME = "3e"
    MIXTE = "mixte"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class TeachingSession(BaseModel):
    """
    Declared supplementary work session.

    Type-specific columns are only filled for the declared type:
    - RCD: class_name, replaced_teacher_*, subject
    - DEVOIRS_FAITS: grade_level, student_count, students_list
    - AUTRE: description

    original_type is set the first time a principal converts the type and
    is never overwritten afterwards.
    """

    __tablename__ = "sessions"

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    time_slot: Mapped[TimeSlot] = mapped_column(
        ENUM(TimeSlot, name="time_slot", create_type=True), nullable=False
    )
    type: Mapped[SessionType] = mapped_column(
        ENUM(SessionType, name="session_type", create_type=True), nullable=False
    )
    status: Mapped[SessionStatus] = mapped_column(
        ENUM(SessionStatus, name="session_status", create_type=True),
        nullable=False,
        default=SessionStatus.PENDING_REVIEW,
    )

    # Set by the server from the logged-in teacher, never from the request body
    # ON DELETE RESTRICT: teachers with declared sessions cannot be deleted
    teacher_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    teacher_name: Mapped[str] = mapped_column(String(200), nullable=False)

    # RCD
    class_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    replaced_teacher_prefix: Mapped[str | None] = mapped_column(String(10), nullable=True)
    replaced_teacher_last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    replaced_teacher_first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    subject: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # DEVOIRS_FAITS
    grade_level: Mapped[GradeLevel | None] = mapped_column(
        ENUM(GradeLevel, name="grade_level", create_type=True, values_callable=_enum_values),
        nullable=True,
    )
    student_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # [{"last_name": ..., "first_name": ..., "class_name": ...}, ...]
    students_list: Mapped[list | None] = mapped_column(JSON, nullable=True)

    # AUTRE
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Workflow comments
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    review_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    validation_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    original_type: Mapped[SessionType | None] = mapped_column(
        ENUM(SessionType, name="session_type", create_type=False), nullable=True
    )

    updated_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_sessions_status", "status"),
        Index("ix_sessions_date", "date"),
        Index("ix_sessions_type_status_date", "type", "status", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<TeachingSession(id={self.id}, type={self.type.value}, "
            f"status={self.status.value}, date={self.date})>"
        )

    @property
    def declared_type(self) -> SessionType:
        """Type chosen by the teacher, before any principal conversion."""
        return self.original_type or self.type
