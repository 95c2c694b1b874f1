"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-09-01 09:00:00.000000

This migration creates:
1. The enum types (roles, civility, session type/status, time slot, grade level)
2. users, then sessions which references it
3. attachments (cascading with their session), students and hour_quotas
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ENUMS = {
    "user_role": ("TEACHER", "SECRETARY", "PRINCIPAL", "ADMIN"),
    "civility": ("M.", "Mme"),
    "session_type": ("RCD", "DEVOIRS_FAITS", "HSE", "AUTRE"),
    "session_status": (
        "PENDING_REVIEW",
        "PENDING_VALIDATION",
        "VALIDATED",
        "PAID",
        "REJECTED",
    ),
    "time_slot": ("M1", "M2", "M3", "M4", "S1", "S2", "S3", "S4"),
    "grade_level": ("6e", "5e", "4e", "3e", "mixte"),
}


def _enum(name: str) -> postgresql.ENUM:
    # Created once in upgrade(), never implicitly by create_table
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create all tables of the initial schema."""
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        # Authentication
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        # Profile
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("civility", _enum("civility"), nullable=True),
        sa.Column("subject", sa.String(length=100), nullable=True),
        sa.Column("initials", sa.String(length=10), nullable=True),
        sa.Column("signature", sa.Text(), nullable=True),
        sa.Column("role", _enum("user_role"), nullable=False, server_default="TEACHER"),
        # PACTE contract
        sa.Column("in_pacte", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("pacte_hours_target", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pacte_hours_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pacte_hours_df", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pacte_hours_rcd", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pacte_hours_completed_df", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pacte_hours_completed_rcd", sa.Integer(), nullable=False, server_default="0"),
        # Activation
        sa.Column("is_activated", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("activation_token", sa.String(length=64), nullable=True),
        sa.Column("activation_token_expiry", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)
    op.create_index(
        op.f("ix_users_activation_token"), "users", ["activation_token"], unique=True
    )

    op.create_table(
        "sessions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time_slot", _enum("time_slot"), nullable=False),
        sa.Column("type", _enum("session_type"), nullable=False),
        sa.Column("status", _enum("session_status"), nullable=False),
        sa.Column("teacher_id", sa.Integer(), nullable=False),
        sa.Column("teacher_name", sa.String(length=200), nullable=False),
        # RCD
        sa.Column("class_name", sa.String(length=50), nullable=True),
        sa.Column("replaced_teacher_prefix", sa.String(length=10), nullable=True),
        sa.Column("replaced_teacher_last_name", sa.String(length=100), nullable=True),
        sa.Column("replaced_teacher_first_name", sa.String(length=100), nullable=True),
        sa.Column("subject", sa.String(length=100), nullable=True),
        # DEVOIRS_FAITS
        sa.Column("grade_level", _enum("grade_level"), nullable=True),
        sa.Column("student_count", sa.Integer(), nullable=True),
        sa.Column("students_list", sa.JSON(), nullable=True),
        # AUTRE
        sa.Column("description", sa.Text(), nullable=True),
        # Workflow
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("review_comments", sa.Text(), nullable=True),
        sa.Column("validation_comments", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("original_type", _enum("session_type"), nullable=True),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["teacher_id"], ["users.id"], name="fk_sessions_teacher_id", ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(
            ["updated_by"], ["users.id"], name="fk_sessions_updated_by", ondelete="SET NULL"
        ),
    )
    op.create_index(op.f("ix_sessions_teacher_id"), "sessions", ["teacher_id"], unique=False)
    op.create_index("ix_sessions_status", "sessions", ["status"], unique=False)
    op.create_index("ix_sessions_date", "sessions", ["date"], unique=False)
    op.create_index(
        "ix_sessions_type_status_date", "sessions", ["type", "status", "date"], unique=False
    )

    op.create_table(
        "attachments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        sa.Column("session_id", sa.Integer(), nullable=False),
        sa.Column("file_key", sa.String(length=500), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False),
        sa.Column("url", sa.String(length=1000), nullable=False),
        sa.Column("uploaded_by", sa.Integer(), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default="false"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["session_id"], ["sessions.id"], name="fk_attachments_session_id", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["uploaded_by"], ["users.id"], name="fk_attachments_uploaded_by", ondelete="SET NULL"
        ),
        sa.UniqueConstraint("file_key", name="uq_attachments_file_key"),
    )
    op.create_index(
        op.f("ix_attachments_session_id"), "attachments", ["session_id"], unique=False
    )

    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("birth_date", sa.String(length=20), nullable=True),
        sa.Column("usage_first_name", sa.String(length=100), nullable=True),
        sa.Column("gender", sa.String(length=10), nullable=True),
        sa.Column("class_name", sa.String(length=50), nullable=False),
        sa.Column("accompaniment_project", sa.String(length=100), nullable=True),
        sa.Column("school_year", sa.String(length=9), nullable=False),
        sa.Column("imported_by", sa.String(length=200), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_students_school_year_class", "students", ["school_year", "class_name"], unique=False
    )
    op.create_index(
        "ix_students_school_year_last_name",
        "students",
        ["school_year", "last_name"],
        unique=False,
    )

    op.create_table(
        "hour_quotas",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        sa.Column("type", _enum("session_type"), nullable=False),
        sa.Column("budget_hours", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("school_year", sa.String(length=9), nullable=False),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["updated_by"], ["users.id"], name="fk_hour_quotas_updated_by", ondelete="SET NULL"
        ),
        sa.UniqueConstraint("type", "school_year", name="uq_hour_quotas_type_year"),
    )
    op.create_index(
        op.f("ix_hour_quotas_school_year"), "hour_quotas", ["school_year"], unique=False
    )


def downgrade() -> None:
    """Drop everything in reverse dependency order."""
    op.drop_index(op.f("ix_hour_quotas_school_year"), table_name="hour_quotas")
    op.drop_table("hour_quotas")

    op.drop_index("ix_students_school_year_last_name", table_name="students")
    op.drop_index("ix_students_school_year_class", table_name="students")
    op.drop_table("students")

    op.drop_index(op.f("ix_attachments_session_id"), table_name="attachments")
    op.drop_table("attachments")

    op.drop_index("ix_sessions_type_status_date", table_name="sessions")
    op.drop_index("ix_sessions_date", table_name="sessions")
    op.drop_index("ix_sessions_status", table_name="sessions")
    op.drop_index(op.f("ix_sessions_teacher_id"), table_name="sessions")
    op.drop_table("sessions")

    op.drop_index(op.f("ix_users_activation_token"), table_name="users")
    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    for name in reversed(ENUMS):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
