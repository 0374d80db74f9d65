"""initial schema: accounts, scholarships, applications and rate limits

Revision ID: b7c1d2e3f4a5
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates every table of the scholarship API. Notable constraints:
1. applications carries a partial unique index so a student can hold at
   most one application that is not declined, even under concurrent
   submissions
2. rate_limits is keyed by api_key and indexed on window_start for the
   hourly eviction sweep
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "b7c1d2e3f4a5"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

staff_status = postgresql.ENUM("pending", "approved", "declined", name="staff_status")
scholarship_status = postgresql.ENUM("active", "archive", name="scholarship_status")
application_status = postgresql.ENUM("pending", "approved", "declined", name="application_status")


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=False), primary_key=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create all tables, enum types and indexes."""
    bind = op.get_bind()
    staff_status.create(bind, checkfirst=True)
    scholarship_status.create(bind, checkfirst=True)
    application_status.create(bind, checkfirst=True)

    op.create_table(
        "staff_accounts",
        *_base_columns(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("department", sa.String(150), nullable=True),
        sa.Column("google_id", sa.String(255), nullable=True, unique=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("api_key", sa.String(128), nullable=False),
        sa.Column("csrf_token", sa.String(128), nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM(name="staff_status", create_type=False),
            nullable=False,
            server_default="pending",
        ),
    )
    op.create_index("ix_staff_accounts_email", "staff_accounts", ["email"], unique=True)
    op.create_index("ix_staff_accounts_api_key", "staff_accounts", ["api_key"], unique=True)

    op.create_table(
        "students",
        *_base_columns(),
        sa.Column("student_number", sa.String(9), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("middle_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=False),
        sa.Column("course", sa.String(50), nullable=False),
        sa.Column("year_level", sa.String(20), nullable=False),
        sa.Column("complete_address", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("picture", sa.String(500), nullable=True),
        sa.Column("school_id_image", sa.String(500), nullable=True),
        sa.Column("certificate_of_indigency", sa.String(500), nullable=True),
        sa.Column("certificate_of_registration", sa.String(500), nullable=True),
        sa.Column("api_key", sa.String(128), nullable=False),
        sa.Column("csrf_token", sa.String(128), nullable=True),
        sa.Column("login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_login_attempt", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reset_token_hash", sa.String(64), nullable=True),
        sa.Column("reset_token_expires_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_students_student_number", "students", ["student_number"], unique=True)
    op.create_index("ix_students_email", "students", ["email"], unique=True)
    op.create_index("ix_students_api_key", "students", ["api_key"], unique=True)
    op.create_index("ix_students_course", "students", ["course"])
    op.create_index("ix_students_reset_token_hash", "students", ["reset_token_hash"])

    op.create_table(
        "courses",
        *_base_columns(),
        sa.Column("course_code", sa.String(50), nullable=False),
        sa.Column("course_name", sa.String(200), nullable=False),
    )
    op.create_index("ix_courses_course_code", "courses", ["course_code"], unique=True)

    op.create_table(
        "scholarship_forms",
        *_base_columns(),
        sa.Column("name", sa.String(200), nullable=False, unique=True),
        sa.Column("template_path", sa.String(500), nullable=True),
    )

    op.create_table(
        "scholarships",
        *_base_columns(),
        sa.Column("title", sa.String(200), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM(name="scholarship_status", create_type=False),
            nullable=False,
            server_default="active",
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
    )

    op.create_table(
        "scholarship_courses",
        sa.Column(
            "scholarship_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("scholarships.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "course_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "scholarship_form_requirements",
        sa.Column(
            "scholarship_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("scholarships.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "form_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("scholarship_forms.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "applications",
        *_base_columns(),
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "scholarship_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("scholarships.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "status",
            postgresql.ENUM(name="application_status", create_type=False),
            nullable=False,
            server_default="pending",
        ),
        sa.Column(
            "applied_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_applications_student_id", "applications", ["student_id"])
    op.create_index("ix_applications_scholarship_id", "applications", ["scholarship_id"])
    op.create_index(
        "ix_applications_status_applied_at",
        "applications",
        ["status", "applied_at"],
    )
    # At most one non-declined application per student
    op.create_index(
        "uq_applications_one_active_per_student",
        "applications",
        ["student_id"],
        unique=True,
        postgresql_where=sa.text("status <> 'declined'"),
    )

    op.create_table(
        "application_forms",
        *_base_columns(),
        sa.Column(
            "application_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("form_name", sa.String(200), nullable=False),
        sa.Column("file_path", sa.String(500), nullable=False),
        sa.Column(
            "uploaded_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_application_forms_application_id",
        "application_forms",
        ["application_id"],
    )

    op.create_table(
        "rate_limits",
        *_base_columns(),
        sa.Column("api_key", sa.String(128), nullable=False, unique=True),
        sa.Column("request_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("window_start", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_rate_limits_window_start", "rate_limits", ["window_start"])


def downgrade() -> None:
    """Drop all tables and enum types."""
    op.drop_table("rate_limits")
    op.drop_table("application_forms")
    op.drop_index("uq_applications_one_active_per_student", table_name="applications")
    op.drop_table("applications")
    op.drop_table("scholarship_form_requirements")
    op.drop_table("scholarship_courses")
    op.drop_table("scholarships")
    op.drop_table("scholarship_forms")
    op.drop_table("courses")
    op.drop_table("students")
    op.drop_table("staff_accounts")

    bind = op.get_bind()
    application_status.drop(bind, checkfirst=True)
    scholarship_status.drop(bind, checkfirst=True)
    staff_status.drop(bind, checkfirst=True)
