# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial enrollment schema.

Revision ID: 001_enrollment_initial
Revises: None
Create Date: 2025-09-01

Creates the catalogue tables read by the engine (students, semesters,
courses, prerequisites, registration periods) and the two tables it owns
(course_enrollments, waitlist_entries) with their partial unique indexes.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_enrollment_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        server_default=sa.text("gen_random_uuid()"),
        primary_key=True,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def _fk(column: str, table: str, nullable: bool = False, ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(
        column,
        postgresql.UUID(as_uuid=False),
        sa.ForeignKey(f"{table}.id", ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    """Create enrollment tables."""
    # ==========================================================================
    # 1. students
    # ==========================================================================
    op.create_table(
        "students",
        _id_column(),
        sa.Column("student_number", sa.String(30), nullable=False, unique=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("gpa", sa.Numeric(3, 2), nullable=True),
        sa.Column("passed_hours", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("gpa IS NULL OR (gpa >= 0 AND gpa <= 4)", name="ck_students_gpa_range"),
        sa.CheckConstraint("passed_hours >= 0", name="ck_students_passed_hours"),
    )

    # ==========================================================================
    # 2. semesters
    # ==========================================================================
    op.create_table(
        "semesters",
        _id_column(),
        sa.Column("code", sa.String(20), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    # ==========================================================================
    # 3. courses
    # ==========================================================================
    op.create_table(
        "courses",
        _id_column(),
        sa.Column("code", sa.String(20), nullable=False, unique=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("credits", sa.Integer, nullable=False, server_default="3"),
        sa.Column("max_students", sa.Integer, nullable=True),
        sa.Column("min_gpa", sa.Numeric(3, 2), nullable=True),
        sa.Column("min_passed_hours", sa.Integer, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        _fk("semester_id", "semesters", nullable=True, ondelete="SET NULL"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("credits >= 0", name="ck_courses_credits"),
    )
    op.create_index("ix_courses_semester_id", "courses", ["semester_id"])

    # ==========================================================================
    # 4. course_prerequisites
    # ==========================================================================
    op.create_table(
        "course_prerequisites",
        _id_column(),
        _fk("course_id", "courses"),
        _fk("prerequisite_course_id", "courses"),
        sa.Column("is_required", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("min_grade", sa.Numeric(3, 2), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "course_id", "prerequisite_course_id", name="uq_course_prerequisites_edge"
        ),
        sa.CheckConstraint(
            "course_id <> prerequisite_course_id",
            name="ck_course_prerequisites_no_self_loop",
        ),
        sa.CheckConstraint(
            "min_grade IS NULL OR (min_grade >= 0 AND min_grade <= 4)",
            name="ck_course_prerequisites_min_grade",
        ),
    )
    op.create_index("ix_course_prerequisites_course_id", "course_prerequisites", ["course_id"])
    op.create_index(
        "ix_course_prerequisites_prerequisite_course_id",
        "course_prerequisites",
        ["prerequisite_course_id"],
    )

    # ==========================================================================
    # 5. registration_periods
    # ==========================================================================
    op.create_table(
        "registration_periods",
        _id_column(),
        _fk("semester_id", "semesters"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("ends_at >= starts_at", name="ck_registration_periods_range"),
    )
    op.create_index(
        "ix_registration_periods_semester_id", "registration_periods", ["semester_id"]
    )

    # ==========================================================================
    # 6. course_enrollments
    # ==========================================================================
    op.create_table(
        "course_enrollments",
        _id_column(),
        _fk("student_id", "students"),
        _fk("course_id", "courses"),
        _fk("semester_id", "semesters"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("enrollment_type", sa.String(20), nullable=False, server_default="regular"),
        sa.Column("grade_points", sa.Numeric(3, 2), nullable=True),
        sa.Column(
            "enrolled_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("dropped_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("drop_reason", sa.String(500), nullable=True),
        sa.Column("requested_by", sa.String(100), nullable=True),
        sa.Column("dropped_by", sa.String(100), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('active', 'completed', 'dropped')",
            name="valid_enrollment_status",
        ),
        sa.CheckConstraint(
            "enrollment_type IN ('regular', 'waitlist_promoted', 'override')",
            name="valid_enrollment_type",
        ),
    )
    op.create_index("ix_course_enrollments_student_id", "course_enrollments", ["student_id"])
    op.create_index(
        "ix_course_enrollments_course_semester",
        "course_enrollments",
        ["course_id", "semester_id", "status"],
    )
    op.create_index(
        "uq_course_enrollments_active",
        "course_enrollments",
        ["student_id", "course_id", "semester_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )

    # ==========================================================================
    # 7. waitlist_entries
    # ==========================================================================
    op.create_table(
        "waitlist_entries",
        _id_column(),
        _fk("student_id", "students"),
        _fk("course_id", "courses"),
        _fk("semester_id", "semesters"),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "added_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("removed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("removal_reason", sa.String(20), nullable=True),
        sa.Column("requested_by", sa.String(100), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "course_id", "semester_id", "position", name="uq_waitlist_entries_position"
        ),
        sa.CheckConstraint(
            "removal_reason IS NULL OR removal_reason IN ('promoted', 'ineligible', 'withdrawn')",
            name="valid_waitlist_removal_reason",
        ),
    )
    op.create_index("ix_waitlist_entries_student_id", "waitlist_entries", ["student_id"])
    op.create_index(
        "uq_waitlist_entries_active_student",
        "waitlist_entries",
        ["student_id", "course_id", "semester_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )


def downgrade() -> None:
    """Drop enrollment tables."""
    op.drop_table("waitlist_entries")
    op.drop_table("course_enrollments")
    op.drop_table("registration_periods")
    op.drop_table("course_prerequisites")
    op.drop_table("courses")
    op.drop_table("semesters")
    op.drop_table("students")
