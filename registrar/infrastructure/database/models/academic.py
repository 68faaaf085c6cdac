# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic catalogue models: students, semesters, courses, prerequisites.

These tables are owned by the catalogue and grading subsystems. The
enrollment engine reads them and writes only prerequisite edges.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from registrar.infrastructure.database.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from registrar.utils.datetime import is_within


class Student(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student and the scholastic standing the engine checks against."""

    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint("gpa IS NULL OR (gpa >= 0 AND gpa <= 4)", name="ck_students_gpa_range"),
        CheckConstraint("passed_hours >= 0", name="ck_students_passed_hours"),
    )

    student_number: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    gpa: Mapped[Decimal | None] = mapped_column(Numeric(3, 2), nullable=True)
    passed_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Semester(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An academic term, e.g. 2025-FALL."""

    __tablename__ = "semesters"

    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Course(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """A course offering.

    max_students may be NULL, in which case the configured default capacity
    applies. A course with semester_id set is only offered in that semester.
    """

    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_courses_credits"),
    )

    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    max_students: Mapped[int | None] = mapped_column(Integer, nullable=True)
    min_gpa: Mapped[Decimal | None] = mapped_column(Numeric(3, 2), nullable=True)
    min_passed_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    semester_id: Mapped[str | None] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("semesters.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )


class CoursePrerequisite(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Directed edge: course_id requires prerequisite_course_id.

    min_grade is on the 0.00-4.00 grade-point scale. Advisory edges
    (is_required False) produce warnings only.
    """

    __tablename__ = "course_prerequisites"
    __table_args__ = (
        UniqueConstraint(
            "course_id", "prerequisite_course_id", name="uq_course_prerequisites_edge"
        ),
        CheckConstraint(
            "course_id <> prerequisite_course_id",
            name="ck_course_prerequisites_no_self_loop",
        ),
        CheckConstraint(
            "min_grade IS NULL OR (min_grade >= 0 AND min_grade <= 4)",
            name="ck_course_prerequisites_min_grade",
        ),
    )

    course_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    prerequisite_course_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    min_grade: Mapped[Decimal | None] = mapped_column(Numeric(3, 2), nullable=True)


class RegistrationPeriod(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A window during which registration for a semester is open."""

    __tablename__ = "registration_periods"
    __table_args__ = (
        CheckConstraint("ends_at >= starts_at", name="ck_registration_periods_range"),
    )

    semester_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("semesters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ends_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def is_open(self, moment: datetime) -> bool:
        """Check whether this period is active and covers a moment (inclusive)."""
        return self.is_active and is_within(moment, self.starts_at, self.ends_at)
