# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for database models.

Tests model definitions, table constraints, and helper methods.
"""

from datetime import datetime, timedelta, timezone

import pytest

from registrar.infrastructure.database.models import (
    Base,
    Course,
    CourseEnrollment,
    CoursePrerequisite,
    EnrollmentStatus,
    RegistrationPeriod,
    Semester,
    Student,
    WaitlistEntry,
    WaitlistRemovalReason,
)
from registrar.infrastructure.database.models.base import SoftDeleteMixin, TimestampMixin, new_id


class TestBase:
    """Test base model functionality."""

    def test_all_tables_registered(self):
        """Test that every table is part of the metadata."""
        assert set(Base.metadata.tables) == {
            "students",
            "semesters",
            "courses",
            "course_prerequisites",
            "registration_periods",
            "course_enrollments",
            "waitlist_entries",
        }

    def test_new_id_is_hyphenated_uuid(self):
        value = new_id()

        assert isinstance(value, str)
        assert len(value) == 36
        assert value.count("-") == 4

    def test_mixins(self):
        assert issubclass(Course, SoftDeleteMixin)
        assert issubclass(Student, TimestampMixin)


class TestCourse:
    """Test Course model."""

    def test_is_deleted(self):
        course = Course(code="CS101", title="Intro")

        assert course.is_deleted is False

        course.deleted_at = datetime.now(timezone.utc)

        assert course.is_deleted is True

    def test_max_students_nullable(self):
        assert Course.__table__.c.max_students.nullable is True


class TestCoursePrerequisite:
    """Test CoursePrerequisite model."""

    def test_edge_is_unique(self):
        constraint_names = {c.name for c in CoursePrerequisite.__table__.constraints}

        assert "uq_course_prerequisites_edge" in constraint_names
        assert "ck_course_prerequisites_no_self_loop" in constraint_names


class TestCourseEnrollment:
    """Test CourseEnrollment model."""

    def test_active_enrollment_index_is_partial_and_unique(self):
        """Test at most one active enrollment per student, course and semester."""
        index = next(
            i for i in CourseEnrollment.__table__.indexes if i.name == "uq_course_enrollments_active"
        )

        assert index.unique is True
        assert [c.name for c in index.columns] == ["student_id", "course_id", "semester_id"]
        assert index.dialect_options["postgresql"]["where"] is not None
        assert index.dialect_options["sqlite"]["where"] is not None

    def test_is_active(self):
        enrollment = CourseEnrollment(status=EnrollmentStatus.ACTIVE)

        assert enrollment.is_active is True

        enrollment.status = EnrollmentStatus.DROPPED

        assert enrollment.is_active is False

    def test_status_stored_as_value(self):
        column_type = CourseEnrollment.__table__.c.status.type

        assert column_type.enums == ["active", "completed", "dropped"]


class TestWaitlistEntry:
    """Test WaitlistEntry model."""

    def test_position_unique_per_course_and_semester(self):
        constraint = next(
            c
            for c in WaitlistEntry.__table__.constraints
            if c.name == "uq_waitlist_entries_position"
        )

        assert [c.name for c in constraint.columns] == ["course_id", "semester_id", "position"]

    def test_deactivate_keeps_position(self):
        entry = WaitlistEntry(position=3, is_active=True)

        entry.deactivate(WaitlistRemovalReason.WITHDRAWN)

        assert entry.is_active is False
        assert entry.position == 3
        assert entry.removal_reason == WaitlistRemovalReason.WITHDRAWN
        assert entry.removed_at is not None


class TestRegistrationPeriod:
    """Test RegistrationPeriod window checks."""

    @pytest.fixture
    def period(self):
        return RegistrationPeriod(
            name="Main",
            starts_at=datetime(2025, 8, 1, tzinfo=timezone.utc),
            ends_at=datetime(2025, 8, 15, tzinfo=timezone.utc),
            is_active=True,
        )

    def test_open_inside_window(self, period):
        assert period.is_open(datetime(2025, 8, 10, tzinfo=timezone.utc)) is True

    def test_bounds_are_inclusive(self, period):
        assert period.is_open(period.starts_at) is True
        assert period.is_open(period.ends_at) is True

    def test_closed_outside_window(self, period):
        assert period.is_open(period.ends_at + timedelta(seconds=1)) is False

    def test_naive_bounds_treated_as_utc(self, period):
        """Test that naive datetimes read back from SQLite compare as UTC."""
        period.starts_at = datetime(2025, 8, 1)
        period.ends_at = datetime(2025, 8, 15)

        assert period.is_open(datetime(2025, 8, 10, tzinfo=timezone.utc)) is True

    def test_inactive_period_is_closed(self, period):
        period.is_active = False

        assert period.is_open(datetime(2025, 8, 10, tzinfo=timezone.utc)) is False


class TestSemester:
    def test_table_name(self):
        assert Semester.__tablename__ == "semesters"
