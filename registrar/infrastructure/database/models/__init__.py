# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models for the registrar database."""

from registrar.infrastructure.database.models.academic import (
    Course,
    CoursePrerequisite,
    RegistrationPeriod,
    Semester,
    Student,
)
from registrar.infrastructure.database.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from registrar.infrastructure.database.models.enrollment import (
    CourseEnrollment,
    EnrollmentStatus,
    EnrollmentType,
    WaitlistEntry,
    WaitlistRemovalReason,
)

__all__ = [
    # Base
    "Base",
    "SoftDeleteMixin",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Academic
    "Course",
    "CoursePrerequisite",
    "RegistrationPeriod",
    "Semester",
    "Student",
    # Enrollment
    "CourseEnrollment",
    "EnrollmentStatus",
    "EnrollmentType",
    "WaitlistEntry",
    "WaitlistRemovalReason",
]
