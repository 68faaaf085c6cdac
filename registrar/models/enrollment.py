# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request and record models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import Field

from registrar.infrastructure.database.models.enrollment import (
    EnrollmentStatus,
    EnrollmentType,
)
from registrar.models.common import CamelModel


class EnrollmentOutcome(str, Enum):
    ENROLLED = "enrolled"
    WAITLISTED = "waitlisted"
    REJECTED = "rejected"


class DropOutcome(str, Enum):
    DROPPED = "dropped"
    ALREADY_FINALIZED = "already_finalized"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class EnrollRequest(CamelModel):
    """Request to enroll a student in a course for a semester."""

    student_id: UUID
    course_id: UUID
    semester_id: UUID
    requested_by: str = Field(..., min_length=1, max_length=100)
    override: bool = Field(
        False,
        description="Administrative override of standing, prerequisite and window checks",
    )
    allow_waitlist: bool = Field(True, description="Queue the student when no seat is free")


class DropRequest(CamelModel):
    """Request to drop an enrollment."""

    enrollment_id: UUID
    reason: str = Field(..., min_length=1, max_length=500)
    requested_by: str = Field(..., min_length=1, max_length=100)


class BulkDropRequest(CamelModel):
    """Request to drop several enrollments independently."""

    enrollment_ids: list[UUID] = Field(..., min_length=1, max_length=500)
    reason: str = Field(..., min_length=1, max_length=500)
    requested_by: str = Field(..., min_length=1, max_length=100)


class EnrollmentResponse(CamelModel):
    """A course enrollment row."""

    id: str
    student_id: str
    course_id: str
    semester_id: str
    status: EnrollmentStatus
    enrollment_type: EnrollmentType
    grade_points: Decimal | None = None
    enrolled_at: datetime
    dropped_at: datetime | None = None
    drop_reason: str | None = None
    requested_by: str | None = None
    dropped_by: str | None = None


class EnrollmentListResponse(CamelModel):
    items: list[EnrollmentResponse]
    total: int
