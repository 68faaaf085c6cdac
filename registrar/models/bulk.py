# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Bulk enrollment request and result models."""

from uuid import UUID

from pydantic import Field

from registrar.models.common import CamelModel
from registrar.models.eligibility import EligibilityReason
from registrar.models.enrollment import EnrollmentOutcome


class BatchItem(CamelModel):
    """One (student, course, semester) request inside a batch."""

    student_id: UUID
    course_id: UUID
    semester_id: UUID
    override: bool = False
    allow_waitlist: bool = True


class BulkEnrollRequest(CamelModel):
    requests: list[BatchItem] = Field(..., min_length=1, max_length=500)
    requested_by: str = Field(..., min_length=1, max_length=100)


class BatchItemResult(CamelModel):
    """Per-item outcome. index is the item's zero-based position in the request."""

    index: int
    student_id: str
    course_id: str
    semester_id: str
    success: bool
    outcome: EnrollmentOutcome
    waitlisted: bool = False
    waitlist_position: int | None = None
    enrollment_id: str | None = None
    errors: list[EligibilityReason] = Field(default_factory=list)
    warnings: list[EligibilityReason] = Field(default_factory=list)


class BatchResult(CamelModel):
    items: list[BatchItemResult]
    success_count: int
    failure_count: int
    total: int
