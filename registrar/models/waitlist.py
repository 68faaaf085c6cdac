# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Waitlist request and record models."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from registrar.infrastructure.database.models.enrollment import WaitlistRemovalReason
from registrar.models.common import CamelModel
from registrar.models.eligibility import EligibilityReason


class WaitlistAddRequest(CamelModel):
    """Request to queue a student for a course."""

    student_id: UUID
    course_id: UUID
    semester_id: UUID
    requested_by: str | None = Field(None, max_length=100)


class WaitlistEntryResponse(CamelModel):
    id: str
    student_id: str
    course_id: str
    semester_id: str
    position: int
    is_active: bool
    added_at: datetime
    removed_at: datetime | None = None
    removal_reason: WaitlistRemovalReason | None = None
    requested_by: str | None = None


class WaitlistResult(CamelModel):
    """Outcome of a waitlist add or withdrawal.

    A refused add (already queued, ineligible) has success False and the
    reasons in errors. Nothing is written in that case.
    """

    success: bool
    entry: WaitlistEntryResponse | None = None
    position: int | None = None
    errors: list[EligibilityReason] = Field(default_factory=list)


class WaitlistListResponse(CamelModel):
    course_id: str
    semester_id: str
    entries: list[WaitlistEntryResponse]
    total: int
