# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Operation results that combine enrollment and waitlist records.

EnrollmentResult distinguishes an active seat from a waitlist placement
through outcome and waitlisted; both are successes.
"""

from enum import Enum

from pydantic import Field

from registrar.models.capacity import CapacitySnapshot
from registrar.models.common import CamelModel
from registrar.models.eligibility import EligibilityReason
from registrar.models.enrollment import DropOutcome, EnrollmentOutcome, EnrollmentResponse
from registrar.models.waitlist import WaitlistEntryResponse


class PromotionOutcome(str, Enum):
    PROMOTED = "promoted"
    NO_SEAT = "no_seat"
    QUEUE_EMPTY = "queue_empty"


class SkippedEntry(CamelModel):
    """A waitlist entry removed during promotion because it is no longer eligible."""

    entry_id: str
    student_id: str
    position: int
    reasons: list[EligibilityReason]


class PromotionResult(CamelModel):
    """Outcome of a single promote-next walk."""

    course_id: str
    semester_id: str
    outcome: PromotionOutcome
    enrollment: EnrollmentResponse | None = None
    entry: WaitlistEntryResponse | None = None
    skipped: list[SkippedEntry] = Field(default_factory=list)

    @property
    def promoted(self) -> bool:
        return self.outcome == PromotionOutcome.PROMOTED


class ProcessAllResult(CamelModel):
    """Outcome of draining every waitlist with free seats."""

    results: list[PromotionResult]
    promoted_count: int
    skipped_count: int
    keys_processed: int


class EnrollmentResult(CamelModel):
    """Outcome of an enrollment request.

    Attributes:
        success: True when enrolled or waitlisted.
        outcome: enrolled, waitlisted or rejected.
        waitlisted: True when the student was queued instead of seated.
        waitlist_position: Assigned queue position when waitlisted.
        enrollment: The new Active enrollment when enrolled.
        waitlist_entry: The new entry when waitlisted.
        errors: Reasons for a rejection.
        warnings: Non-blocking notices (advisory prerequisites, credit load).
        promotions: Waitlist promotions made into free seats before this
            request was placed.
    """

    success: bool
    outcome: EnrollmentOutcome
    waitlisted: bool = False
    waitlist_position: int | None = None
    enrollment: EnrollmentResponse | None = None
    waitlist_entry: WaitlistEntryResponse | None = None
    errors: list[EligibilityReason] = Field(default_factory=list)
    warnings: list[EligibilityReason] = Field(default_factory=list)
    promotions: list[PromotionResult] = Field(default_factory=list)

    @property
    def error_codes(self) -> list[str]:
        return [error.code for error in self.errors]


class DropResult(CamelModel):
    """Outcome of a drop request.

    capacity is the seat usage after the drop and any promotion it caused.
    """

    success: bool
    outcome: DropOutcome
    enrollment_id: str
    message: str
    enrollment: EnrollmentResponse | None = None
    capacity: CapacitySnapshot | None = None
    promotion: PromotionResult | None = None


class BulkDropResult(CamelModel):
    items: list[DropResult]
    success_count: int
    failure_count: int
    total: int
