# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Eligibility result models."""

from pydantic import Field

from registrar.models.common import CamelModel


class ReasonCode:
    """Machine-readable eligibility reason codes."""

    STUDENT_NOT_FOUND = "StudentNotFound"
    STUDENT_INACTIVE = "StudentInactive"
    COURSE_NOT_FOUND = "CourseNotFound"
    COURSE_INACTIVE = "CourseInactive"
    SEMESTER_NOT_FOUND = "SemesterNotFound"
    COURSE_NOT_OFFERED = "CourseNotOffered"
    DUPLICATE_ENROLLMENT = "DuplicateEnrollment"
    MIN_GPA_NOT_MET = "MinGpaNotMet"
    MIN_PASSED_HOURS_NOT_MET = "MinPassedHoursNotMet"
    PREREQUISITE_UNMET = "PrerequisiteUnmet"
    REGISTRATION_CLOSED = "RegistrationClosed"
    ADVISORY_PREREQUISITE_UNMET = "AdvisoryPrerequisiteUnmet"
    CREDIT_LIMIT_EXCEEDED = "CreditLimitExceeded"
    ALREADY_WAITLISTED = "AlreadyWaitlisted"
    CAPACITY_EXHAUSTED = "CapacityExhausted"
    SEAT_AVAILABLE = "SeatAvailable"


class EligibilityReason(CamelModel):
    """A single failed check or warning."""

    code: str = Field(description="Machine-readable code, e.g. PrerequisiteUnmet:CS101")
    message: str = Field(description="Human-readable explanation")


class EligibilityResult(CamelModel):
    """Outcome of an eligibility evaluation.

    allowed is True exactly when reasons is empty. Warnings never block.
    """

    allowed: bool
    reasons: list[EligibilityReason] = Field(default_factory=list)
    warnings: list[EligibilityReason] = Field(default_factory=list)

    @property
    def codes(self) -> list[str]:
        return [reason.code for reason in self.reasons]

    @property
    def warning_codes(self) -> list[str]:
        return [warning.code for warning in self.warnings]
