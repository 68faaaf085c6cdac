# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request, response and result models."""

from registrar.models.bulk import BatchItem, BatchItemResult, BatchResult, BulkEnrollRequest
from registrar.models.capacity import CapacitySnapshot
from registrar.models.common import CamelModel
from registrar.models.eligibility import EligibilityReason, EligibilityResult, ReasonCode
from registrar.models.enrollment import (
    BulkDropRequest,
    DropOutcome,
    DropRequest,
    EnrollmentListResponse,
    EnrollmentOutcome,
    EnrollmentResponse,
    EnrollRequest,
)
from registrar.models.prerequisite import (
    PrerequisiteCreateRequest,
    PrerequisiteListResponse,
    PrerequisiteResponse,
    UnmetPrerequisite,
    UnmetReason,
)
from registrar.models.results import (
    BulkDropResult,
    DropResult,
    EnrollmentResult,
    ProcessAllResult,
    PromotionOutcome,
    PromotionResult,
    SkippedEntry,
)
from registrar.models.waitlist import (
    WaitlistAddRequest,
    WaitlistEntryResponse,
    WaitlistListResponse,
    WaitlistResult,
)

__all__ = [
    "BatchItem",
    "BatchItemResult",
    "BatchResult",
    "BulkDropRequest",
    "BulkDropResult",
    "BulkEnrollRequest",
    "CamelModel",
    "CapacitySnapshot",
    "DropOutcome",
    "DropRequest",
    "DropResult",
    "EligibilityReason",
    "EligibilityResult",
    "EnrollRequest",
    "EnrollmentListResponse",
    "EnrollmentOutcome",
    "EnrollmentResponse",
    "EnrollmentResult",
    "PrerequisiteCreateRequest",
    "PrerequisiteListResponse",
    "PrerequisiteResponse",
    "ProcessAllResult",
    "PromotionOutcome",
    "PromotionResult",
    "ReasonCode",
    "SkippedEntry",
    "UnmetPrerequisite",
    "UnmetReason",
    "WaitlistAddRequest",
    "WaitlistEntryResponse",
    "WaitlistListResponse",
    "WaitlistResult",
]
