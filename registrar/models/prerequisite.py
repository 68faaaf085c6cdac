# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Prerequisite request and response models."""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import Field

from registrar.models.common import CamelModel


class UnmetReason(str, Enum):
    NOT_COMPLETED = "not_completed"
    GRADE_BELOW_MINIMUM = "grade_below_minimum"
    COURSE_MISSING = "course_missing"


class UnmetPrerequisite(CamelModel):
    """A prerequisite edge the student has not satisfied."""

    course_id: str
    course_code: str | None = None
    is_required: bool = True
    min_grade: Decimal | None = None
    best_grade: Decimal | None = None
    reason: UnmetReason

    @property
    def label(self) -> str:
        return self.course_code or self.course_id

    @property
    def code(self) -> str:
        prefix = "PrerequisiteUnmet" if self.is_required else "AdvisoryPrerequisiteUnmet"
        return f"{prefix}:{self.label}"


class PrerequisiteCreateRequest(CamelModel):
    """Request to add a prerequisite edge."""

    course_id: UUID
    prerequisite_course_id: UUID
    is_required: bool = True
    min_grade: Decimal | None = Field(None, ge=0, le=4)


class PrerequisiteResponse(CamelModel):
    """A prerequisite edge with the prerequisite's course code."""

    id: str
    course_id: str
    prerequisite_course_id: str
    prerequisite_code: str | None = None
    is_required: bool
    min_grade: Decimal | None = None


class PrerequisiteListResponse(CamelModel):
    course_id: str
    items: list[PrerequisiteResponse]
    total: int
