# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Eligibility evaluation for course enrollment.

This module provides the EligibilityEvaluator class, which combines:
- Student, course and semester existence and activity
- The duplicate active enrollment guard
- Minimum GPA and passed hours
- Direct prerequisites
- The semester's registration window
- A non-blocking credit load check

All checks run and all failures are reported together. The evaluator is
read-only and never raises for an ineligible student; the answer is data.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.config.settings import Settings, get_settings
from registrar.domains.eligibility.registration_window import (
    DatabaseRegistrationWindow,
    RegistrationWindow,
)
from registrar.domains.prerequisite.service import PrerequisiteGraph
from registrar.infrastructure.database.models import (
    Course,
    CourseEnrollment,
    EnrollmentStatus,
    Semester,
    Student,
)
from registrar.models.eligibility import EligibilityReason, EligibilityResult, ReasonCode
from registrar.models.prerequisite import UnmetPrerequisite, UnmetReason
from registrar.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class EligibilityEvaluator:
    """Decides whether a student may take a course in a semester.

    Attributes:
        db: Async database session.
        prerequisites: Prerequisite graph used for check 5.
        registration_window: Collaborator answering whether registration is open.
        settings: Application settings (credit limit tiers).
    """

    def __init__(
        self,
        db: AsyncSession,
        prerequisites: PrerequisiteGraph | None = None,
        registration_window: RegistrationWindow | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize eligibility evaluator.

        Args:
            db: Async database session.
            prerequisites: Prerequisite graph. Defaults to one on the same session.
            registration_window: Window collaborator. Defaults to registration periods.
            settings: Application settings. Defaults to get_settings().
        """
        self.db = db
        self.prerequisites = prerequisites or PrerequisiteGraph(db)
        self.registration_window = registration_window or DatabaseRegistrationWindow(db)
        self.settings = settings or get_settings()

    async def evaluate(
        self,
        student_id: str,
        course_id: str,
        semester_id: str,
        *,
        now: datetime | None = None,
        check_registration_window: bool = True,
        override: bool = False,
    ) -> EligibilityResult:
        """Evaluate every enrollment rule for a student, course and semester.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.
            semester_id: Semester identifier.
            now: Moment to check the registration window against.
            check_registration_window: False to skip the window check
                (waitlist promotion).
            override: Administrative override. Waives standing, prerequisite
                and window checks but not existence, activity or duplicates.

        Returns:
            EligibilityResult with every failed check in reasons.
        """
        reasons: list[EligibilityReason] = []
        warnings: list[EligibilityReason] = []

        student = await self._get_student(student_id)
        course = await self._get_course(course_id)
        semester = await self.db.get(Semester, semester_id)

        if student is None:
            reasons.append(_reason(ReasonCode.STUDENT_NOT_FOUND, f"Student {student_id} not found"))
        elif not student.is_active:
            reasons.append(
                _reason(ReasonCode.STUDENT_INACTIVE, f"Student {student.student_number} is inactive")
            )

        if course is None:
            reasons.append(_reason(ReasonCode.COURSE_NOT_FOUND, f"Course {course_id} not found"))
        elif not course.is_active:
            reasons.append(_reason(ReasonCode.COURSE_INACTIVE, f"Course {course.code} is inactive"))

        if semester is None:
            reasons.append(
                _reason(ReasonCode.SEMESTER_NOT_FOUND, f"Semester {semester_id} not found")
            )
        elif course is not None and course.semester_id not in (None, semester_id):
            reasons.append(
                _reason(
                    ReasonCode.COURSE_NOT_OFFERED,
                    f"Course {course.code} is not offered in semester {semester.code}",
                )
            )

        if await self._has_active_enrollment(student_id, course_id, semester_id):
            reasons.append(
                _reason(
                    ReasonCode.DUPLICATE_ENROLLMENT,
                    "Student already holds an active enrollment for this course and semester",
                )
            )

        if student is not None and course is not None and not override:
            reasons.extend(self._check_standing(student, course))

        if student is not None and course is not None:
            satisfied, unmet = await self.prerequisites.is_satisfied(student_id, course_id)
            for item in unmet:
                message = _describe_unmet(item)
                if item.is_required and not override:
                    reasons.append(_reason(item.code, message))
                elif not item.is_required:
                    warnings.append(_reason(item.code, message))

        if semester is not None and check_registration_window and not override:
            moment = now or utc_now()
            if not await self.registration_window.is_open(semester_id, moment):
                reasons.append(
                    _reason(
                        ReasonCode.REGISTRATION_CLOSED,
                        f"Registration for semester {semester.code} is closed",
                    )
                )

        if student is not None and course is not None:
            warning = await self._check_credit_load(student, course, semester_id)
            if warning is not None:
                warnings.append(warning)

        result = EligibilityResult(allowed=not reasons, reasons=reasons, warnings=warnings)

        if not result.allowed:
            logger.debug(
                "Eligibility denied: student=%s, course=%s, semester=%s, reasons=%s",
                student_id,
                course_id,
                semester_id,
                ",".join(result.codes),
            )

        return result

    def _check_standing(self, student: Student, course: Course) -> list[EligibilityReason]:
        reasons: list[EligibilityReason] = []

        if course.min_gpa is not None:
            gpa = Decimal(student.gpa) if student.gpa is not None else Decimal("0")
            if gpa < Decimal(course.min_gpa):
                reasons.append(
                    _reason(
                        ReasonCode.MIN_GPA_NOT_MET,
                        f"GPA {gpa:.2f} is below the {Decimal(course.min_gpa):.2f} "
                        f"required for {course.code}",
                    )
                )

        if course.min_passed_hours is not None and student.passed_hours < course.min_passed_hours:
            reasons.append(
                _reason(
                    ReasonCode.MIN_PASSED_HOURS_NOT_MET,
                    f"{student.passed_hours} passed hours is below the "
                    f"{course.min_passed_hours} required for {course.code}",
                )
            )

        return reasons

    async def _check_credit_load(
        self,
        student: Student,
        course: Course,
        semester_id: str,
    ) -> EligibilityReason | None:
        """Warn when the course would push the student past their credit ceiling."""
        query = (
            select(func.coalesce(func.sum(Course.credits), 0))
            .select_from(CourseEnrollment)
            .join(Course, Course.id == CourseEnrollment.course_id)
            .where(
                CourseEnrollment.student_id == student.id,
                CourseEnrollment.semester_id == semester_id,
                CourseEnrollment.status == EnrollmentStatus.ACTIVE,
            )
        )
        current = int((await self.db.execute(query)).scalar_one())
        limit = self.settings.enrollment.max_credits_for(student.gpa)
        total = current + course.credits

        if total <= limit:
            return None

        return _reason(
            ReasonCode.CREDIT_LIMIT_EXCEEDED,
            f"{total} credits exceeds the {limit} credit limit for this GPA",
        )

    async def _has_active_enrollment(
        self,
        student_id: str,
        course_id: str,
        semester_id: str,
    ) -> bool:
        query = select(func.count(CourseEnrollment.id)).where(
            CourseEnrollment.student_id == student_id,
            CourseEnrollment.course_id == course_id,
            CourseEnrollment.semester_id == semester_id,
            CourseEnrollment.status == EnrollmentStatus.ACTIVE,
        )
        result = await self.db.execute(query)
        return result.scalar_one() > 0

    async def _get_student(self, student_id: str) -> Student | None:
        query = (
            select(Student)
            .where(Student.id == student_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_course(self, course_id: str) -> Course | None:
        query = (
            select(Course)
            .where(Course.id == course_id, Course.deleted_at.is_(None))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()


def _describe_unmet(item: UnmetPrerequisite) -> str:
    if item.reason == UnmetReason.GRADE_BELOW_MINIMUM:
        return f"{item.label} must be completed with at least {item.min_grade} grade points"
    if item.reason == UnmetReason.COURSE_MISSING:
        return f"Prerequisite course {item.label} no longer exists"
    return f"{item.label} must be completed first"


def _reason(code: str, message: str) -> EligibilityReason:
    return EligibilityReason(code=code, message=message)
