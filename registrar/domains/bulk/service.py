# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Bulk enrollment coordinator.

Runs EnrollmentEngine.enroll_student over a batch in the order given. Each
item commits or rolls back on its own; a failing item becomes a failure
entry and never stops the batch. Waitlisted items count as successes.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from registrar.domains.enrollment.service import EnrollmentEngine
from registrar.domains.errors import RegistrarServiceError
from registrar.models.bulk import BatchItem, BatchItemResult, BatchResult
from registrar.models.eligibility import EligibilityReason
from registrar.models.enrollment import EnrollmentOutcome

logger = logging.getLogger(__name__)


class BulkEnrollmentCoordinator:
    """Applies the enrollment engine across a batch of requests.

    Attributes:
        db: Async database session.
        engine: Enrollment engine used for every item.
    """

    def __init__(self, db: AsyncSession, engine: EnrollmentEngine | None = None) -> None:
        self.db = db
        self.engine = engine or EnrollmentEngine(db)

    async def process_batch(self, requests: list[BatchItem], requested_by: str) -> BatchResult:
        """Enroll every request independently.

        Args:
            requests: Items to process, in order.
            requested_by: Actor submitting the batch.

        Returns:
            BatchResult with one entry per request, in request order.
        """
        items: list[BatchItemResult] = []

        for index, request in enumerate(requests):
            student_id = str(request.student_id)
            course_id = str(request.course_id)
            semester_id = str(request.semester_id)

            try:
                result = await self.engine.enroll_student(
                    student_id,
                    course_id,
                    semester_id,
                    requested_by,
                    override=request.override,
                    allow_waitlist=request.allow_waitlist,
                )
            except RegistrarServiceError as e:
                logger.warning(
                    "Bulk item %d failed: student=%s, course=%s, code=%s",
                    index,
                    student_id,
                    course_id,
                    e.code,
                )
                items.append(
                    self._failure(index, student_id, course_id, semester_id, e.code, e.message)
                )
                continue
            except Exception as e:
                logger.exception(
                    "Bulk item %d raised unexpectedly: student=%s, course=%s",
                    index,
                    student_id,
                    course_id,
                )
                await self.db.rollback()
                items.append(
                    self._failure(
                        index, student_id, course_id, semester_id, "UnexpectedError", str(e)
                    )
                )
                continue

            items.append(
                BatchItemResult(
                    index=index,
                    student_id=student_id,
                    course_id=course_id,
                    semester_id=semester_id,
                    success=result.success,
                    outcome=result.outcome,
                    waitlisted=result.waitlisted,
                    waitlist_position=result.waitlist_position,
                    enrollment_id=result.enrollment.id if result.enrollment else None,
                    errors=result.errors,
                    warnings=result.warnings,
                )
            )

        success_count = sum(1 for item in items if item.success)
        failure_count = len(items) - success_count

        logger.info(
            "Bulk enrollment: total=%d, succeeded=%d, failed=%d, by=%s",
            len(items),
            success_count,
            failure_count,
            requested_by,
        )

        return BatchResult(
            items=items,
            success_count=success_count,
            failure_count=failure_count,
            total=len(items),
        )

    @staticmethod
    def _failure(
        index: int,
        student_id: str,
        course_id: str,
        semester_id: str,
        code: str,
        message: str,
    ) -> BatchItemResult:
        return BatchItemResult(
            index=index,
            student_id=student_id,
            course_id=course_id,
            semester_id=semester_id,
            success=False,
            outcome=EnrollmentOutcome.REJECTED,
            errors=[EligibilityReason(code=code, message=message)],
        )
