# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment engine for course seats.

This module provides the EnrollmentEngine class for:
- Enrolling a student, or waitlisting them when no seat is free
- Dropping an enrollment and promoting the next waitlisted student
- Reading enrollments

Each enroll or drop runs under CapacityLedger.hold() for its
(course, semester) and commits before the lock is released. An enroll first
promotes queued students into any free seats, then writes one row for the
requester (an enrollment or a waitlist entry). A rejected request writes
nothing for the requester. A drop, its capacity release and the resulting
promotion are one unit of work.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.config.settings import Settings, get_settings
from registrar.domains.capacity.service import CapacityLedger
from registrar.domains.eligibility.service import EligibilityEvaluator
from registrar.domains.errors import (
    EnrollmentNotFoundError,
    RegistrarServiceError,
)
from registrar.domains.persistence import commit_or_conflict, flush_or_conflict
from registrar.domains.waitlist.service import WaitlistManager
from registrar.infrastructure.database.models import (
    CourseEnrollment,
    EnrollmentStatus,
    EnrollmentType,
)
from registrar.infrastructure.notifications import (
    EnrollmentEvent,
    NotificationService,
    get_notification_service,
)
from registrar.models.eligibility import EligibilityReason, ReasonCode
from registrar.models.enrollment import DropOutcome, EnrollmentOutcome, EnrollmentResponse
from registrar.models.results import BulkDropResult, DropResult, EnrollmentResult
from registrar.models.waitlist import WaitlistEntryResponse
from registrar.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class EnrollmentEngine:
    """Service orchestrating enrollments, drops and the promotions they cause.

    Attributes:
        db: Async database session.
        evaluator: Eligibility evaluator.
        ledger: Capacity ledger.
        waitlist: Waitlist manager.
        notifier: Notification sink.
    """

    def __init__(
        self,
        db: AsyncSession,
        evaluator: EligibilityEvaluator | None = None,
        ledger: CapacityLedger | None = None,
        waitlist: WaitlistManager | None = None,
        notifier: NotificationService | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize enrollment engine.

        Collaborators not given are built on the same session, so every
        component sees the same transaction.

        Args:
            db: Async database session.
            evaluator: Eligibility evaluator.
            ledger: Capacity ledger.
            waitlist: Waitlist manager.
            notifier: Notification service. Defaults to the shared instance.
            settings: Application settings. Defaults to get_settings().
        """
        self.db = db
        settings = settings or get_settings()
        self.evaluator = evaluator or EligibilityEvaluator(db, settings=settings)
        self.ledger = ledger or CapacityLedger(db, settings=settings)
        self.notifier = notifier or get_notification_service()
        self.waitlist = waitlist or WaitlistManager(
            db,
            evaluator=self.evaluator,
            ledger=self.ledger,
            notifier=self.notifier,
            settings=settings,
        )

    async def enroll_student(
        self,
        student_id: str,
        course_id: str,
        semester_id: str,
        requested_by: str,
        *,
        override: bool = False,
        allow_waitlist: bool = True,
    ) -> EnrollmentResult:
        """Enroll a student in a course for a semester.

        Free seats go to students already queued first, so a seat that
        opened outside a drop is never left idle behind a waiting queue.
        The requester then gets a seat if one is still free, and otherwise
        joins the waitlist. An ineligible student is rejected with every
        reason and nothing is written.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.
            semester_id: Semester identifier.
            requested_by: Actor making the request.
            override: Administrative override of standing, prerequisite and
                registration window checks. Capacity still applies.
            allow_waitlist: When False, a full course rejects instead of queuing.

        Returns:
            EnrollmentResult with outcome enrolled, waitlisted or rejected.

        Raises:
            ConcurrencyConflictError: If a concurrent write won the race.
        """
        async with self.ledger.hold(course_id, semester_id):
            evaluation = await self.evaluator.evaluate(
                student_id, course_id, semester_id, override=override
            )
            if not evaluation.allowed:
                logger.info(
                    "Rejected enrollment: student=%s, course=%s, semester=%s, reasons=%s, by=%s",
                    student_id,
                    course_id,
                    semester_id,
                    ",".join(evaluation.codes),
                    requested_by,
                )
                return EnrollmentResult(
                    success=False,
                    outcome=EnrollmentOutcome.REJECTED,
                    errors=evaluation.reasons,
                    warnings=evaluation.warnings,
                )

            promotions = await self.waitlist.fill_open_seats_locked(course_id, semester_id)
            own = next(
                (
                    p.enrollment
                    for p in promotions
                    if p.enrollment is not None and p.enrollment.student_id == student_id
                ),
                None,
            )
            queued = await self.waitlist.get_active_entry(student_id, course_id, semester_id)

            if own is not None:
                result = EnrollmentResult(
                    success=True,
                    outcome=EnrollmentOutcome.ENROLLED,
                    enrollment=own,
                    warnings=evaluation.warnings,
                )
            elif queued is not None:
                result = self._rejected(
                    ReasonCode.ALREADY_WAITLISTED,
                    f"Student is already waitlisted at position {queued.position}",
                    evaluation.warnings,
                )
            elif await self.ledger.try_reserve(course_id, semester_id):
                enrollment = CourseEnrollment(
                    student_id=student_id,
                    course_id=course_id,
                    semester_id=semester_id,
                    status=EnrollmentStatus.ACTIVE,
                    enrollment_type=(
                        EnrollmentType.OVERRIDE if override else EnrollmentType.REGULAR
                    ),
                    requested_by=requested_by,
                )
                self.db.add(enrollment)
                await flush_or_conflict(self.db, "enrollment")

                logger.info(
                    "Enrolled student: student=%s, course=%s, semester=%s, type=%s, by=%s",
                    student_id,
                    course_id,
                    semester_id,
                    enrollment.enrollment_type.value,
                    requested_by,
                )
                result = EnrollmentResult(
                    success=True,
                    outcome=EnrollmentOutcome.ENROLLED,
                    enrollment=EnrollmentResponse.model_validate(enrollment),
                    warnings=evaluation.warnings,
                )
            elif not allow_waitlist:
                result = self._rejected(
                    ReasonCode.CAPACITY_EXHAUSTED,
                    "No seat is available and waitlisting was not requested",
                    evaluation.warnings,
                )
            else:
                entry = await self.waitlist.enqueue_locked(
                    student_id, course_id, semester_id, requested_by
                )
                result = EnrollmentResult(
                    success=True,
                    outcome=EnrollmentOutcome.WAITLISTED,
                    waitlisted=True,
                    waitlist_position=entry.position,
                    waitlist_entry=WaitlistEntryResponse.model_validate(entry),
                    warnings=evaluation.warnings,
                )

            result.promotions = promotions
            if result.success or promotions:
                await commit_or_conflict(self.db, "enrollment")

        for promotion in promotions:
            self.waitlist.notify_promotion(promotion)

        if not result.success:
            return result

        if result.waitlisted:
            self.notifier.notify(
                student_id,
                EnrollmentEvent.WAITLISTED,
                course_id=course_id,
                semester_id=semester_id,
                position=result.waitlist_position,
            )
        elif own is None:
            self.notifier.notify(
                student_id,
                EnrollmentEvent.ENROLLED,
                course_id=course_id,
                semester_id=semester_id,
                enrollment_id=result.enrollment.id,
            )

        return result


    async def drop_course(
        self,
        enrollment_id: str,
        reason: str,
        requested_by: str,
    ) -> DropResult:
        """Drop an active enrollment and fill the freed seat from the waitlist.

        Dropping an enrollment that is already dropped or completed changes
        nothing and reports already_finalized.

        Args:
            enrollment_id: Enrollment identifier.
            reason: Why the course is dropped.
            requested_by: Actor dropping the course.

        Returns:
            DropResult with the final capacity and the promotion, if any.

        Raises:
            EnrollmentNotFoundError: If the enrollment does not exist.
            ConcurrencyConflictError: If a concurrent write won the race.
        """
        enrollment = await self.db.get(CourseEnrollment, enrollment_id)
        if enrollment is None:
            raise EnrollmentNotFoundError(f"Enrollment {enrollment_id} not found")

        course_id, semester_id = enrollment.course_id, enrollment.semester_id

        async with self.ledger.hold(course_id, semester_id) as course:
            await self.db.refresh(enrollment)
            if enrollment.status != EnrollmentStatus.ACTIVE:
                logger.info(
                    "Drop ignored, enrollment already %s: enrollment=%s, by=%s",
                    enrollment.status.value,
                    enrollment_id,
                    requested_by,
                )
                return DropResult(
                    success=False,
                    outcome=DropOutcome.ALREADY_FINALIZED,
                    enrollment_id=enrollment_id,
                    message=f"Enrollment is already {enrollment.status.value}",
                    enrollment=EnrollmentResponse.model_validate(enrollment),
                )

            enrollment.status = EnrollmentStatus.DROPPED
            enrollment.dropped_at = utc_now()
            enrollment.drop_reason = reason
            enrollment.dropped_by = requested_by

            await self.ledger.release(course_id, semester_id)
            # a soft-deleted course takes no new students, so nobody is promoted
            promotion = None
            if course is not None and course.deleted_at is None:
                promotion = await self.waitlist.promote_next_locked(course_id, semester_id)
            capacity = await self.ledger.snapshot(course_id, semester_id, include_deleted=True)
            await commit_or_conflict(self.db, "enrollment")

        logger.info(
            "Dropped course: student=%s, course=%s, semester=%s, promotion=%s, by=%s",
            enrollment.student_id,
            course_id,
            semester_id,
            promotion.outcome.value if promotion else "none",
            requested_by,
        )

        self.notifier.notify(
            enrollment.student_id,
            EnrollmentEvent.ENROLLMENT_DROPPED,
            course_id=course_id,
            semester_id=semester_id,
            enrollment_id=enrollment_id,
            reason=reason,
        )
        if promotion is not None:
            self.waitlist.notify_promotion(promotion)

        return DropResult(
            success=True,
            outcome=DropOutcome.DROPPED,
            enrollment_id=enrollment_id,
            message="Course dropped",
            enrollment=EnrollmentResponse.model_validate(enrollment),
            capacity=capacity,
            promotion=promotion,
        )

    async def bulk_drop(
        self,
        enrollment_ids: list[str],
        reason: str,
        requested_by: str,
    ) -> BulkDropResult:
        """Drop several enrollments, each in its own unit of work.

        A failure on one id is recorded on that item and the rest continue.
        """
        items: list[DropResult] = []

        for enrollment_id in enrollment_ids:
            try:
                items.append(await self.drop_course(enrollment_id, reason, requested_by))
            except EnrollmentNotFoundError as e:
                items.append(
                    DropResult(
                        success=False,
                        outcome=DropOutcome.NOT_FOUND,
                        enrollment_id=enrollment_id,
                        message=e.message,
                    )
                )
            except RegistrarServiceError as e:
                items.append(
                    DropResult(
                        success=False,
                        outcome=DropOutcome.FAILED,
                        enrollment_id=enrollment_id,
                        message=f"{e.code}: {e.message}",
                    )
                )
            except Exception as e:
                logger.exception("Unexpected error dropping enrollment %s", enrollment_id)
                await self.db.rollback()
                items.append(
                    DropResult(
                        success=False,
                        outcome=DropOutcome.FAILED,
                        enrollment_id=enrollment_id,
                        message=f"UnexpectedError: {e}",
                    )
                )

        success_count = sum(1 for item in items if item.success)

        logger.info(
            "Bulk drop: dropped=%d, failed=%d, by=%s",
            success_count,
            len(items) - success_count,
            requested_by,
        )

        return BulkDropResult(
            items=items,
            success_count=success_count,
            failure_count=len(items) - success_count,
            total=len(items),
        )

    async def get_enrollment(self, enrollment_id: str) -> EnrollmentResponse:
        """Get enrollment details.

        Raises:
            EnrollmentNotFoundError: If the enrollment does not exist.
        """
        enrollment = await self.db.get(CourseEnrollment, enrollment_id, populate_existing=True)
        if enrollment is None:
            raise EnrollmentNotFoundError(f"Enrollment {enrollment_id} not found")
        return EnrollmentResponse.model_validate(enrollment)

    async def list_enrollments(
        self,
        course_id: str,
        semester_id: str,
        status: EnrollmentStatus | None = None,
    ) -> list[EnrollmentResponse]:
        """List enrollments of a course in a semester, oldest first."""
        query = select(CourseEnrollment).where(
            CourseEnrollment.course_id == course_id,
            CourseEnrollment.semester_id == semester_id,
        )
        if status is not None:
            query = query.where(CourseEnrollment.status == status)
        query = query.order_by(CourseEnrollment.enrolled_at.asc())

        result = await self.db.execute(query)
        return [EnrollmentResponse.model_validate(e) for e in result.scalars().all()]

    @staticmethod
    def _rejected(
        code: str,
        message: str,
        warnings: list[EligibilityReason],
    ) -> EnrollmentResult:
        return EnrollmentResult(
            success=False,
            outcome=EnrollmentOutcome.REJECTED,
            errors=[EligibilityReason(code=code, message=message)],
            warnings=warnings,
        )
