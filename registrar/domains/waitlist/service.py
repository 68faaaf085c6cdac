# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Waitlist manager for full courses.

This module provides the WaitlistManager class for:
- Queuing eligible students when a course has no free seat
- Promoting the earliest still-eligible student when a seat frees up
- Withdrawing entries and draining every queue with free seats

Positions are max(position) + 1 over every entry ever created for the
(course, semester), so a vacated position is never handed out again.
Refusals (already queued, ineligible) are returned as data.

Methods ending in _locked assume the caller holds CapacityLedger.hold()
for the key and will commit before releasing it.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.config.settings import Settings, get_settings
from registrar.domains.capacity.service import CapacityLedger
from registrar.domains.eligibility.service import EligibilityEvaluator
from registrar.domains.errors import WaitlistEntryNotFoundError
from registrar.domains.persistence import commit_or_conflict, flush_or_conflict
from registrar.infrastructure.database.models import (
    Course,
    CourseEnrollment,
    EnrollmentStatus,
    EnrollmentType,
    WaitlistEntry,
    WaitlistRemovalReason,
)
from registrar.infrastructure.notifications import (
    EnrollmentEvent,
    NotificationService,
    get_notification_service,
)
from registrar.models.eligibility import EligibilityReason, ReasonCode
from registrar.models.enrollment import EnrollmentResponse
from registrar.models.results import (
    ProcessAllResult,
    PromotionOutcome,
    PromotionResult,
    SkippedEntry,
)
from registrar.models.waitlist import WaitlistEntryResponse, WaitlistResult

logger = logging.getLogger(__name__)


class WaitlistManager:
    """FIFO wait queue per (course, semester).

    Attributes:
        db: Async database session.
        evaluator: Eligibility evaluator used on add and on promotion.
        ledger: Capacity ledger providing seat checks and the key lock.
        notifier: Notification sink for promotion and skip events.
    """

    def __init__(
        self,
        db: AsyncSession,
        evaluator: EligibilityEvaluator | None = None,
        ledger: CapacityLedger | None = None,
        notifier: NotificationService | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize waitlist manager.

        Args:
            db: Async database session.
            evaluator: Eligibility evaluator. Defaults to one on the same session.
            ledger: Capacity ledger. Defaults to one on the same session.
            notifier: Notification service. Defaults to the shared instance.
            settings: Application settings. Defaults to get_settings().
        """
        self.db = db
        settings = settings or get_settings()
        self.evaluator = evaluator or EligibilityEvaluator(db, settings=settings)
        self.ledger = ledger or CapacityLedger(db, settings=settings)
        self.notifier = notifier or get_notification_service()

    async def add(
        self,
        student_id: str,
        course_id: str,
        semester_id: str,
        requested_by: str | None = None,
    ) -> WaitlistResult:
        """Queue a student for a course that has no free seat.

        The student must pass the same eligibility checks as a direct
        enrollment. A course with a free seat refuses with SeatAvailable.
        Nothing is written when the request is refused.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.
            semester_id: Semester identifier.
            requested_by: Actor placing the student in the queue.

        Returns:
            WaitlistResult with the new entry and position, or the refusal reasons.

        Raises:
            ConcurrencyConflictError: If a concurrent write won the race.
        """
        async with self.ledger.hold(course_id, semester_id):
            existing = await self.get_active_entry(student_id, course_id, semester_id)
            if existing is not None:
                return WaitlistResult(
                    success=False,
                    entry=WaitlistEntryResponse.model_validate(existing),
                    position=existing.position,
                    errors=[
                        EligibilityReason(
                            code=ReasonCode.ALREADY_WAITLISTED,
                            message=f"Student is already waitlisted at position {existing.position}",
                        )
                    ],
                )

            evaluation = await self.evaluator.evaluate(student_id, course_id, semester_id)
            if not evaluation.allowed:
                return WaitlistResult(success=False, errors=evaluation.reasons)

            if await self.ledger.try_reserve(course_id, semester_id):
                return WaitlistResult(
                    success=False,
                    errors=[
                        EligibilityReason(
                            code=ReasonCode.SEAT_AVAILABLE,
                            message="A seat is free; enroll the student directly",
                        )
                    ],
                )

            entry = await self.enqueue_locked(student_id, course_id, semester_id, requested_by)
            await commit_or_conflict(self.db, "waitlist")

        self.notifier.notify(
            student_id,
            EnrollmentEvent.WAITLISTED,
            course_id=course_id,
            semester_id=semester_id,
            position=entry.position,
        )

        return WaitlistResult(
            success=True,
            entry=WaitlistEntryResponse.model_validate(entry),
            position=entry.position,
        )

    async def promote_next(self, course_id: str, semester_id: str) -> PromotionResult:
        """Fill one free seat from the queue.

        Walks active entries by position. Entries whose student is no longer
        eligible are removed and the walk continues until a student is
        promoted or the queue runs out.

        Args:
            course_id: Course identifier.
            semester_id: Semester identifier.

        Returns:
            PromotionResult (promoted, no_seat or queue_empty) with skipped entries.

        Raises:
            CourseNotFoundError: If the course does not exist.
            ConcurrencyConflictError: If a concurrent write won the race.
        """
        async with self.ledger.hold(course_id, semester_id):
            result = await self.promote_next_locked(course_id, semester_id)
            await commit_or_conflict(self.db, "waitlist")

        self.notify_promotion(result)
        return result

    async def promote_next_locked(self, course_id: str, semester_id: str) -> PromotionResult:
        """Promotion walk. The caller holds the key lock and commits."""
        if not await self.ledger.try_reserve(course_id, semester_id):
            return PromotionResult(
                course_id=course_id,
                semester_id=semester_id,
                outcome=PromotionOutcome.NO_SEAT,
            )

        skipped: list[SkippedEntry] = []
        for entry in await self._get_active_entries(course_id, semester_id):
            evaluation = await self.evaluator.evaluate(
                entry.student_id,
                course_id,
                semester_id,
                check_registration_window=False,
            )

            if not evaluation.allowed:
                entry.deactivate(WaitlistRemovalReason.INELIGIBLE)
                skipped.append(
                    SkippedEntry(
                        entry_id=entry.id,
                        student_id=entry.student_id,
                        position=entry.position,
                        reasons=evaluation.reasons,
                    )
                )
                logger.info(
                    "Skipped waitlist entry: student=%s, course=%s, semester=%s, position=%d, reasons=%s",
                    entry.student_id,
                    course_id,
                    semester_id,
                    entry.position,
                    ",".join(evaluation.codes),
                )
                continue

            entry.deactivate(WaitlistRemovalReason.PROMOTED)
            enrollment = CourseEnrollment(
                student_id=entry.student_id,
                course_id=course_id,
                semester_id=semester_id,
                status=EnrollmentStatus.ACTIVE,
                enrollment_type=EnrollmentType.WAITLIST_PROMOTED,
                requested_by=entry.requested_by,
            )
            self.db.add(enrollment)
            await flush_or_conflict(self.db, "waitlist")

            logger.info(
                "Promoted from waitlist: student=%s, course=%s, semester=%s, position=%d",
                entry.student_id,
                course_id,
                semester_id,
                entry.position,
            )

            return PromotionResult(
                course_id=course_id,
                semester_id=semester_id,
                outcome=PromotionOutcome.PROMOTED,
                enrollment=EnrollmentResponse.model_validate(enrollment),
                entry=WaitlistEntryResponse.model_validate(entry),
                skipped=skipped,
            )

        await flush_or_conflict(self.db, "waitlist")
        return PromotionResult(
            course_id=course_id,
            semester_id=semester_id,
            outcome=PromotionOutcome.QUEUE_EMPTY,
            skipped=skipped,
        )

    async def fill_open_seats_locked(
        self, course_id: str, semester_id: str
    ) -> list[PromotionResult]:
        """Promote queued students into every free seat.

        Stops when the seats or the queue run out. Walks that neither found
        a seat nor skipped anyone are left out. The caller holds the key
        lock and commits.
        """
        results: list[PromotionResult] = []
        while True:
            result = await self.promote_next_locked(course_id, semester_id)
            if result.promoted or result.skipped:
                results.append(result)
            if not result.promoted:
                return results

    def notify_promotion(self, result: PromotionResult) -> None:
        """Send notifications for a committed promotion walk."""
        for item in result.skipped:
            self.notifier.notify(
                item.student_id,
                EnrollmentEvent.WAITLIST_SKIPPED,
                course_id=result.course_id,
                semester_id=result.semester_id,
                position=item.position,
                reasons=[reason.code for reason in item.reasons],
            )
        if result.enrollment is not None:
            self.notifier.notify(
                result.enrollment.student_id,
                EnrollmentEvent.WAITLIST_PROMOTED,
                course_id=result.course_id,
                semester_id=result.semester_id,
                enrollment_id=result.enrollment.id,
            )

    async def enqueue_locked(
        self,
        student_id: str,
        course_id: str,
        semester_id: str,
        requested_by: str | None,
    ) -> WaitlistEntry:
        """Insert an entry at the tail. The caller holds the key lock and commits."""
        query = select(func.max(WaitlistEntry.position)).where(
            WaitlistEntry.course_id == course_id,
            WaitlistEntry.semester_id == semester_id,
        )
        last_position = (await self.db.execute(query)).scalar_one_or_none()

        entry = WaitlistEntry(
            student_id=student_id,
            course_id=course_id,
            semester_id=semester_id,
            position=(last_position or 0) + 1,
            is_active=True,
            requested_by=requested_by,
        )
        self.db.add(entry)
        await flush_or_conflict(self.db, "waitlist")

        logger.info(
            "Waitlisted student: student=%s, course=%s, semester=%s, position=%d, by=%s",
            student_id,
            course_id,
            semester_id,
            entry.position,
            requested_by,
        )
        return entry

    async def remove(self, entry_id: str, requested_by: str | None = None) -> WaitlistResult:
        """Withdraw an entry from its queue. The position is not reused.

        Args:
            entry_id: Waitlist entry identifier.
            requested_by: Actor withdrawing the entry.

        Returns:
            WaitlistResult. success is False when the entry was already inactive.

        Raises:
            WaitlistEntryNotFoundError: If the entry does not exist.
        """
        entry = await self.db.get(WaitlistEntry, entry_id)
        if entry is None:
            raise WaitlistEntryNotFoundError(f"Waitlist entry {entry_id} not found")

        async with self.ledger.hold(entry.course_id, entry.semester_id):
            await self.db.refresh(entry)
            if not entry.is_active:
                return WaitlistResult(
                    success=False,
                    entry=WaitlistEntryResponse.model_validate(entry),
                    position=entry.position,
                    errors=[
                        EligibilityReason(
                            code="WaitlistEntryInactive",
                            message="Waitlist entry is no longer active",
                        )
                    ],
                )
            entry.deactivate(WaitlistRemovalReason.WITHDRAWN)
            await commit_or_conflict(self.db, "waitlist")

        logger.info(
            "Withdrew waitlist entry: student=%s, course=%s, semester=%s, position=%d, by=%s",
            entry.student_id,
            entry.course_id,
            entry.semester_id,
            entry.position,
            requested_by,
        )
        self.notifier.notify(
            entry.student_id,
            EnrollmentEvent.WAITLIST_WITHDRAWN,
            course_id=entry.course_id,
            semester_id=entry.semester_id,
            position=entry.position,
        )

        return WaitlistResult(
            success=True,
            entry=WaitlistEntryResponse.model_validate(entry),
            position=entry.position,
        )

    async def get_waitlist(self, course_id: str, semester_id: str) -> list[WaitlistEntryResponse]:
        """List active entries by position, earliest first."""
        entries = await self._get_active_entries(course_id, semester_id)
        return [WaitlistEntryResponse.model_validate(entry) for entry in entries]

    async def get_active_entry(
        self,
        student_id: str,
        course_id: str,
        semester_id: str,
    ) -> WaitlistEntry | None:
        query = select(WaitlistEntry).where(
            WaitlistEntry.student_id == student_id,
            WaitlistEntry.course_id == course_id,
            WaitlistEntry.semester_id == semester_id,
            WaitlistEntry.is_active.is_(True),
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def process_all_waitlists(self, semester_id: str | None = None) -> ProcessAllResult:
        """Promote from every queue that has active entries, while seats remain.

        Args:
            semester_id: Restrict to one semester. None processes every semester.

        Returns:
            ProcessAllResult with every promotion walk that ran.
        """
        query = (
            select(WaitlistEntry.course_id, WaitlistEntry.semester_id)
            .join(Course, Course.id == WaitlistEntry.course_id)
            .where(WaitlistEntry.is_active.is_(True), Course.deleted_at.is_(None))
            .distinct()
        )
        if semester_id is not None:
            query = query.where(WaitlistEntry.semester_id == semester_id)
        keys = (await self.db.execute(query)).all()

        results: list[PromotionResult] = []
        for course_id, key_semester_id in keys:
            while True:
                result = await self.promote_next(course_id, key_semester_id)
                results.append(result)
                if not result.promoted:
                    break

        promoted = sum(1 for result in results if result.promoted)
        skipped = sum(len(result.skipped) for result in results)

        logger.info(
            "Processed waitlists: keys=%d, promoted=%d, skipped=%d, semester=%s",
            len(keys),
            promoted,
            skipped,
            semester_id,
        )

        return ProcessAllResult(
            results=results,
            promoted_count=promoted,
            skipped_count=skipped,
            keys_processed=len(keys),
        )

    async def _get_active_entries(self, course_id: str, semester_id: str) -> list[WaitlistEntry]:
        query = (
            select(WaitlistEntry)
            .where(
                WaitlistEntry.course_id == course_id,
                WaitlistEntry.semester_id == semester_id,
                WaitlistEntry.is_active.is_(True),
            )
            .order_by(WaitlistEntry.position.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
