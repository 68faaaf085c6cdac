# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Capacity ledger for course seats.

Seat usage is always computed from the persisted count of active
enrollments; there is no in-memory counter. Work that reads that count and
then writes an enrollment for the same (course, semester) must run inside
hold(), which serializes it in two layers:

- an asyncio.Lock per key for coroutines in this process
- SELECT ... FOR UPDATE on the course row for other processes and servers

The caller commits before leaving hold(), so the next holder sees the write.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.config.settings import Settings, get_settings
from registrar.domains.errors import CourseNotFoundError
from registrar.infrastructure.database.models import (
    Course,
    CourseEnrollment,
    EnrollmentStatus,
    WaitlistEntry,
)
from registrar.models.capacity import CapacitySnapshot
from registrar.utils.logging import bound_enrollment_key

logger = logging.getLogger(__name__)

_key_locks: weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock] = (
    weakref.WeakValueDictionary()
)


def get_key_lock(course_id: str, semester_id: str) -> asyncio.Lock:
    """Get the process-wide lock for a (course, semester) key."""
    key = (course_id, semester_id)
    lock = _key_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _key_locks[key] = lock
    return lock


class CapacityLedger:
    """Single source of truth for whether a course has a free seat.

    Attributes:
        db: Async database session.
        settings: Application settings (default capacity).
    """

    def __init__(self, db: AsyncSession, settings: Settings | None = None) -> None:
        """Initialize capacity ledger.

        Args:
            db: Async database session.
            settings: Application settings. Defaults to get_settings().
        """
        self.db = db
        self.settings = settings or get_settings()

    @asynccontextmanager
    async def hold(self, course_id: str, semester_id: str) -> AsyncIterator[Course | None]:
        """Serialize read-check-write work on one (course, semester).

        Yields the locked course row, or None when the course does not
        exist. Work meant to persist must be committed inside the block:
        leaving it rolls back whatever is still uncommitted, which also
        releases the row lock, before the key lock is released. Log lines
        written inside the block carry the course and semester ids.
        """
        lock = get_key_lock(course_id, semester_id)
        async with lock:
            with bound_enrollment_key(course_id, semester_id):
                try:
                    query = (
                        select(Course)
                        .where(Course.id == course_id)
                        .with_for_update()
                        .execution_options(populate_existing=True)
                    )
                    result = await self.db.execute(query)
                    yield result.scalar_one_or_none()
                except Exception:
                    await self.db.rollback()
                    raise
                if self.db.in_transaction():
                    await self.db.rollback()

    def capacity_for(self, course: Course) -> int:
        """Resolve a course's seat count. NULL means the configured default."""
        if course.max_students is None:
            return self.settings.enrollment.default_max_students
        return course.max_students

    async def snapshot(
        self,
        course_id: str,
        semester_id: str,
        include_deleted: bool = False,
    ) -> CapacitySnapshot:
        """Compute seat usage from live rows.

        Args:
            course_id: Course identifier.
            semester_id: Semester identifier.
            include_deleted: Also count seats of a soft-deleted course, whose
                remaining active enrollments can still be dropped.

        Raises:
            CourseNotFoundError: If the course does not exist.
        """
        course = await self.db.get(Course, course_id)
        if course is None or (course.deleted_at is not None and not include_deleted):
            raise CourseNotFoundError(f"Course {course_id} not found")

        max_students = self.capacity_for(course)
        active_count = await self.active_count(course_id, semester_id)
        waitlist_count = await self._waitlist_count(course_id, semester_id)
        available = max(max_students - active_count, 0)

        return CapacitySnapshot(
            course_id=course_id,
            semester_id=semester_id,
            max_students=max_students,
            active_count=active_count,
            available_seats=available,
            has_seat=active_count < max_students,
            waitlist_count=waitlist_count,
        )

    async def try_reserve(self, course_id: str, semester_id: str) -> bool:
        """Check for a free seat. Must be called inside hold().

        The seat counts as reserved once the caller inserts the active
        enrollment and commits without leaving hold().
        """
        snapshot = await self.snapshot(course_id, semester_id)
        return snapshot.has_seat

    async def release(self, course_id: str, semester_id: str) -> CapacitySnapshot:
        """Record a freed seat after a drop and return the new usage.

        Works for soft-deleted courses too. Does not promote from the
        waitlist; that is the caller's next step.
        """
        await self.db.flush()
        snapshot = await self.snapshot(course_id, semester_id, include_deleted=True)
        logger.info(
            "Released seat: course=%s, semester=%s, active=%d/%d",
            course_id,
            semester_id,
            snapshot.active_count,
            snapshot.max_students,
        )
        return snapshot

    async def active_count(self, course_id: str, semester_id: str) -> int:
        query = select(func.count(CourseEnrollment.id)).where(
            CourseEnrollment.course_id == course_id,
            CourseEnrollment.semester_id == semester_id,
            CourseEnrollment.status == EnrollmentStatus.ACTIVE,
        )
        result = await self.db.execute(query)
        return result.scalar_one()

    async def _waitlist_count(self, course_id: str, semester_id: str) -> int:
        query = select(func.count(WaitlistEntry.id)).where(
            WaitlistEntry.course_id == course_id,
            WaitlistEntry.semester_id == semester_id,
            WaitlistEntry.is_active.is_(True),
        )
        result = await self.db.execute(query)
        return result.scalar_one()
