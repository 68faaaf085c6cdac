# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Prerequisite graph over courses.

This module provides the PrerequisiteGraph class for:
- Checking a student's completed courses against a course's direct prerequisites
- Adding and removing prerequisite edges
- Rejecting edges that would create a cycle

Only direct edges are evaluated. A student who satisfies the immediate
prerequisites of a course is not checked against their prerequisites.

Edge writes are serialized across the whole graph so the cycle check and the
insert see a stable set of edges. An asyncio.Lock per event loop covers this
process. On PostgreSQL a transaction-scoped advisory lock covers the others.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections import deque
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.domains.errors import (
    CourseNotFoundError,
    EnrollmentValidationError,
    RecordConflictError,
    RecordNotFoundError,
)
from registrar.domains.persistence import commit_or_conflict
from registrar.infrastructure.database.models import (
    Course,
    CourseEnrollment,
    CoursePrerequisite,
    EnrollmentStatus,
)
from registrar.models.prerequisite import (
    PrerequisiteResponse,
    UnmetPrerequisite,
    UnmetReason,
)

logger = logging.getLogger(__name__)

# pg_advisory_xact_lock key for prerequisite graph writes
GRAPH_ADVISORY_LOCK_KEY = 0x52454750

_graph_locks: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock] = (
    weakref.WeakKeyDictionary()
)


def get_graph_lock() -> asyncio.Lock:
    """Get the lock serializing prerequisite graph writes on the running loop."""
    loop = asyncio.get_running_loop()
    lock = _graph_locks.get(loop)
    if lock is None:
        lock = asyncio.Lock()
        _graph_locks[loop] = lock
    return lock


class SelfPrerequisiteError(EnrollmentValidationError):
    """Raised when a course is made a prerequisite of itself."""

    code = "SelfPrerequisite"


class DuplicatePrerequisiteError(RecordConflictError):
    """Raised when the prerequisite edge already exists."""

    code = "DuplicatePrerequisite"


class PrerequisiteCycleError(RecordConflictError):
    """Raised when a new edge would close a cycle in the graph."""

    code = "PrerequisiteCycle"


class PrerequisiteNotFoundError(RecordNotFoundError):
    """Raised when the prerequisite edge does not exist."""

    code = "PrerequisiteNotFound"


class PrerequisiteGraph:
    """Service for prerequisite edges and their evaluation.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize prerequisite graph.

        Args:
            db: Async database session.
        """
        self.db = db

    async def is_satisfied(
        self,
        student_id: str,
        course_id: str,
    ) -> tuple[bool, list[UnmetPrerequisite]]:
        """Check a student's history against the direct prerequisites of a course.

        Every edge is checked and every unmet one is returned, advisory
        edges included. Only required edges affect the boolean.

        Args:
            student_id: Student identifier.
            course_id: Course whose prerequisites are checked.

        Returns:
            Tuple of (all required edges met, list of unmet edges).
        """
        edges = await self._get_edges(course_id)
        if not edges:
            return True, []

        prerequisite_ids = [edge.prerequisite_course_id for edge in edges]
        courses = await self._get_live_courses(prerequisite_ids)
        history = await self._get_completed_history(student_id, prerequisite_ids)

        unmet: list[UnmetPrerequisite] = []
        for edge in edges:
            course = courses.get(edge.prerequisite_course_id)
            completed, best_grade = history.get(edge.prerequisite_course_id, (0, None))

            if course is None:
                reason = UnmetReason.COURSE_MISSING
            elif completed == 0:
                reason = UnmetReason.NOT_COMPLETED
            elif edge.min_grade is not None and (
                best_grade is None or Decimal(best_grade) < Decimal(edge.min_grade)
            ):
                reason = UnmetReason.GRADE_BELOW_MINIMUM
            else:
                continue

            unmet.append(
                UnmetPrerequisite(
                    course_id=edge.prerequisite_course_id,
                    course_code=course.code if course is not None else None,
                    is_required=edge.is_required,
                    min_grade=edge.min_grade,
                    best_grade=best_grade,
                    reason=reason,
                )
            )

        satisfied = not any(item.is_required for item in unmet)
        return satisfied, unmet

    async def add_prerequisite(
        self,
        course_id: str,
        prerequisite_course_id: str,
        is_required: bool = True,
        min_grade: Decimal | None = None,
    ) -> PrerequisiteResponse:
        """Add a prerequisite edge.

        Args:
            course_id: Course that gains the requirement.
            prerequisite_course_id: Course that must be completed first.
            is_required: False for an advisory edge.
            min_grade: Minimum grade points on the 0-4 scale, if any.

        Returns:
            The created edge.

        Raises:
            SelfPrerequisiteError: If both ids are the same course.
            CourseNotFoundError: If either course does not exist.
            DuplicatePrerequisiteError: If the edge already exists.
            PrerequisiteCycleError: If the edge would create a cycle.
        """
        if course_id == prerequisite_course_id:
            raise SelfPrerequisiteError("A course cannot be its own prerequisite")

        async with self._graph_write():
            courses = await self._get_live_courses([course_id, prerequisite_course_id])
            for missing in (course_id, prerequisite_course_id):
                if missing not in courses:
                    raise CourseNotFoundError(f"Course {missing} not found")

            duplicate = DuplicatePrerequisiteError(
                f"{courses[prerequisite_course_id].code} is already a prerequisite "
                f"of {courses[course_id].code}"
            )
            if await self._get_edge(course_id, prerequisite_course_id) is not None:
                raise duplicate

            if await self._reaches(prerequisite_course_id, course_id):
                raise PrerequisiteCycleError(
                    f"Adding {courses[prerequisite_course_id].code} as a prerequisite of "
                    f"{courses[course_id].code} would create a cycle"
                )

            edge = CoursePrerequisite(
                course_id=course_id,
                prerequisite_course_id=prerequisite_course_id,
                is_required=is_required,
                min_grade=min_grade,
            )
            self.db.add(edge)
            try:
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                raise duplicate from e
            response = self._to_response(edge, courses[prerequisite_course_id].code)

        logger.info(
            "Added prerequisite: course=%s, prerequisite=%s, required=%s, min_grade=%s",
            courses[course_id].code,
            courses[prerequisite_course_id].code,
            is_required,
            min_grade,
        )

        return response

    async def remove_prerequisite(self, course_id: str, prerequisite_course_id: str) -> None:
        """Remove a prerequisite edge.

        Raises:
            PrerequisiteNotFoundError: If the edge does not exist.
        """
        async with self._graph_write():
            edge = await self._get_edge(course_id, prerequisite_course_id)
            if edge is None:
                raise PrerequisiteNotFoundError(
                    f"Course {prerequisite_course_id} is not a prerequisite of {course_id}"
                )

            await self.db.delete(edge)
            await commit_or_conflict(self.db, "prerequisite")

        logger.info(
            "Removed prerequisite: course=%s, prerequisite=%s",
            course_id,
            prerequisite_course_id,
        )

    async def list_prerequisites(self, course_id: str) -> list[PrerequisiteResponse]:
        """List the direct prerequisite edges of a course.

        Raises:
            CourseNotFoundError: If the course does not exist.
        """
        courses = await self._get_live_courses([course_id])
        if course_id not in courses:
            raise CourseNotFoundError(f"Course {course_id} not found")

        query = (
            select(CoursePrerequisite, Course.code)
            .outerjoin(Course, Course.id == CoursePrerequisite.prerequisite_course_id)
            .where(CoursePrerequisite.course_id == course_id)
            .order_by(Course.code)
        )
        result = await self.db.execute(query)
        return [self._to_response(edge, code) for edge, code in result.all()]

    @asynccontextmanager
    async def _graph_write(self) -> AsyncIterator[None]:
        """Hold the graph write lock. Uncommitted work is rolled back on error."""
        async with get_graph_lock():
            try:
                if self.db.get_bind().dialect.name == "postgresql":
                    await self.db.execute(
                        select(func.pg_advisory_xact_lock(GRAPH_ADVISORY_LOCK_KEY))
                    )
                yield
            except Exception:
                await self.db.rollback()
                raise

    async def _reaches(self, start_id: str, target_id: str) -> bool:
        """Breadth-first search along prerequisite edges from start to target."""
        seen = {start_id}
        queue = deque([start_id])
        while queue:
            current = queue.popleft()
            if current == target_id:
                return True
            result = await self.db.execute(
                select(CoursePrerequisite.prerequisite_course_id).where(
                    CoursePrerequisite.course_id == current
                )
            )
            for next_id in result.scalars():
                if next_id not in seen:
                    seen.add(next_id)
                    queue.append(next_id)
        return False

    async def _get_edges(self, course_id: str) -> list[CoursePrerequisite]:
        query = select(CoursePrerequisite).where(CoursePrerequisite.course_id == course_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _get_edge(
        self, course_id: str, prerequisite_course_id: str
    ) -> CoursePrerequisite | None:
        query = select(CoursePrerequisite).where(
            CoursePrerequisite.course_id == course_id,
            CoursePrerequisite.prerequisite_course_id == prerequisite_course_id,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_live_courses(self, course_ids: list[str]) -> dict[str, Course]:
        """Get courses by id, leaving out soft-deleted ones."""
        query = select(Course).where(Course.id.in_(course_ids), Course.deleted_at.is_(None))
        result = await self.db.execute(query)
        return {course.id: course for course in result.scalars().all()}

    async def _get_completed_history(
        self,
        student_id: str,
        course_ids: list[str],
    ) -> dict[str, tuple[int, Decimal | None]]:
        """Get completion count and best grade per course for a student."""
        query = (
            select(
                CourseEnrollment.course_id,
                func.count(CourseEnrollment.id),
                func.max(CourseEnrollment.grade_points),
            )
            .where(
                CourseEnrollment.student_id == student_id,
                CourseEnrollment.course_id.in_(course_ids),
                CourseEnrollment.status == EnrollmentStatus.COMPLETED,
            )
            .group_by(CourseEnrollment.course_id)
        )
        result = await self.db.execute(query)
        return {
            course_id: (count, Decimal(str(best)) if best is not None else None)
            for course_id, count, best in result.all()
        }

    def _to_response(self, edge: CoursePrerequisite, code: str | None) -> PrerequisiteResponse:
        return PrerequisiteResponse(
            id=edge.id,
            course_id=edge.course_id,
            prerequisite_course_id=edge.prerequisite_course_id,
            prerequisite_code=code,
            is_required=edge.is_required,
            min_grade=edge.min_grade,
        )
