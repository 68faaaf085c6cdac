# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the bulk enrollment coordinator."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from registrar.domains.bulk import BulkEnrollmentCoordinator
from registrar.domains.errors import ConcurrencyConflictError
from registrar.models.bulk import BatchItem
from registrar.models.eligibility import ReasonCode
from registrar.models.enrollment import EnrollmentOutcome
from registrar.models.results import EnrollmentResult


@pytest.fixture
def mock_db():
    """Create mock database session."""
    db = AsyncMock()
    db.rollback = AsyncMock()
    return db


@pytest.fixture
def batch_items():
    return [
        BatchItem(student_id=uuid4(), course_id=uuid4(), semester_id=uuid4())
        for _ in range(3)
    ]


class TestProcessBatchWithEngine:
    """Tests running batches through a real engine."""

    @pytest.mark.asyncio
    async def test_full_course_fails_only_its_item(self, db_session, engine, seed):
        """Test three requests where the second targets a full course."""
        semester = await seed.semester()
        open_course = await seed.course(code="CS101")
        full_course = await seed.course(code="CS201", max_students=1)
        await seed.enrollment(await seed.student(), full_course, semester)
        coordinator = BulkEnrollmentCoordinator(db_session, engine=engine)

        requests = [
            BatchItem(student_id=await seed.student(), course_id=open_course, semester_id=semester),
            BatchItem(
                student_id=await seed.student(),
                course_id=full_course,
                semester_id=semester,
                allow_waitlist=False,
            ),
            BatchItem(student_id=await seed.student(), course_id=open_course, semester_id=semester),
        ]

        result = await coordinator.process_batch(requests, "import-job")

        assert result.total == 3
        assert result.success_count == 2
        assert result.failure_count == 1
        assert [item.success for item in result.items] == [True, False, True]
        assert result.items[1].index == 1
        assert result.items[1].course_id == full_course
        assert [e.code for e in result.items[1].errors] == [ReasonCode.CAPACITY_EXHAUSTED]
        assert result.items[0].enrollment_id is not None

    @pytest.mark.asyncio
    async def test_waitlisted_item_counts_as_success(self, db_session, engine, seed):
        semester = await seed.semester()
        course = await seed.course(max_students=0)
        coordinator = BulkEnrollmentCoordinator(db_session, engine=engine)

        result = await coordinator.process_batch(
            [BatchItem(student_id=await seed.student(), course_id=course, semester_id=semester)],
            "import-job",
        )

        assert result.success_count == 1
        assert result.items[0].outcome == EnrollmentOutcome.WAITLISTED
        assert result.items[0].waitlist_position == 1


class TestProcessBatchErrors:
    """Tests for per-item error isolation."""

    @pytest.mark.asyncio
    async def test_service_error_recorded_with_code(self, mock_db, batch_items):
        engine = MagicMock()
        engine.enroll_student = AsyncMock(
            side_effect=[
                EnrollmentResult(success=True, outcome=EnrollmentOutcome.ENROLLED),
                ConcurrencyConflictError("Concurrent enrollment write"),
                EnrollmentResult(success=True, outcome=EnrollmentOutcome.ENROLLED),
            ]
        )
        coordinator = BulkEnrollmentCoordinator(mock_db, engine=engine)

        result = await coordinator.process_batch(batch_items, "import-job")

        assert result.success_count == 2
        assert result.items[1].success is False
        assert result.items[1].errors[0].code == "ConcurrencyConflict"
        assert engine.enroll_student.await_count == 3

    @pytest.mark.asyncio
    async def test_unexpected_error_rolls_back_and_continues(self, mock_db, batch_items):
        engine = MagicMock()
        engine.enroll_student = AsyncMock(
            side_effect=[
                RuntimeError("connection reset"),
                EnrollmentResult(success=True, outcome=EnrollmentOutcome.ENROLLED),
                EnrollmentResult(success=True, outcome=EnrollmentOutcome.ENROLLED),
            ]
        )
        coordinator = BulkEnrollmentCoordinator(mock_db, engine=engine)

        result = await coordinator.process_batch(batch_items, "import-job")

        assert result.failure_count == 1
        assert result.items[0].errors[0].code == "UnexpectedError"
        assert "connection reset" in result.items[0].errors[0].message
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_passes_flags_through(self, mock_db):
        engine = MagicMock()
        engine.enroll_student = AsyncMock(
            return_value=EnrollmentResult(success=True, outcome=EnrollmentOutcome.ENROLLED)
        )
        coordinator = BulkEnrollmentCoordinator(mock_db, engine=engine)
        item = BatchItem(
            student_id=uuid4(),
            course_id=uuid4(),
            semester_id=uuid4(),
            override=True,
            allow_waitlist=False,
        )

        await coordinator.process_batch([item], "dean")

        engine.enroll_student.assert_awaited_once_with(
            str(item.student_id),
            str(item.course_id),
            str(item.semester_id),
            "dean",
            override=True,
            allow_waitlist=False,
        )
