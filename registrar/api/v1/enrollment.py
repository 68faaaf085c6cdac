# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment and waitlist API endpoints.

This module provides endpoints for:
- POST /enroll - Enroll a student (or waitlist when full)
- GET /eligibility/{student_id}/{course_id}/{semester_id} - Evaluate eligibility
- POST /bulk-enroll - Enroll a batch of students
- POST /drop - Drop an enrollment
- POST /bulk-drop - Drop several enrollments
- POST /waitlist - Add a student to a waitlist
- GET /waitlist/{course_id}/{semester_id} - List a waitlist
- DELETE /waitlist/entries/{entry_id} - Withdraw a waitlist entry
- POST /process-waitlist/{course_id}/{semester_id} - Promote from one waitlist
- POST /process-all-waitlists - Promote from every waitlist with free seats
- GET /capacity/{course_id}/{semester_id} - Seat usage
- GET /enrollments/{enrollment_id} - Enrollment details
- GET /courses/{course_id}/semesters/{semester_id}/enrollments - List enrollments

Authorization is performed by the calling layer before these endpoints.
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.api.dependencies import get_db, get_notifier
from registrar.api.errors import to_http_error
from registrar.domains.bulk.service import BulkEnrollmentCoordinator
from registrar.domains.enrollment.service import EnrollmentEngine
from registrar.domains.errors import RegistrarServiceError
from registrar.infrastructure.database.models import EnrollmentStatus
from registrar.infrastructure.notifications import NotificationService
from registrar.models.bulk import BatchResult, BulkEnrollRequest
from registrar.models.capacity import CapacitySnapshot
from registrar.models.eligibility import EligibilityResult
from registrar.models.enrollment import (
    BulkDropRequest,
    DropOutcome,
    DropRequest,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollRequest,
)
from registrar.models.results import (
    BulkDropResult,
    DropResult,
    EnrollmentResult,
    ProcessAllResult,
    PromotionResult,
)
from registrar.models.waitlist import (
    WaitlistAddRequest,
    WaitlistListResponse,
    WaitlistResult,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_engine(db: AsyncSession, notifier: NotificationService) -> EnrollmentEngine:
    """Get enrollment engine instance.

    Args:
        db: Database session.
        notifier: Notification service.

    Returns:
        Configured EnrollmentEngine instance.
    """
    return EnrollmentEngine(db=db, notifier=notifier)


@router.post(
    "/enroll",
    response_model=EnrollmentResult,
    summary="Enroll student",
    description="Enroll a student, or waitlist them when the course is full. "
    "Returns 400 with the reasons when the student is ineligible.",
)
async def enroll(
    data: EnrollRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> EnrollmentResult:
    """Enroll a student in a course for a semester.

    Args:
        data: Enrollment request.
        response: Outgoing response, used to set the status code.
        db: Database session.
        notifier: Notification service.

    Returns:
        Enrollment result.

    Raises:
        HTTPException: On a concurrency conflict.
    """
    engine = _get_engine(db, notifier)

    try:
        result = await engine.enroll_student(
            str(data.student_id),
            str(data.course_id),
            str(data.semester_id),
            data.requested_by,
            override=data.override,
            allow_waitlist=data.allow_waitlist,
        )
    except RegistrarServiceError as e:
        raise to_http_error(e) from e

    if not result.success:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return result


@router.get(
    "/eligibility/{student_id}/{course_id}/{semester_id}",
    response_model=EligibilityResult,
    summary="Check eligibility",
)
async def check_eligibility(
    student_id: UUID,
    course_id: UUID,
    semester_id: UUID,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> EligibilityResult:
    """Evaluate every enrollment rule without writing anything."""
    engine = _get_engine(db, notifier)
    return await engine.evaluator.evaluate(str(student_id), str(course_id), str(semester_id))


@router.post(
    "/bulk-enroll",
    response_model=BatchResult,
    summary="Bulk enroll",
    description="Process enrollment requests in order. A failing item does not stop the batch.",
)
async def bulk_enroll(
    data: BulkEnrollRequest,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> BatchResult:
    """Enroll a batch of students.

    Args:
        data: Batch of requests and the submitting actor.
        db: Database session.
        notifier: Notification service.

    Returns:
        Per-item results with success and failure counts.
    """
    logger.info("Bulk enrollment of %d requests by %s", len(data.requests), data.requested_by)
    coordinator = BulkEnrollmentCoordinator(db, engine=_get_engine(db, notifier))
    return await coordinator.process_batch(data.requests, data.requested_by)


@router.post(
    "/drop",
    response_model=DropResult,
    summary="Drop course",
    description="Drop an active enrollment and promote from the waitlist. "
    "Returns 409 when the enrollment is already dropped or completed.",
)
async def drop_course(
    data: DropRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> DropResult:
    """Drop an enrollment.

    Raises:
        HTTPException: If enrollment not found or on a concurrency conflict.
    """
    engine = _get_engine(db, notifier)

    try:
        result = await engine.drop_course(str(data.enrollment_id), data.reason, data.requested_by)
    except RegistrarServiceError as e:
        raise to_http_error(e) from e

    if result.outcome == DropOutcome.ALREADY_FINALIZED:
        response.status_code = status.HTTP_409_CONFLICT
    return result


@router.post(
    "/bulk-drop",
    response_model=BulkDropResult,
    summary="Bulk drop",
)
async def bulk_drop(
    data: BulkDropRequest,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> BulkDropResult:
    """Drop several enrollments, each independently."""
    engine = _get_engine(db, notifier)
    return await engine.bulk_drop(
        [str(enrollment_id) for enrollment_id in data.enrollment_ids],
        data.reason,
        data.requested_by,
    )


@router.post(
    "/waitlist",
    response_model=WaitlistResult,
    status_code=status.HTTP_201_CREATED,
    summary="Add to waitlist",
    description=(
        "Queue an eligible student for a full course. "
        "Returns 409 when already queued, ineligible or a seat is free."
    ),
)
async def add_to_waitlist(
    data: WaitlistAddRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> WaitlistResult:
    """Add a student to a course waitlist.

    Raises:
        HTTPException: On a concurrency conflict.
    """
    engine = _get_engine(db, notifier)

    try:
        result = await engine.waitlist.add(
            str(data.student_id),
            str(data.course_id),
            str(data.semester_id),
            data.requested_by,
        )
    except RegistrarServiceError as e:
        raise to_http_error(e) from e

    if not result.success:
        response.status_code = status.HTTP_409_CONFLICT
    return result


@router.get(
    "/waitlist/{course_id}/{semester_id}",
    response_model=WaitlistListResponse,
    summary="Get waitlist",
)
async def get_waitlist(
    course_id: UUID,
    semester_id: UUID,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> WaitlistListResponse:
    """List active waitlist entries, earliest position first."""
    engine = _get_engine(db, notifier)
    entries = await engine.waitlist.get_waitlist(str(course_id), str(semester_id))
    return WaitlistListResponse(
        course_id=str(course_id),
        semester_id=str(semester_id),
        entries=entries,
        total=len(entries),
    )


@router.delete(
    "/waitlist/entries/{entry_id}",
    response_model=WaitlistResult,
    summary="Withdraw from waitlist",
)
async def withdraw_from_waitlist(
    entry_id: UUID,
    response: Response,
    requested_by: Annotated[str | None, Query(alias="requestedBy", max_length=100)] = None,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> WaitlistResult:
    """Withdraw a waitlist entry.

    Raises:
        HTTPException: If the entry does not exist.
    """
    engine = _get_engine(db, notifier)

    try:
        result = await engine.waitlist.remove(str(entry_id), requested_by)
    except RegistrarServiceError as e:
        raise to_http_error(e) from e

    if not result.success:
        response.status_code = status.HTTP_409_CONFLICT
    return result


@router.post(
    "/process-waitlist/{course_id}/{semester_id}",
    response_model=PromotionResult,
    summary="Process waitlist",
    description="Fill one free seat from the waitlist, skipping students who are no longer eligible.",
)
async def process_waitlist(
    course_id: UUID,
    semester_id: UUID,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> PromotionResult:
    """Promote the next eligible waitlisted student.

    Raises:
        HTTPException: If the course does not exist or on a concurrency conflict.
    """
    engine = _get_engine(db, notifier)

    try:
        return await engine.waitlist.promote_next(str(course_id), str(semester_id))
    except RegistrarServiceError as e:
        raise to_http_error(e) from e


@router.post(
    "/process-all-waitlists",
    response_model=ProcessAllResult,
    summary="Process all waitlists",
)
async def process_all_waitlists(
    semester_id: Annotated[UUID | None, Query(alias="semesterId")] = None,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> ProcessAllResult:
    """Promote from every waitlist while seats and eligible students remain.

    Raises:
        HTTPException: On a concurrency conflict.
    """
    engine = _get_engine(db, notifier)

    try:
        return await engine.waitlist.process_all_waitlists(
            str(semester_id) if semester_id else None
        )
    except RegistrarServiceError as e:
        raise to_http_error(e) from e


@router.get(
    "/capacity/{course_id}/{semester_id}",
    response_model=CapacitySnapshot,
    summary="Get capacity",
)
async def get_capacity(
    course_id: UUID,
    semester_id: UUID,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> CapacitySnapshot:
    """Get seat usage for a course in a semester.

    Raises:
        HTTPException: If the course does not exist.
    """
    engine = _get_engine(db, notifier)

    try:
        return await engine.ledger.snapshot(str(course_id), str(semester_id))
    except RegistrarServiceError as e:
        raise to_http_error(e) from e


@router.get(
    "/enrollments/{enrollment_id}",
    response_model=EnrollmentResponse,
    summary="Get enrollment",
)
async def get_enrollment(
    enrollment_id: UUID,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> EnrollmentResponse:
    """Get enrollment details.

    Raises:
        HTTPException: If the enrollment does not exist.
    """
    engine = _get_engine(db, notifier)

    try:
        return await engine.get_enrollment(str(enrollment_id))
    except RegistrarServiceError as e:
        raise to_http_error(e) from e


@router.get(
    "/courses/{course_id}/semesters/{semester_id}/enrollments",
    response_model=EnrollmentListResponse,
    summary="List enrollments",
)
async def list_enrollments(
    course_id: UUID,
    semester_id: UUID,
    enrollment_status: Annotated[
        EnrollmentStatus | None, Query(alias="status", description="Filter by status")
    ] = None,
    db: AsyncSession = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> EnrollmentListResponse:
    """List enrollments of a course in a semester, oldest first."""
    engine = _get_engine(db, notifier)
    items = await engine.list_enrollments(str(course_id), str(semester_id), enrollment_status)
    return EnrollmentListResponse(items=items, total=len(items))
