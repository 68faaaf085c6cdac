# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Prerequisite management API endpoints.

This module provides endpoints for prerequisite edges:
- POST / - Add a prerequisite (rejects self-loops, duplicates and cycles)
- GET /{course_id} - List a course's direct prerequisites
- DELETE /{course_id}/{prerequisite_course_id} - Remove a prerequisite
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.api.dependencies import get_db
from registrar.api.errors import to_http_error
from registrar.domains.errors import RegistrarServiceError
from registrar.domains.prerequisite.service import PrerequisiteGraph
from registrar.models.prerequisite import (
    PrerequisiteCreateRequest,
    PrerequisiteListResponse,
    PrerequisiteResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> PrerequisiteGraph:
    return PrerequisiteGraph(db=db)


@router.post(
    "",
    response_model=PrerequisiteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add prerequisite",
    description="Add a prerequisite edge. Returns 409 for duplicates and cycles.",
)
async def add_prerequisite(
    data: PrerequisiteCreateRequest,
    db: AsyncSession = Depends(get_db),
) -> PrerequisiteResponse:
    """Add a prerequisite edge.

    Args:
        data: Edge to create.
        db: Database session.

    Returns:
        Created edge.

    Raises:
        HTTPException: If a course is missing, the edge is a self-loop,
            a duplicate or would create a cycle.
    """
    service = _get_service(db)

    try:
        return await service.add_prerequisite(
            str(data.course_id),
            str(data.prerequisite_course_id),
            is_required=data.is_required,
            min_grade=data.min_grade,
        )
    except RegistrarServiceError as e:
        raise to_http_error(e) from e


@router.get(
    "/{course_id}",
    response_model=PrerequisiteListResponse,
    summary="List prerequisites",
)
async def list_prerequisites(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> PrerequisiteListResponse:
    """List a course's direct prerequisites."""
    service = _get_service(db)

    try:
        items = await service.list_prerequisites(str(course_id))
    except RegistrarServiceError as e:
        raise to_http_error(e) from e

    return PrerequisiteListResponse(course_id=str(course_id), items=items, total=len(items))


@router.delete(
    "/{course_id}/{prerequisite_course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove prerequisite",
)
async def remove_prerequisite(
    course_id: UUID,
    prerequisite_course_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Remove a prerequisite edge.

    Raises:
        HTTPException: If the edge does not exist.
    """
    service = _get_service(db)

    try:
        await service.remove_prerequisite(str(course_id), str(prerequisite_course_id))
    except RegistrarServiceError as e:
        raise to_http_error(e) from e
