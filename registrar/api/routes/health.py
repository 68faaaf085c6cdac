# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Health check endpoints.

This module provides health, readiness and engine status endpoints.
"""

import time
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from registrar import __version__
from registrar.api.dependencies import get_db
from registrar.core.config import get_settings
from registrar.infrastructure.database.connection import get_engine
from registrar.infrastructure.database.models import (
    CourseEnrollment,
    EnrollmentStatus,
    WaitlistEntry,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Track server start time for uptime calculation
_server_start_time = time.time()


class ComponentHealth(BaseModel):
    """Individual component health status."""
    status: str = Field(description="Component status")
    latency_ms: float | None = Field(None, description="Response latency in ms")
    message: str | None = Field(None, description="Additional status message")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(description="Current server timestamp")
    version: str = Field(description="API version")
    environment: str = Field(description="Deployment environment")
    uptime_seconds: int = Field(description="Server uptime in seconds")
    database: ComponentHealth


class ReadinessResponse(BaseModel):
    """Readiness check response model."""
    ready: bool = Field(description="Whether the service is ready")
    checks: dict[str, Any] = Field(description="Individual check results")


class EngineStatusResponse(BaseModel):
    """Enrollment engine status with live counts."""
    status: str = Field(description="Engine status")
    timestamp: datetime = Field(description="When the counts were taken")
    active_enrollments: int = Field(description="Active enrollments across all courses")
    active_waitlist_entries: int = Field(description="Students currently waitlisted")


async def check_database() -> ComponentHealth:
    """Check database connection."""
    try:
        engine = get_engine()
        start = time.time()

        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        latency = (time.time() - start) * 1000
        return ComponentHealth(status="healthy", latency_ms=round(latency, 2))
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        return ComponentHealth(status="unhealthy", message=str(e))


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check if the API is healthy.

    Returns:
        HealthResponse with database status.
    """
    settings = get_settings()
    db_health = await check_database()

    return HealthResponse(
        status=db_health.status,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        environment=settings.environment,
        uptime_seconds=int(time.time() - _server_start_time),
        database=db_health,
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Check if the API is ready to accept traffic."""
    db_health = await check_database()
    checks = {"database": {"status": db_health.status, "latency_ms": db_health.latency_ms}}
    return ReadinessResponse(ready=db_health.status == "healthy", checks=checks)


@router.get("/health/status", response_model=EngineStatusResponse)
async def engine_status(db: AsyncSession = Depends(get_db)) -> EngineStatusResponse:
    """Report how many seats and waitlist places are currently held."""
    active_enrollments = (
        await db.execute(
            select(func.count(CourseEnrollment.id)).where(
                CourseEnrollment.status == EnrollmentStatus.ACTIVE
            )
        )
    ).scalar_one()
    active_waitlist = (
        await db.execute(
            select(func.count(WaitlistEntry.id)).where(WaitlistEntry.is_active.is_(True))
        )
    ).scalar_one()

    return EngineStatusResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        active_enrollments=active_enrollments,
        active_waitlist_entries=active_waitlist,
    )
