# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    enrollment: Enrollment, drop, waitlist and capacity endpoints.
    prerequisites: Prerequisite edge management endpoints.
"""

from fastapi import APIRouter

from registrar.api.v1 import enrollment, prerequisites

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(enrollment.router, prefix="/enrollment", tags=["Enrollment"])
router.include_router(prerequisites.router, prefix="/prerequisites", tags=["Prerequisites"])

__all__ = ["router"]
