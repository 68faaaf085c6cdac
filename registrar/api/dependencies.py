# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependencies for database sessions and collaborators."""

from typing import AsyncGenerator

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.core.config import get_settings
from registrar.infrastructure.database import (
    DatabaseError,
    close_database,
    get_session,
    get_sessionmaker,
    init_database,
)
from registrar.infrastructure.notifications import (
    NotificationService,
    get_notification_service,
)


async def init_db() -> None:
    """Initialize the database connection pool."""
    await init_database(get_settings())


async def close_db() -> None:
    """Close the database connection pool."""
    await close_database()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a registrar database session.

    Yields:
        AsyncSession committed when the request succeeds.

    Raises:
        HTTPException: If the database has not been initialized.
    """
    try:
        get_sessionmaker()
    except DatabaseError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not initialized",
        )

    async with get_session() as session:
        yield session


def get_notifier() -> NotificationService:
    """Get the shared notification service."""
    return get_notification_service()
