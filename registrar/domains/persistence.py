# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Flush and commit helpers that map storage races to ConcurrencyConflictError.

The partial unique indexes on active enrollments and active waitlist entries,
and the unique waitlist position, are the last line against a lost race.
When one of them fires, the session is rolled back and the caller gets a
retryable error instead of a raw IntegrityError.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.domains.errors import ConcurrencyConflictError

logger = logging.getLogger(__name__)


async def flush_or_conflict(db: AsyncSession, what: str) -> None:
    try:
        await db.flush()
    except IntegrityError as e:
        await _conflict(db, what, e)


async def commit_or_conflict(db: AsyncSession, what: str) -> None:
    try:
        await db.commit()
    except IntegrityError as e:
        await _conflict(db, what, e)


async def _conflict(db: AsyncSession, what: str, error: IntegrityError) -> None:
    await db.rollback()
    logger.warning("Write conflict on %s: %s", what, str(error.orig))
    raise ConcurrencyConflictError(
        f"The {what} changed concurrently, please retry"
    ) from error
