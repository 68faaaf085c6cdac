# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Registration window collaborators.

The evaluator only needs is_open(semester_id, now). DatabaseRegistrationWindow
answers from RegistrationPeriod rows; the fixed windows are for tests and
for deployments that gate registration elsewhere.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from registrar.infrastructure.database.models import RegistrationPeriod


@runtime_checkable
class RegistrationWindow(Protocol):
    """Decides whether registration for a semester is open at a moment."""

    async def is_open(self, semester_id: str, now: datetime) -> bool: ...


class DatabaseRegistrationWindow:
    """Open when any active RegistrationPeriod of the semester covers now.

    Bounds are inclusive. A semester without periods is closed.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def is_open(self, semester_id: str, now: datetime) -> bool:
        query = select(RegistrationPeriod).where(
            RegistrationPeriod.semester_id == semester_id,
            RegistrationPeriod.is_active.is_(True),
        )
        result = await self.db.execute(query)
        return any(period.is_open(now) for period in result.scalars().all())


class FixedRegistrationWindow:
    """Always answers the same way."""

    def __init__(self, is_open: bool = True) -> None:
        self._is_open = is_open

    async def is_open(self, semester_id: str, now: datetime) -> bool:
        return self._is_open
