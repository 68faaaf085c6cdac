# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for Registrar.

All timestamps are stored in UTC and all Python datetimes handled by the
services are timezone-aware. Some database backends (SQLite) return naive
datetimes for TIMESTAMPTZ-like columns; ensure_utc() normalizes those before
comparison.

Usage:
------
    from registrar.utils.datetime import utc_now

    # For current time
    now = utc_now()

    # For SQLAlchemy model defaults
    created_at = mapped_column(DateTime(timezone=True), default=utc_now)
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def is_within(moment: datetime, start: datetime, end: datetime) -> bool:
    """Check whether a moment falls inside an inclusive [start, end] window.

    All three values are normalized to UTC first, so naive values read back
    from the database compare correctly against aware ones.
    """
    moment_utc = ensure_utc(moment)
    return ensure_utc(start) <= moment_utc <= ensure_utc(end)
