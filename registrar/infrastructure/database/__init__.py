# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the registrar.

Example:
    from registrar.infrastructure.database import get_session

    async with get_session() as session:
        result = await session.execute(select(Course))
"""

from registrar.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    create_sessionmaker,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)

__all__ = [
    "DatabaseError",
    "check_database_connection",
    "close_database",
    "create_sessionmaker",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
]
