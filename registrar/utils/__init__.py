# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for Registrar.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime operations
"""

from registrar.utils.datetime import ensure_utc, is_within, utc_now
from registrar.utils.logging import (
    bind_context,
    bound_enrollment_key,
    clear_context,
    get_logger,
    setup_logging,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "bound_enrollment_key",
    # Datetime
    "utc_now",
    "ensure_utc",
    "is_within",
]
