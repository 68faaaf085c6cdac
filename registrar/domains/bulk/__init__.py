# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Bulk enrollment domain."""

from registrar.domains.bulk.service import BulkEnrollmentCoordinator

__all__ = ["BulkEnrollmentCoordinator"]
