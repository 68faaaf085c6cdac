# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain."""

from registrar.domains.enrollment.service import EnrollmentEngine

__all__ = ["EnrollmentEngine"]
