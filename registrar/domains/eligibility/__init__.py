# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Eligibility domain."""

from registrar.domains.eligibility.registration_window import (
    DatabaseRegistrationWindow,
    FixedRegistrationWindow,
    RegistrationWindow,
)
from registrar.domains.eligibility.service import EligibilityEvaluator

__all__ = [
    "DatabaseRegistrationWindow",
    "EligibilityEvaluator",
    "FixedRegistrationWindow",
    "RegistrationWindow",
]
