# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment and waitlist domain services.

Components, leaves first: PrerequisiteGraph, EligibilityEvaluator,
CapacityLedger, WaitlistManager, EnrollmentEngine, BulkEnrollmentCoordinator.
"""
