# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Waitlist domain."""

from registrar.domains.waitlist.service import WaitlistManager

__all__ = ["WaitlistManager"]
