# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Capacity domain."""

from registrar.domains.capacity.service import CapacityLedger, get_key_lock

__all__ = ["CapacityLedger", "get_key_lock"]
