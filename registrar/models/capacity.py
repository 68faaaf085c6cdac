# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Capacity snapshot model."""

from registrar.models.common import CamelModel


class CapacitySnapshot(CamelModel):
    """Seat usage of a course in a semester, computed from live rows."""

    course_id: str
    semester_id: str
    max_students: int
    active_count: int
    available_seats: int
    has_seat: bool
    waitlist_count: int
