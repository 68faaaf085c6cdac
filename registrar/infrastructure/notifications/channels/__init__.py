# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification channels."""

from registrar.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    EnrollmentEvent,
    NotificationPayload,
)
from registrar.infrastructure.notifications.channels.log import LogChannel
from registrar.infrastructure.notifications.channels.memory import MemoryChannel

__all__ = [
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "EnrollmentEvent",
    "LogChannel",
    "MemoryChannel",
    "NotificationPayload",
]
