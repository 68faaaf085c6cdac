# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification sink for enrollment events.

The enrollment engine calls notify(student_id, event) after committing a
decision. Delivery runs in the background and its failures are only logged.

Usage:
    from registrar.infrastructure.notifications import (
        EnrollmentEvent,
        get_notification_service,
    )

    notifier = get_notification_service()
    notifier.notify(student_id, EnrollmentEvent.WAITLIST_PROMOTED, course_id=course_id)
"""

from registrar.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    EnrollmentEvent,
    LogChannel,
    MemoryChannel,
    NotificationPayload,
)
from registrar.infrastructure.notifications.service import (
    NotificationService,
    get_notification_service,
    reset_notification_service,
)

__all__ = [
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "EnrollmentEvent",
    "LogChannel",
    "MemoryChannel",
    "NotificationPayload",
    "NotificationService",
    "get_notification_service",
    "reset_notification_service",
]
