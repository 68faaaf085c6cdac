# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Base classes for notification channels.

This module defines the abstract base class and shared types for
enrollment notification channels. A channel hands an event to some
delivery medium; it never reports back into the enrollment decision.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from registrar.utils.datetime import utc_now


class ChannelType(str, Enum):
    """Available notification channel types."""

    LOG = "log"
    MEMORY = "memory"


class DeliveryStatus(str, Enum):
    """Delivery status for a channel."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


class EnrollmentEvent(str, Enum):
    """Events the enrollment engine emits about a student."""

    ENROLLED = "enrolled"
    WAITLISTED = "waitlisted"
    WAITLIST_PROMOTED = "waitlist_promoted"
    WAITLIST_SKIPPED = "waitlist_skipped"
    WAITLIST_WITHDRAWN = "waitlist_withdrawn"
    ENROLLMENT_DROPPED = "enrollment_dropped"


@dataclass
class NotificationPayload:
    """Payload for a single notification.

    Attributes:
        student_id: Student the event is about.
        event: What happened.
        course_id: Course involved, if any.
        semester_id: Semester involved, if any.
        data: Additional event data (positions, reasons).
        created_at: When the event was raised.
    """

    student_id: str
    event: EnrollmentEvent
    course_id: str | None = None
    semester_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class ChannelResult:
    """Result of a channel send operation.

    Attributes:
        channel: Which channel was used.
        status: Delivery status.
        error_message: Error message if failed.
        sent_at: When message was sent.
    """

    channel: ChannelType
    status: DeliveryStatus
    error_message: str | None = None
    sent_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "channel": self.channel.value,
            "status": self.status.value,
            "error_message": self.error_message,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
        }


class BaseChannel(ABC):
    """Abstract base class for notification channels.

    Attributes:
        channel_type: The type of this channel.
    """

    def __init__(self) -> None:
        """Initialize the channel."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    @abstractmethod
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        ...

    @abstractmethod
    async def send(self, payload: NotificationPayload) -> ChannelResult:
        """Send a notification through this channel.

        Args:
            payload: The notification payload to send.

        Returns:
            ChannelResult with delivery status.
        """
        ...

    def create_success_result(self) -> ChannelResult:
        """Create a successful channel result."""
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.SENT,
            sent_at=utc_now(),
        )

    def create_failure_result(self, error_message: str) -> ChannelResult:
        """Create a failed channel result.

        Args:
            error_message: Error description.

        Returns:
            ChannelResult with FAILED status.
        """
        return ChannelResult(
            channel=self.channel_type,
            status=DeliveryStatus.FAILED,
            error_message=error_message,
            sent_at=utc_now(),
        )

