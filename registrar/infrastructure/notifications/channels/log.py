# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured-log notification channel.

Writes every event as a structlog record. Downstream delivery (email,
push) is expected to tail these records.
"""

from registrar.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    NotificationPayload,
)
from registrar.utils.logging import get_logger


class LogChannel(BaseChannel):
    """Emits notifications as structured log events."""

    def __init__(self) -> None:
        super().__init__()
        self._log = get_logger("registrar.notifications")

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.LOG

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        self._log.info(
            "enrollment_notification",
            notification_event=payload.event.value,
            student_id=payload.student_id,
            course_id=payload.course_id,
            semester_id=payload.semester_id,
            **payload.data,
        )
        return self.create_success_result()
