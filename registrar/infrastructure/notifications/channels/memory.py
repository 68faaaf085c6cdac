# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""In-memory notification channel.

Keeps delivered payloads in a list. Used in development and tests to
inspect which events the engine raised.
"""

from registrar.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    NotificationPayload,
)


class MemoryChannel(BaseChannel):
    """Collects notifications in memory."""

    def __init__(self) -> None:
        super().__init__()
        self.sent: list[NotificationPayload] = []

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.MEMORY

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        self.sent.append(payload)
        return self.create_success_result()

    def events_for(self, student_id: str) -> list[str]:
        """List event names delivered for one student, in order."""
        return [p.event.value for p in self.sent if p.student_id == student_id]

    def clear(self) -> None:
        self.sent.clear()
