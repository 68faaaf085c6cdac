# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification service for enrollment events.

notify() is fire-and-forget: it schedules delivery on the running event
loop and returns immediately. Delivery failures are logged at warning
level and never reach the caller, so a failed notification can never
undo an enrollment decision that has already been committed.
"""

import asyncio
import logging
from typing import Any

from registrar.core.config.settings import NotificationSettings, get_settings
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

logger = logging.getLogger(__name__)

_CHANNEL_FACTORIES: dict[str, type[BaseChannel]] = {
    ChannelType.LOG.value: LogChannel,
    ChannelType.MEMORY.value: MemoryChannel,
}


class NotificationService:
    """Dispatches enrollment events to the configured channels.

    Attributes:
        channels: Channels every event is delivered through.
        enabled: When False, notify() is a no-op.
    """

    def __init__(
        self,
        channels: list[BaseChannel] | None = None,
        enabled: bool = True,
    ) -> None:
        """Initialize the notification service.

        Args:
            channels: Delivery channels. Defaults to a single LogChannel.
            enabled: Whether events are delivered at all.
        """
        self.channels: list[BaseChannel] = channels if channels is not None else [LogChannel()]
        self.enabled = enabled
        self._pending: set[asyncio.Task[list[ChannelResult]]] = set()

    @classmethod
    def from_settings(cls, settings: NotificationSettings) -> "NotificationService":
        """Build a service from notification settings.

        Raises:
            ValueError: If a configured channel name is unknown.
        """
        channels: list[BaseChannel] = []
        for name in settings.channels:
            factory = _CHANNEL_FACTORIES.get(name)
            if factory is None:
                raise ValueError(f"Unknown notification channel: {name}")
            channels.append(factory())
        return cls(channels=channels, enabled=settings.enabled)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def notify(
        self,
        student_id: str,
        event: EnrollmentEvent,
        *,
        course_id: str | None = None,
        semester_id: str | None = None,
        **data: Any,
    ) -> None:
        """Schedule delivery of an event and return immediately.

        Args:
            student_id: Student the event is about.
            event: Event type.
            course_id: Course involved.
            semester_id: Semester involved.
            **data: Extra event fields.
        """
        if not self.enabled or not self.channels:
            return

        payload = NotificationPayload(
            student_id=student_id,
            event=event,
            course_id=course_id,
            semester_id=semester_id,
            data=data,
        )
        try:
            task = asyncio.get_running_loop().create_task(self._deliver(payload))
        except RuntimeError:
            logger.warning(
                "No running event loop, dropping notification: event=%s, student=%s",
                event.value,
                student_id,
            )
            return

        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, payload: NotificationPayload) -> list[ChannelResult]:
        results: list[ChannelResult] = []
        for channel in self.channels:
            try:
                result = await channel.send(payload)
            except Exception as e:
                logger.warning(
                    "Notification channel %s failed: event=%s, student=%s, error=%s",
                    channel.channel_type.value,
                    payload.event.value,
                    payload.student_id,
                    str(e),
                )
                result = channel.create_failure_result(str(e))
            if result.status == DeliveryStatus.FAILED:
                logger.warning("Notification not delivered: %s", result.to_dict())
            results.append(result)
        return results

    async def drain(self) -> None:
        """Wait for every scheduled delivery to finish."""
        while self._pending:
            batch = list(self._pending)
            await asyncio.gather(*batch, return_exceptions=True)
            self._pending.difference_update(batch)


_service_instance: NotificationService | None = None


def get_notification_service() -> NotificationService:
    """Get or create the notification service singleton.

    Returns:
        NotificationService built from the current settings.
    """
    global _service_instance
    if _service_instance is None:
        _service_instance = NotificationService.from_settings(get_settings().notifications)
    return _service_instance


def reset_notification_service() -> None:
    """Drop the singleton so the next call rebuilds it from settings."""
    global _service_instance
    _service_instance = None
