"""
Notification service facade.

Simulates pushing a booking event to a user (push notification or email).
In production this would integrate with Firebase Cloud Messaging and an
email provider.
"""

import asyncio
import logging

from dogwalk.domain.models import Notification

logger = logging.getLogger(__name__)


class LoggingNotifier:
    """Logs notifications and keeps them in ``sent`` for inspection."""

    def __init__(self, latency_seconds: float = 0.0) -> None:
        self.latency_seconds = latency_seconds
        self.sent: list[tuple[str, Notification]] = []

    async def notify(self, user_id: str, event: Notification) -> None:
        logger.info("Sending %s for booking %s to user %s", event.event.value, event.booking_id, user_id)
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)  # Simulate network latency
        self.sent.append((user_id, event))
