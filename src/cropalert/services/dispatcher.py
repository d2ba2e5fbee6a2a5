"""DeliveryDispatcher: fans a notification out to its enabled channels."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from cropalert.channels.base import ChannelAdapter
from cropalert.models.common import DeliveryOutcome
from cropalert.models.enums import ChannelKind
from cropalert.models.notification import DeliveryChannel, Notification

logger = logging.getLogger(__name__)


class DeliveryDispatcher:
    """Attempts every enabled channel of a notification independently.

    Each attempt only touches its own ``DeliveryChannel`` entry and a failing
    channel never affects its siblings. ``dispatch`` never raises.
    """

    def __init__(
        self,
        channels: dict[ChannelKind, ChannelAdapter],
        clock: Callable[[], datetime] | None = None,
    ):
        self._channels = channels
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def dispatch(self, notification: Notification) -> list[DeliveryOutcome]:
        """Deliver through all enabled channels concurrently.

        Returns:
            One outcome per enabled channel, in the notification's channel order.
        """
        entries = [entry for entry in notification.delivery_channels if entry.enabled]
        if not entries:
            return []
        return list(await asyncio.gather(*(self._attempt(notification, entry) for entry in entries)))

    async def _attempt(self, notification: Notification, entry: DeliveryChannel) -> DeliveryOutcome:
        adapter = self._channels.get(entry.channel)
        try:
            if adapter is None:
                raise LookupError(f"No adapter configured for {entry.channel.value}")
            delivered = await adapter.deliver(notification)
        except Exception as exc:
            entry.error = str(exc) or "Delivery failed"
            logger.warning(
                "Failed to deliver %s via %s: %s",
                notification.id, entry.channel.value, entry.error,
            )
            return DeliveryOutcome(
                notification_id=notification.id,
                channel=entry.channel,
                delivered=False,
                error=entry.error,
            )

        if not delivered:
            return DeliveryOutcome(
                notification_id=notification.id,
                channel=entry.channel,
                delivered=False,
                skipped=True,
            )

        entry.delivered = True
        entry.delivered_at = self._clock()
        entry.error = None
        return DeliveryOutcome(
            notification_id=notification.id,
            channel=entry.channel,
            delivered=True,
        )
