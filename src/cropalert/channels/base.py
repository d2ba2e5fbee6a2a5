"""Abstract base class for delivery channel adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod

from cropalert.models.enums import ChannelKind
from cropalert.models.notification import Notification


class ChannelAdapter(ABC):
    """Delivers a Notification over one transport."""

    channel: ChannelKind

    @abstractmethod
    async def deliver(self, notification: Notification) -> bool:
        """Attempt delivery.

        Returns:
            True if delivered, False if the channel is currently unavailable
            (nothing is recorded in that case).

        Raises:
            Exception: any failure; the dispatcher records it on the channel.
        """
        ...


class UnsupportedChannel(ChannelAdapter):
    """A transport this engine does not implement. Every attempt fails."""

    def __init__(self, channel: ChannelKind):
        self.channel = channel

    async def deliver(self, notification: Notification) -> bool:
        raise NotImplementedError(f"{self.channel.value} delivery not implemented")
