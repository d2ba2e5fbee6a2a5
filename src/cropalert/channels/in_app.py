"""In-app channel. The UI reads notifications from the store, so delivery is immediate."""

from __future__ import annotations

from cropalert.channels.base import ChannelAdapter
from cropalert.models.enums import ChannelKind
from cropalert.models.notification import Notification


class InAppChannel(ChannelAdapter):
    channel = ChannelKind.IN_APP

    async def deliver(self, notification: Notification) -> bool:
        return True
