"""Delivery channel adapters keyed by channel kind."""

from cropalert.channels.base import ChannelAdapter, UnsupportedChannel
from cropalert.channels.in_app import InAppChannel
from cropalert.channels.push import PushChannel, PushPermission
from cropalert.models.enums import ChannelKind


def build_channels(push: PushChannel) -> dict[ChannelKind, ChannelAdapter]:
    """Return the adapter for every channel kind. SMS and email always fail."""
    return {
        ChannelKind.PUSH: push,
        ChannelKind.IN_APP: InAppChannel(),
        ChannelKind.SMS: UnsupportedChannel(ChannelKind.SMS),
        ChannelKind.EMAIL: UnsupportedChannel(ChannelKind.EMAIL),
    }


__all__ = [
    "ChannelAdapter",
    "InAppChannel",
    "PushChannel",
    "PushPermission",
    "UnsupportedChannel",
    "build_channels",
]
