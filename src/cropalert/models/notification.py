"""Pydantic models for the canonical Notification record."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cropalert.models.common import UtcDatetime
from cropalert.models.enums import ChannelKind, NotificationCategory, NotificationType, Priority
from cropalert.models.events import DomainEvent


class DeliveryChannel(BaseModel):
    """One delivery attempt slot. Only delivered/delivered_at/error change after creation."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    channel: ChannelKind
    enabled: bool = True
    delivered: bool = False
    delivered_at: UtcDatetime | None = Field(None, alias="deliveredAt")
    error: str | None = None


class NotificationLocation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    latitude: float
    longitude: float
    area: str


class Notification(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: str
    type: NotificationType
    category: NotificationCategory
    priority: Priority
    title: str
    message: str
    detailed_message: str | None = Field(None, alias="detailedMessage")
    timestamp: UtcDatetime
    expires_at: UtcDatetime | None = Field(None, alias="expiresAt")
    is_read: bool = Field(False, alias="isRead")
    action_required: bool = Field(False, alias="actionRequired")
    action_text: str | None = Field(None, alias="actionText")
    action_url: str | None = Field(None, alias="actionUrl")
    location: NotificationLocation | None = None
    related_crop: str | None = Field(None, alias="relatedCrop")
    data: DomainEvent | None = None
    # None means the notification is broadcast to every user
    user_id: str | None = Field(None, alias="userId")
    delivery_channels: list[DeliveryChannel] = Field(default_factory=list, alias="deliveryChannels")

    def is_visible_to(self, user_id: str | None) -> bool:
        """True when the notification is broadcast or owned by ``user_id``."""
        return user_id is None or self.user_id is None or self.user_id == user_id

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now

    def was_delivered(self) -> bool:
        """True when at least one channel has delivered."""
        return any(c.delivered for c in self.delivery_channels)

    def channel(self, kind: ChannelKind) -> DeliveryChannel | None:
        for entry in self.delivery_channels:
            if entry.channel == kind:
                return entry
        return None


class NotificationFilters(BaseModel):
    """Query filters, AND-combined. ``limit`` applies after filtering."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    type: NotificationType | None = None
    category: NotificationCategory | None = None
    is_read: bool | None = Field(None, alias="isRead")
    limit: int | None = Field(None, ge=1)
    user_id: str | None = Field(None, alias="userId")

    def matches(self, notification: Notification) -> bool:
        if self.type is not None and notification.type != self.type:
            return False
        if self.category is not None and notification.category != self.category:
            return False
        if self.is_read is not None and notification.is_read != self.is_read:
            return False
        return notification.is_visible_to(self.user_id)


class PlatformNotification(BaseModel):
    """What the push channel hands to the device presenter."""

    model_config = ConfigDict(extra="forbid")

    title: str
    body: str
    icon: str
    badge: str
    tag: str
    require_interaction: bool = False
    data: dict = Field(default_factory=dict)
