"""Domain event → Notification normalization.

Pure conversion functions with no side effects or storage access. The caller
(the alert engine) appends the returned Notification to the store.
"""

from __future__ import annotations

from datetime import datetime

from cropalert.models.enums import (
    ChannelKind,
    NotificationCategory,
    NotificationType,
    Priority,
    TipImportance,
    WeatherSeverity,
)
from cropalert.models.events import (
    DomainEvent,
    GovernmentUpdate,
    PriceAlert,
    SeasonalTip,
    WeatherAlert,
)
from cropalert.models.notification import DeliveryChannel, Notification

# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------

# |change_percentage| strictly above these values escalates the notification
PRICE_ALERT_THRESHOLD = 10.0
PRICE_HIGH_PRIORITY_THRESHOLD = 15.0


def _channels(*kinds: ChannelKind) -> list[DeliveryChannel]:
    return [DeliveryChannel(channel=kind, enabled=True, delivered=False) for kind in kinds]


def _bullet_lines(items: list[str]) -> str:
    return "\n".join(items)


def _format_amount(value: float) -> str:
    """Render a price without a trailing .0 for whole amounts."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


# ---------------------------------------------------------------------------
# Per-type builders
# ---------------------------------------------------------------------------


def weather_to_notification(alert: WeatherAlert, now: datetime, user_id: str | None = None) -> Notification:
    extreme = alert.severity == WeatherSeverity.EXTREME
    return Notification(
        id=f"notif_{alert.id}",
        type=NotificationType.WEATHER,
        category=NotificationCategory.ALERT if extreme else NotificationCategory.WARNING,
        priority=Priority.CRITICAL if extreme else Priority.HIGH,
        title=f"Weather Alert: {alert.alert_type.value.upper()}",
        message=alert.description,
        detailed_message=(
            f"{alert.description}\n\nRecommendations:\n{_bullet_lines(alert.recommendations)}"
        ),
        timestamp=now,
        expires_at=alert.end_time,
        is_read=False,
        action_required=True,
        action_text="View Details",
        data=alert,
        user_id=user_id,
        delivery_channels=_channels(ChannelKind.PUSH, ChannelKind.IN_APP),
    )


def price_to_notification(alert: PriceAlert, now: datetime, user_id: str | None = None) -> Notification:
    magnitude = abs(alert.change_percentage)
    increased = alert.change > 0
    change_text = "increased" if increased else "decreased"
    emoji = "\U0001f4c8" if increased else "\U0001f4c9"  # chart up / chart down
    current = _format_amount(alert.current_price)

    return Notification(
        id=f"notif_{alert.id}",
        type=NotificationType.PRICE,
        category=NotificationCategory.ALERT if magnitude > PRICE_ALERT_THRESHOLD else NotificationCategory.INFO,
        priority=Priority.HIGH if magnitude > PRICE_HIGH_PRIORITY_THRESHOLD else Priority.MEDIUM,
        title=f"{emoji} {alert.commodity} Price {change_text.upper()}",
        message=f"{alert.commodity} price {change_text} by {magnitude:g}% to ₹{current}",
        detailed_message=(
            f"Market: {alert.market_name}\n"
            f"Current Price: ₹{current}\n"
            f"Previous Price: ₹{_format_amount(alert.previous_price)}\n"
            f"Change: ₹{_format_amount(alert.change)} ({alert.change_percentage:g}%)\n\n"
            f"Recommendations:\n{_bullet_lines(alert.recommendations)}"
        ),
        timestamp=now,
        is_read=False,
        action_required=True,
        action_text="View Markets",
        related_crop=alert.commodity,
        data=alert,
        user_id=user_id,
        delivery_channels=_channels(ChannelKind.PUSH, ChannelKind.IN_APP),
    )


def seasonal_tip_to_notification(tip: SeasonalTip, now: datetime, user_id: str | None = None) -> Notification:
    return Notification(
        id=f"notif_{tip.id}",
        type=NotificationType.SEASONAL,
        category=NotificationCategory.TIP,
        priority=Priority.HIGH if tip.importance == TipImportance.CRITICAL else Priority.MEDIUM,
        title=f"\U0001f331 Seasonal Tip: {tip.title}",
        message=tip.tip,
        detailed_message=(
            f"{tip.tip}\n\nTiming: {tip.timing}\n"
            f"Applicable Crops: {', '.join(tip.applicable_crops)}"
        ),
        timestamp=now,
        is_read=False,
        action_required=False,
        data=tip,
        user_id=user_id,
        delivery_channels=_channels(ChannelKind.IN_APP, ChannelKind.PUSH),
    )


def government_update_to_notification(
    update: GovernmentUpdate, now: datetime, user_id: str | None = None
) -> Notification:
    has_deadline = update.deadline is not None
    contact = update.contact_info
    contact_text = f"Contact: {contact.office}\nPhone: {contact.phone}" if contact else "Contact: N/A"
    if has_deadline:
        detailed = f"{update.description}\n\nDeadline: {update.deadline.date().isoformat()}\n\n{contact_text}"
    else:
        detailed = f"{update.description}\n\n{contact_text}"

    return Notification(
        id=f"notif_{update.id}",
        type=NotificationType.GOVERNMENT,
        category=NotificationCategory.UPDATE,
        priority=Priority.HIGH if has_deadline else Priority.MEDIUM,
        title=f"\U0001f3db️ {update.title}",
        message=update.description,
        detailed_message=detailed,
        timestamp=now,
        expires_at=update.deadline,
        is_read=False,
        action_required=has_deadline,
        action_text="Apply Now" if has_deadline else "Learn More",
        data=update,
        user_id=user_id,
        delivery_channels=_channels(ChannelKind.PUSH, ChannelKind.IN_APP),
    )


_BUILDERS = {
    "weather": weather_to_notification,
    "price": price_to_notification,
    "seasonal": seasonal_tip_to_notification,
    "government": government_update_to_notification,
}


def normalize(event: DomainEvent, now: datetime, user_id: str | None = None) -> Notification:
    """Map exactly one domain event to exactly one Notification."""
    builder = _BUILDERS.get(event.kind)
    if builder is None:
        raise TypeError(f"Unsupported event kind: {event.kind!r}")
    return builder(event, now, user_id)
