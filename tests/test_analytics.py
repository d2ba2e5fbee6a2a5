"""Tests for notification analytics."""

from datetime import datetime, timedelta, timezone

from cropalert.models.enums import ChannelKind, NotificationCategory, NotificationType, Priority, Timeframe
from cropalert.models.notification import DeliveryChannel, Notification
from cropalert.services.analytics import (
    best_time_to_send,
    compute_analytics,
    most_engaging_type,
    window_start,
)

from conftest import T0


def _n(i: int, delivered: bool = True, read: bool = False, **overrides) -> Notification:
    fields = dict(
        id=f"n{i}",
        type=NotificationType.WEATHER,
        category=NotificationCategory.WARNING,
        priority=Priority.HIGH,
        title="t",
        message="m",
        timestamp=T0 - timedelta(hours=1),
        is_read=read,
        delivery_channels=[
            DeliveryChannel(channel=ChannelKind.PUSH),
            DeliveryChannel(channel=ChannelKind.IN_APP, delivered=delivered),
        ],
    )
    fields.update(overrides)
    return Notification(**fields)


class TestRates:
    def test_delivery_and_read_rates(self):
        notifications = (
            [_n(i, delivered=True, read=True) for i in range(4)]
            + [_n(i, delivered=True) for i in range(4, 7)]
            + [_n(i, delivered=False) for i in range(7, 10)]
        )
        result = compute_analytics(notifications, "u1", Timeframe.WEEK, T0)

        assert result.total_sent == 10
        assert result.total_delivered == 7
        assert result.total_read == 4
        assert result.delivery_rate == 70.0
        assert result.read_rate == 57.14
        assert result.total_clicked == 0
        assert result.click_rate == 0

    def test_empty_window_has_zero_rates(self):
        result = compute_analytics([], "u1", Timeframe.DAY, T0)
        assert result.total_sent == 0
        assert result.delivery_rate == 0
        assert result.read_rate == 0
        assert result.engagement.most_engaging_type == "weather"
        assert result.engagement.best_time_to_send == "08:00"

    def test_breakdowns(self):
        notifications = [
            _n(1, read=True),
            _n(2, type=NotificationType.PRICE, priority=Priority.MEDIUM),
            _n(3, type=NotificationType.PRICE, priority=Priority.MEDIUM, delivered=False),
        ]
        result = compute_analytics(notifications, "u1", Timeframe.WEEK, T0)

        assert result.by_type["price"].sent == 2
        assert result.by_type["price"].delivered == 1
        assert result.by_type["weather"].read == 1
        assert list(result.by_priority) == ["medium", "high"]
        assert result.engagement.type_read_rates == {"weather": 100.0, "price": 0.0}


class TestWindow:
    def test_excludes_older_and_foreign_notifications(self):
        notifications = [
            _n(1),
            _n(2, timestamp=T0 - timedelta(days=8)),
            _n(3, user_id="someone-else"),
            _n(4, user_id="u1"),
        ]
        result = compute_analytics(notifications, "u1", Timeframe.WEEK, T0)
        assert result.total_sent == 2

    def test_day_and_week(self):
        assert window_start(T0, Timeframe.DAY) == T0 - timedelta(days=1)
        assert window_start(T0, Timeframe.WEEK) == T0 - timedelta(days=7)

    def test_month_clamps_day(self):
        now = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)
        assert window_start(now, Timeframe.MONTH) == datetime(2026, 2, 28, 12, 0, tzinfo=timezone.utc)

    def test_month_wraps_year(self):
        now = datetime(2026, 1, 10, tzinfo=timezone.utc)
        assert window_start(now, Timeframe.MONTH) == datetime(2025, 12, 10, tzinfo=timezone.utc)


class TestEngagement:
    def test_most_engaging_type_by_reads(self):
        notifications = [
            _n(1, type=NotificationType.PRICE, read=True),
            _n(2, type=NotificationType.PRICE, read=True),
            _n(3, read=True),
        ]
        result = compute_analytics(notifications, "u1", Timeframe.WEEK, T0)
        assert result.engagement.most_engaging_type == "price"

    def test_tie_goes_to_earlier_type(self):
        from cropalert.models.analytics import DeliveryCounts

        by_type = {
            "government": DeliveryCounts(sent=1, delivered=1, read=1),
            "price": DeliveryCounts(sent=1, delivered=1, read=1),
        }
        assert most_engaging_type(by_type) == "price"

    def test_best_time_is_most_common_read_hour(self):
        notifications = [
            _n(1, read=True, timestamp=T0.replace(hour=7)),
            _n(2, read=True, timestamp=T0.replace(hour=18)),
            _n(3, read=True, timestamp=T0.replace(hour=18)),
            _n(4, read=False, timestamp=T0.replace(hour=6)),
            _n(5, read=False, timestamp=T0.replace(hour=6)),
        ]
        assert best_time_to_send(notifications) == "18:00"
