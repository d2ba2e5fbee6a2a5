"""Delivery, read and engagement statistics over a rolling window.

Pure functions over a snapshot of the store; nothing here mutates.
"""

from __future__ import annotations

import calendar
from collections import Counter
from datetime import datetime, timedelta

from cropalert.models.analytics import DeliveryCounts, Engagement, NotificationAnalytics
from cropalert.models.enums import NotificationType, Priority, Timeframe
from cropalert.models.notification import Notification

DEFAULT_ENGAGING_TYPE = NotificationType.WEATHER.value
DEFAULT_BEST_TIME = "08:00"


def window_start(now: datetime, timeframe: Timeframe) -> datetime:
    """Start of the analytics window. A month is one calendar month back, day clamped."""
    if timeframe == Timeframe.DAY:
        return now - timedelta(days=1)
    if timeframe == Timeframe.WEEK:
        return now - timedelta(days=7)
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def _rate(numerator: int, denominator: int) -> float:
    if denominator == 0:
        return 0.0
    return round(numerator / denominator * 100, 2)


def _fold(notifications: list[Notification], key) -> dict[str, DeliveryCounts]:
    grouped: dict[str, DeliveryCounts] = {}
    for n in notifications:
        counts = grouped.setdefault(key(n), DeliveryCounts())
        counts.sent += 1
        if n.was_delivered():
            counts.delivered += 1
        if n.is_read:
            counts.read += 1
    return grouped


def most_engaging_type(by_type: dict[str, DeliveryCounts]) -> str:
    """Type with the most reads; ties go to the earlier NotificationType member."""
    best: str | None = None
    best_reads = -1
    for member in NotificationType:
        counts = by_type.get(member.value)
        if counts is None:
            continue
        if counts.read > best_reads:
            best, best_reads = member.value, counts.read
    return best or DEFAULT_ENGAGING_TYPE


def best_time_to_send(notifications: list[Notification]) -> str:
    """Most common creation hour among read notifications, as ``HH:00``."""
    hours = Counter(n.timestamp.hour for n in notifications if n.is_read)
    if not hours:
        return DEFAULT_BEST_TIME
    # ties go to the earliest hour
    top = max(hours.values())
    hour = min(h for h, count in hours.items() if count == top)
    return f"{hour:02d}:00"


def compute_analytics(
    notifications: list[Notification],
    user_id: str,
    timeframe: Timeframe,
    now: datetime,
) -> NotificationAnalytics:
    start = window_start(now, timeframe)
    window = [
        n for n in notifications
        if n.timestamp >= start and n.is_visible_to(user_id)
    ]

    total_sent = len(window)
    total_delivered = sum(1 for n in window if n.was_delivered())
    total_read = sum(1 for n in window if n.is_read)

    by_type = _fold(window, lambda n: n.type.value)
    by_priority_unordered = _fold(window, lambda n: n.priority.value)
    by_priority = {
        p.value: by_priority_unordered[p.value]
        for p in Priority
        if p.value in by_priority_unordered
    }

    return NotificationAnalytics(
        user_id=user_id,
        timeframe=timeframe,
        window_start=start,
        window_end=now,
        total_sent=total_sent,
        total_delivered=total_delivered,
        total_read=total_read,
        delivery_rate=_rate(total_delivered, total_sent),
        read_rate=_rate(total_read, total_delivered),
        by_type=by_type,
        by_priority=by_priority,
        engagement=Engagement(
            most_engaging_type=most_engaging_type(by_type),
            best_time_to_send=best_time_to_send(window),
            type_read_rates={t: _rate(c.read, c.sent) for t, c in by_type.items()},
        ),
    )
