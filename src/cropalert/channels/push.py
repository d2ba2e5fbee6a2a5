"""Push channel: permission state and platform notification construction.

Permission starts as ``default`` and only a call to ``request_permission``
can grant it. Until then push attempts are silent no-ops.
"""

from __future__ import annotations

import inspect
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from cropalert.channels.base import ChannelAdapter
from cropalert.models.enums import ChannelKind, PermissionState, Priority
from cropalert.models.notification import Notification, PlatformNotification
from cropalert.models.user_config import QuietHours

logger = logging.getLogger(__name__)

PermissionPrompt = Callable[[], Awaitable[PermissionState] | PermissionState]
Presenter = Callable[[PlatformNotification], Awaitable[None] | None]
QuietHoursLookup = Callable[[str], Awaitable[QuietHours | None]]


async def _maybe_await(value):
    if inspect.isawaitable(value):
        return await value
    return value


class PushPermission:
    """Tracks whether the user allowed push notifications on this deployment."""

    def __init__(
        self,
        prompt: PermissionPrompt | None = None,
        supported: bool = True,
        state: PermissionState = PermissionState.DEFAULT,
    ):
        self.supported = supported
        self.state = state
        self._prompt = prompt

    @property
    def granted(self) -> bool:
        return self.supported and self.state == PermissionState.GRANTED

    async def request(self) -> bool:
        """Ask for permission unless already granted. Returns the resulting grant."""
        if not self.supported:
            logger.info("Push notifications are not supported on this deployment")
            return False
        if self.state == PermissionState.GRANTED:
            return True
        if self._prompt is None:
            return False
        answer = await _maybe_await(self._prompt())
        self.state = PermissionState(answer)
        logger.info("Push permission resolved to %s", self.state.value)
        return self.state == PermissionState.GRANTED


class PushChannel(ChannelAdapter):
    channel = ChannelKind.PUSH

    def __init__(
        self,
        permission: PushPermission,
        presenter: Presenter | None = None,
        icon: str = "/favicon.ico",
        badge: str = "/badge-72x72.png",
        quiet_hours_lookup: QuietHoursLookup | None = None,
        clock: Callable[[], datetime] | None = None,
        local_timezone: str = "UTC",
        history: int = 100,
    ):
        self.permission = permission
        self._presenter = presenter
        self._icon = icon
        self._badge = badge
        self._quiet_hours_lookup = quiet_hours_lookup
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._tz = ZoneInfo(local_timezone)
        self.shown: deque[PlatformNotification] = deque(maxlen=history)

    def build(self, notification: Notification) -> PlatformNotification:
        return PlatformNotification(
            title=notification.title,
            body=notification.message,
            icon=self._icon,
            badge=self._badge,
            tag=notification.id,
            require_interaction=notification.priority == Priority.CRITICAL,
            data={"notificationId": notification.id, "url": notification.action_url},
        )

    async def _in_quiet_hours(self, notification: Notification) -> bool:
        if notification.user_id is None or self._quiet_hours_lookup is None:
            return False
        if notification.priority >= Priority.CRITICAL:
            return False
        quiet = await self._quiet_hours_lookup(notification.user_id)
        if quiet is None:
            return False
        return quiet.contains(self._clock().astimezone(self._tz).time())

    async def deliver(self, notification: Notification) -> bool:
        if not self.permission.granted:
            return False
        if await self._in_quiet_hours(notification):
            logger.info("Push suppressed during quiet hours for %s", notification.id)
            return False

        platform_notification = self.build(notification)
        if self._presenter is not None:
            await _maybe_await(self._presenter(platform_notification))
        self.shown.append(platform_notification)
        return True
