"""DurableStorage: versioned key/value persistence for the notification store.

Layout:
    notifications                  list of the most recent notifications
    notificationConfig_<user_id>   one NotificationConfig per user
    pushSubscriptions              list of NotificationSubscription

Nothing in here raises to the caller. Writes report a ``StorageResult`` and
reads fall back to "not found" after logging. Writes are serialized, so two
first-time writes to one key cannot race on the insert.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cropalert.models.common import StorageResult
from cropalert.models.notification import Notification
from cropalert.models.user_config import NotificationConfig, NotificationSubscription
from cropalert.repositories.storage_repo import StorageRepository

logger = logging.getLogger(__name__)

NOTIFICATIONS_KEY = "notifications"
SUBSCRIPTIONS_KEY = "pushSubscriptions"
CONFIG_KEY_PREFIX = "notificationConfig_"


def config_key(user_id: str) -> str:
    return f"{CONFIG_KEY_PREFIX}{user_id}"


class DurableStorage:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], schema_version: str = "1"):
        self._session_factory = session_factory
        self.schema_version = schema_version
        self._write_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Raw access
    # ------------------------------------------------------------------

    async def _write(self, key: str, value: dict | list) -> StorageResult:
        async with self._write_lock:
            try:
                async with self._session_factory() as session:
                    await StorageRepository(session).put(key, value, self.schema_version)
                    await session.commit()
            except Exception as exc:
                logger.error("Failed to persist %s: %s", key, exc)
                return StorageResult(ok=False, key=key, error=str(exc))
        return StorageResult(ok=True, key=key)

    async def _read(self, key: str) -> dict | list | None:
        try:
            async with self._session_factory() as session:
                row = await StorageRepository(session).get(key)
        except Exception as exc:
            logger.error("Failed to load %s: %s", key, exc)
            return None
        if row is None:
            return None
        if row.schema_version != self.schema_version:
            logger.warning(
                "Ignoring %s stored with schema version %s (expected %s)",
                key, row.schema_version, self.schema_version,
            )
            return None
        return row.value

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def save_notifications(self, notifications: list[Notification]) -> StorageResult:
        payload = [n.model_dump(mode="json", by_alias=True) for n in notifications]
        return await self._write(NOTIFICATIONS_KEY, payload)

    async def load_notifications(self) -> list[Notification]:
        """Return stored notifications in stored (most-recent-first) order, skipping bad records."""
        raw = await self._read(NOTIFICATIONS_KEY)
        if not isinstance(raw, list):
            return []
        notifications = []
        for item in raw:
            try:
                notifications.append(Notification.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping unreadable stored notification: %s", exc.errors()[:1])
        return notifications

    # ------------------------------------------------------------------
    # Configs
    # ------------------------------------------------------------------

    async def save_config(self, config: NotificationConfig) -> StorageResult:
        return await self._write(config_key(config.user_id), config.model_dump(mode="json", by_alias=True))

    async def load_config(self, user_id: str) -> NotificationConfig | None:
        raw = await self._read(config_key(user_id))
        if raw is None:
            return None
        try:
            return NotificationConfig.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Stored config for %s is unreadable: %s", user_id, exc.errors()[:1])
            return None

    # ------------------------------------------------------------------
    # Push subscriptions
    # ------------------------------------------------------------------

    async def save_subscriptions(self, subscriptions: list[NotificationSubscription]) -> StorageResult:
        payload = [s.model_dump(mode="json", by_alias=True) for s in subscriptions]
        return await self._write(SUBSCRIPTIONS_KEY, payload)

    async def load_subscriptions(self) -> list[NotificationSubscription]:
        raw = await self._read(SUBSCRIPTIONS_KEY)
        if not isinstance(raw, list):
            return []
        subscriptions = []
        for item in raw:
            try:
                subscriptions.append(NotificationSubscription.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping unreadable push subscription: %s", exc.errors()[:1])
        return subscriptions
