"""NotificationStore: bounded, most-recent-first notification collection.

Also owns per-user configs and push subscriptions. Every mutation of the
notification collection runs under one ``asyncio.Lock``; readers always get
deep copies, never the internal records.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from cropalert.models.common import StorageResult
from cropalert.models.notification import Notification, NotificationFilters
from cropalert.models.user_config import NotificationConfig, NotificationSubscription
from cropalert.services.storage import DurableStorage

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100
DEFAULT_PERSIST_LIMIT = 50


class NotificationStore:
    def __init__(
        self,
        storage: DurableStorage | None = None,
        capacity: int = DEFAULT_CAPACITY,
        persist_limit: int = DEFAULT_PERSIST_LIMIT,
    ):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._storage = storage
        self.capacity = capacity
        self.persist_limit = persist_limit
        self._notifications: list[Notification] = []
        self._configs: dict[str, NotificationConfig] = {}
        self._subscriptions: list[NotificationSubscription] = []
        self._lock = asyncio.Lock()
        self._persist_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> int:
        """Load persisted notifications and subscriptions. Returns the notification count."""
        if self._storage is None:
            return 0
        stored = await self._storage.load_notifications()
        subscriptions = await self._storage.load_subscriptions()
        async with self._lock:
            self._notifications = stored[: self.capacity]
            self._subscriptions = subscriptions
        logger.info(
            "Loaded %d notifications and %d push subscriptions from storage",
            len(stored), len(subscriptions),
        )
        return len(self._notifications)

    async def persist(self) -> StorageResult | None:
        """Write the most recent notifications to durable storage."""
        if self._storage is None:
            return None
        async with self._persist_lock:
            async with self._lock:
                recent = [n.model_copy(deep=True) for n in self._notifications[: self.persist_limit]]
            return await self._storage.save_notifications(recent)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def append(self, notification: Notification, persist: bool = True) -> StorageResult | None:
        """Insert at the head, dropping the oldest entries beyond capacity."""
        async with self._lock:
            self._notifications.insert(0, notification)
            if len(self._notifications) > self.capacity:
                dropped = len(self._notifications) - self.capacity
                del self._notifications[self.capacity:]
                logger.debug("Store at capacity, dropped %d oldest notifications", dropped)
        if persist:
            return await self.persist()
        return None

    async def query(self, filters: NotificationFilters | None = None) -> list[Notification]:
        filters = filters or NotificationFilters()
        async with self._lock:
            matched = [n for n in self._notifications if filters.matches(n)]
            if filters.limit is not None:
                matched = matched[: filters.limit]
            return [n.model_copy(deep=True) for n in matched]

    async def get(self, notification_id: str) -> Notification | None:
        async with self._lock:
            for n in self._notifications:
                if n.id == notification_id:
                    return n.model_copy(deep=True)
        return None

    async def mark_read(self, notification_id: str) -> bool:
        """Mark one notification read. Returns False when it is not held (not an error)."""
        async with self._lock:
            target = next((n for n in self._notifications if n.id == notification_id), None)
            if target is None:
                return False
            changed = not target.is_read
            target.is_read = True
        if changed:
            await self.persist()
        return True

    async def mark_all_read(self, user_id: str | None) -> int:
        """Mark every notification visible to ``user_id`` read. Returns how many changed."""
        async with self._lock:
            changed = 0
            for n in self._notifications:
                if n.is_visible_to(user_id) and not n.is_read:
                    n.is_read = True
                    changed += 1
        if changed:
            await self.persist()
        return changed

    async def delete(self, notification_id: str) -> bool:
        async with self._lock:
            before = len(self._notifications)
            self._notifications = [n for n in self._notifications if n.id != notification_id]
            removed = len(self._notifications) < before
        if removed:
            await self.persist()
        return removed

    async def unread_count(self, user_id: str | None) -> int:
        async with self._lock:
            return sum(1 for n in self._notifications if not n.is_read and n.is_visible_to(user_id))

    async def evict_expired(self, now: datetime) -> int:
        """Drop notifications whose ``expires_at`` has passed. Returns the eviction count."""
        async with self._lock:
            before = len(self._notifications)
            self._notifications = [n for n in self._notifications if not n.is_expired(now)]
            evicted = before - len(self._notifications)
        if evicted:
            logger.info("Evicted %d expired notifications", evicted)
            await self.persist()
        return evicted

    async def snapshot(self) -> list[Notification]:
        async with self._lock:
            return [n.model_copy(deep=True) for n in self._notifications]

    def __len__(self) -> int:
        return len(self._notifications)

    # ------------------------------------------------------------------
    # Configs
    # ------------------------------------------------------------------

    async def put_config(self, config: NotificationConfig) -> StorageResult | None:
        self._configs[config.user_id] = config.model_copy(deep=True)
        logger.info("Notification config updated for user %s", config.user_id)
        if self._storage is None:
            return None
        return await self._storage.save_config(config)

    async def get_config(self, user_id: str) -> NotificationConfig | None:
        config = self._configs.get(user_id)
        if config is None and self._storage is not None:
            config = await self._storage.load_config(user_id)
            if config is not None:
                self._configs[user_id] = config
        return config.model_copy(deep=True) if config is not None else None

    # ------------------------------------------------------------------
    # Push subscriptions
    # ------------------------------------------------------------------

    async def add_subscription(self, subscription: NotificationSubscription) -> bool:
        """Append a subscription. Returns False if an active one already exists for the endpoint."""
        for existing in self._subscriptions:
            if (
                existing.user_id == subscription.user_id
                and existing.endpoint == subscription.endpoint
                and existing.is_active
            ):
                return False
        self._subscriptions.append(subscription)
        if self._storage is not None:
            await self._storage.save_subscriptions(list(self._subscriptions))
        return True

    def subscriptions(self, user_id: str | None = None) -> list[NotificationSubscription]:
        return [s for s in self._subscriptions if user_id is None or s.user_id == user_id]
