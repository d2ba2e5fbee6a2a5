"""In-process pub/sub for newly appended notifications.

SSE handlers subscribe a queue; in-process consumers register callbacks.
Not shared across processes, see ``publisher`` for Redis fan-out.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

from cropalert.models.notification import Notification

logger = logging.getLogger(__name__)

Listener = Callable[[Notification], Awaitable[None] | None]


class NotificationBus:
    def __init__(self, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._queues: dict[asyncio.Queue, str | None] = {}
        self._listeners: list[Listener] = []

    def subscribe(self, user_id: str | None = None) -> asyncio.Queue:
        """Return a queue receiving every notification visible to ``user_id``."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        self._queues[queue] = user_id
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._queues.pop(queue, None)

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def subscriber_count(self) -> int:
        return len(self._queues)

    async def publish(self, notification: Notification) -> int:
        """Deliver to queues and listeners. Returns how many received it."""
        received = 0
        for queue, user_id in list(self._queues.items()):
            if not notification.is_visible_to(user_id):
                continue
            try:
                queue.put_nowait(notification.model_copy(deep=True))
                received += 1
            except asyncio.QueueFull:
                logger.debug("Subscriber queue full, dropping %s", notification.id)

        for listener in list(self._listeners):
            try:
                outcome = listener(notification.model_copy(deep=True))
                if inspect.isawaitable(outcome):
                    await outcome
                received += 1
            except Exception as exc:
                logger.warning("Notification listener failed for %s: %s", notification.id, exc)
        return received
