"""Redis fan-out of notification events to other processes."""

import json
import logging

from cropalert.models.notification import Notification

logger = logging.getLogger(__name__)

# Redis pub/sub channel prefix
CHANNEL_PREFIX = "cropalert:events"


def channel_for(user_id: str | None) -> str:
    if user_id:
        return f"{CHANNEL_PREFIX}:user:{user_id}"
    return f"{CHANNEL_PREFIX}:broadcast"


async def publish_notification(redis, notification: Notification) -> bool:
    """Publish a new notification to its user channel, or broadcast when unowned.

    Returns:
        True if the message was handed to Redis.
    """
    if redis is None:
        return False

    event = json.dumps({
        "type": "notification.created",
        "notification": notification.model_dump(mode="json", by_alias=True),
    })
    try:
        await redis.publish(channel_for(notification.user_id), event)
    except Exception as exc:
        logger.warning("Failed to publish %s to Redis: %s", notification.id, exc)
        return False
    return True
