"""Notification listing, read state and housekeeping endpoints."""

from fastapi import APIRouter, Query, Response

from cropalert.dependencies import Engine
from cropalert.models.enums import NotificationCategory, NotificationType
from cropalert.models.notification import NotificationFilters

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
async def list_notifications(
    engine: Engine,
    user_id: str | None = None,
    type: NotificationType | None = None,
    category: NotificationCategory | None = None,
    is_read: bool | None = None,
    limit: int | None = Query(None, ge=1),
):
    """Most recent first. Without ``user_id`` every notification is listed."""
    filters = NotificationFilters(
        user_id=user_id, type=type, category=category, is_read=is_read, limit=limit
    )
    notifications = await engine.query(filters)
    return [n.model_dump(mode="json", by_alias=True) for n in notifications]


@router.get("/unread-count")
async def unread_count(engine: Engine, user_id: str | None = None):
    return {"userId": user_id, "unread": await engine.unread_count(user_id)}


@router.post("/read-all")
async def mark_all_read(engine: Engine, user_id: str = Query(..., min_length=1)):
    changed = await engine.mark_all_read(user_id)
    return {"userId": user_id, "marked": changed}


@router.post("/cleanup")
async def cleanup(engine: Engine):
    """Evict expired notifications now instead of waiting for the cleanup job."""
    return {"evicted": await engine.cleanup()}


@router.post("/{notification_id}/read")
async def mark_read(notification_id: str, engine: Engine):
    found = await engine.mark_read(notification_id)
    return {"id": notification_id, "found": found, "isRead": found}


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(notification_id: str, engine: Engine):
    await engine.delete(notification_id)
    return Response(status_code=204)
