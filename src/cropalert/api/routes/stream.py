"""Server-Sent Events stream of newly created notifications."""

import asyncio
import json
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from cropalert.dependencies import Engine
from cropalert.events.bus import NotificationBus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Stream"])

# Seconds of silence before a keepalive comment is sent
KEEPALIVE_SECONDS = 30.0


def format_event(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


async def _event_generator(
    request: Request,
    bus: NotificationBus,
    user_id: str | None,
    keepalive: float = KEEPALIVE_SECONDS,
) -> AsyncGenerator[str, None]:
    """Yield SSE-formatted notifications visible to ``user_id`` until the client leaves."""
    queue = bus.subscribe(user_id)
    logger.info("SSE subscriber connected (user=%s)", user_id or "all")

    try:
        yield format_event({"type": "connected", "userId": user_id})

        while True:
            if await request.is_disconnected():
                break
            try:
                notification = await asyncio.wait_for(queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue
            yield format_event({
                "type": "notification.created",
                "notification": notification.model_dump(mode="json", by_alias=True),
            })

    except asyncio.CancelledError:
        pass
    finally:
        bus.unsubscribe(queue)
        logger.info("SSE subscriber disconnected (user=%s)", user_id or "all")


@router.get("/stream/notifications")
async def stream_notifications(request: Request, engine: Engine, user_id: str | None = None):
    """Stream new notifications via SSE. Without ``user_id`` every notification is streamed."""
    return StreamingResponse(
        _event_generator(request, engine.bus, user_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
            "Connection": "keep-alive",
        },
    )
