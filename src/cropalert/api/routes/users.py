"""Per-user config, push subscription and analytics endpoints."""

from typing import Any

from fastapi import APIRouter, Body

from cropalert.dependencies import Engine
from cropalert.errors.exceptions import NotFoundError, ValidationError
from cropalert.models.enums import Timeframe
from cropalert.models.user_config import PushRegistration

router = APIRouter(prefix="/users/{user_id}", tags=["Users"])


@router.put("/config")
async def put_config(user_id: str, engine: Engine, payload: dict[str, Any] = Body(...)):
    """Replace the user's notification config."""
    body_user = payload.setdefault("userId", user_id)
    if body_user != user_id:
        raise ValidationError(
            "userId in body does not match path",
            details={"path": user_id, "body": body_user},
        )
    result = await engine.update_config(payload)
    config = await engine.get_config(user_id)
    return {
        "config": config.model_dump(mode="json", by_alias=True),
        "persisted": bool(result and result.ok),
    }


@router.get("/config")
async def get_config(user_id: str, engine: Engine):
    config = await engine.get_config(user_id)
    if config is None:
        raise NotFoundError("Notification config", user_id)
    return config.model_dump(mode="json", by_alias=True)


@router.post("/push-subscriptions")
async def subscribe_push(
    user_id: str,
    engine: Engine,
    registration: PushRegistration | None = Body(None),
):
    subscribed = await engine.subscribe_push(user_id, registration)
    return {"userId": user_id, "subscribed": subscribed}


@router.get("/analytics")
async def analytics(user_id: str, engine: Engine, timeframe: Timeframe = Timeframe.WEEK):
    result = await engine.analytics(user_id, timeframe)
    return result.model_dump(mode="json", by_alias=True)
