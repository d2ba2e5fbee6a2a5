"""Push permission endpoint."""

from fastapi import APIRouter

from cropalert.dependencies import Engine

router = APIRouter(prefix="/push", tags=["Push"])


@router.post("/permission")
async def request_permission(engine: Engine):
    """Ask the platform for push permission. Never prompts again once granted."""
    granted = await engine.request_permission()
    return {
        "granted": granted,
        "supported": engine.permission.supported,
        "state": engine.permission.state.value,
    }
