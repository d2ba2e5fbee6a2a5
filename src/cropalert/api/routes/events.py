"""Domain event ingestion endpoint.

Lets an upstream feed push weather, price, seasonal or government events
instead of waiting for the scheduler to poll.
"""

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from cropalert.dependencies import Engine
from cropalert.models.events import DomainEvent

router = APIRouter(tags=["Events"])


class IngestRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    events: list[DomainEvent] = Field(..., min_length=1)
    user_id: str | None = Field(None, alias="userId")


@router.post("/events", status_code=201)
async def ingest_events(body: IngestRequest, engine: Engine):
    created = await engine.ingest(body.events, user_id=body.user_id)
    return {
        "received": len(body.events),
        "created": len(created),
        "notifications": [n.model_dump(mode="json", by_alias=True) for n in created],
    }
