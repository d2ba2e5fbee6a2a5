"""Pydantic models shared across the API: error envelope and operation results."""

from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from cropalert.models.enums import ChannelKind


def _assume_utc(value: datetime) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Naive input is read as UTC so every stored instant compares against the aware clock.
UtcDatetime = Annotated[datetime, AfterValidator(_assume_utc)]


class ErrorDetail(BaseModel):
    """Error detail in API responses."""

    model_config = ConfigDict(extra="forbid")

    code: str
    message: str
    details: dict[str, Any] | list[Any] | str | None = None
    trace_id: str = Field(..., min_length=8, max_length=128)
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response envelope."""

    model_config = ConfigDict(extra="forbid")

    schema_version: str = "1.0"
    error: ErrorDetail


class StorageResult(BaseModel):
    """Outcome of a durable storage read or write. Failures never raise."""

    model_config = ConfigDict(extra="forbid")

    ok: bool
    key: str
    error: str | None = None


class DeliveryOutcome(BaseModel):
    """Outcome of a single channel delivery attempt."""

    model_config = ConfigDict(extra="forbid")

    notification_id: str
    channel: ChannelKind
    delivered: bool
    skipped: bool = False
    error: str | None = None


class TickResult(BaseModel):
    """Outcome of one poll of one event source."""

    model_config = ConfigDict(extra="forbid")

    source_type: str
    started_at: datetime
    ok: bool
    events: int = 0
    notifications: int = 0
    error: str | None = None
