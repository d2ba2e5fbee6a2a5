"""Pydantic models for derived notification analytics."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cropalert.models.enums import Timeframe


class DeliveryCounts(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sent: int = 0
    delivered: int = 0
    read: int = 0


class Engagement(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    most_engaging_type: str = Field(alias="mostEngagingType")
    best_time_to_send: str = Field(alias="bestTimeToSend")
    type_read_rates: dict[str, float] = Field(default_factory=dict, alias="typeReadRates")


class NotificationAnalytics(BaseModel):
    """Recomputed on every request; never stored."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    user_id: str = Field(alias="userId")
    timeframe: Timeframe
    window_start: datetime = Field(alias="windowStart")
    window_end: datetime = Field(alias="windowEnd")
    total_sent: int = Field(alias="totalSent")
    total_delivered: int = Field(alias="totalDelivered")
    total_read: int = Field(alias="totalRead")
    total_clicked: int = Field(0, alias="totalClicked")
    delivery_rate: float = Field(alias="deliveryRate")
    read_rate: float = Field(alias="readRate")
    click_rate: float = Field(0.0, alias="clickRate")
    by_type: dict[str, DeliveryCounts] = Field(default_factory=dict, alias="byType")
    by_priority: dict[str, DeliveryCounts] = Field(default_factory=dict, alias="byPriority")
    engagement: Engagement
