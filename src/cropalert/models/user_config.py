"""Pydantic models for per-user notification preferences and push subscriptions."""

import re
from datetime import time

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from cropalert.models.common import UtcDatetime
from cropalert.models.enums import AlertFrequency, NotificationType

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class NotificationPreferences(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    weather_alerts: bool = Field(True, alias="weatherAlerts")
    price_alerts: bool = Field(True, alias="priceAlerts")
    seasonal_tips: bool = Field(True, alias="seasonalTips")
    government_updates: bool = Field(True, alias="governmentUpdates")
    disease_alerts: bool = Field(True, alias="diseaseAlerts")
    irrigation_reminders: bool = Field(True, alias="irrigationReminders")

    def allows(self, notification_type: NotificationType) -> bool:
        """Whether the user opted in to this notification type. ``general`` is always allowed."""
        toggle = _TYPE_TOGGLES.get(notification_type)
        if toggle is None:
            return True
        return getattr(self, toggle)


_TYPE_TOGGLES = {
    NotificationType.WEATHER: "weather_alerts",
    NotificationType.PRICE: "price_alerts",
    NotificationType.SEASONAL: "seasonal_tips",
    NotificationType.GOVERNMENT: "government_updates",
    NotificationType.DISEASE: "disease_alerts",
    NotificationType.IRRIGATION: "irrigation_reminders",
}


class FarmLocation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    state: str
    district: str


class PriceThreshold(BaseModel):
    model_config = ConfigDict(extra="forbid")

    min: float
    max: float

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.min > self.max:
            raise ValueError("min must not exceed max")
        return self


class QuietHours(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    start: str = "22:00"
    end: str = "06:00"

    @field_validator("start", "end")
    @classmethod
    def _check_hhmm(cls, value: str) -> str:
        if not _HHMM.match(value):
            raise ValueError("expected HH:MM")
        return value

    def contains(self, moment: time) -> bool:
        """True when ``moment`` falls inside the window. Windows may wrap midnight."""
        if not self.enabled:
            return False
        start = time.fromisoformat(self.start)
        end = time.fromisoformat(self.end)
        moment = moment.replace(second=0, microsecond=0, tzinfo=None)
        if start == end:
            return False
        if start < end:
            return start <= moment < end
        return moment >= start or moment < end


class NotificationConfig(BaseModel):
    """Per-user delivery preferences. Replaced wholesale on update."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1, max_length=200)
    preferences: NotificationPreferences = Field(default_factory=NotificationPreferences)
    location: FarmLocation | None = None
    crops: list[str] = Field(default_factory=list)
    price_thresholds: dict[str, PriceThreshold] = Field(default_factory=dict, alias="priceThresholds")
    alert_frequency: AlertFrequency = Field(AlertFrequency.IMMEDIATE, alias="alertFrequency")
    quiet_hours: QuietHours = Field(default_factory=QuietHours, alias="quietHours")

    @field_validator("user_id")
    @classmethod
    def _strip_user_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("userId must not be blank")
        return value


class PushKeys(BaseModel):
    model_config = ConfigDict(extra="forbid")

    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


class PushRegistration(BaseModel):
    """What a client hands over after its browser created a push subscription."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    endpoint: str = Field(..., min_length=1)
    keys: PushKeys
    user_agent: str = Field("", alias="userAgent")


class NotificationSubscription(BaseModel):
    """Push delivery endpoint registration. Append-only."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    user_id: str = Field(..., alias="userId")
    endpoint: str
    keys: PushKeys
    device: str
    browser: str
    subscribed_at: UtcDatetime = Field(..., alias="subscribedAt")
    is_active: bool = Field(True, alias="isActive")
