"""String enums for the notification engine."""

from enum import StrEnum


class NotificationType(StrEnum):
    WEATHER = "weather"
    PRICE = "price"
    SEASONAL = "seasonal"
    GOVERNMENT = "government"
    DISEASE = "disease"
    IRRIGATION = "irrigation"
    GENERAL = "general"


class NotificationCategory(StrEnum):
    ALERT = "alert"
    WARNING = "warning"
    INFO = "info"
    TIP = "tip"
    UPDATE = "update"


class Priority(StrEnum):
    """Declared lowest to highest. Comparisons between members follow ``rank``, not the string value."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(Priority).index(self)

    def __lt__(self, other):
        if isinstance(other, Priority):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, Priority):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, Priority):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, Priority):
            return self.rank >= other.rank
        return NotImplemented


class ChannelKind(StrEnum):
    PUSH = "push"
    SMS = "sms"
    EMAIL = "email"
    IN_APP = "in-app"


class AlertFrequency(StrEnum):
    IMMEDIATE = "immediate"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"


class Timeframe(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class PermissionState(StrEnum):
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class WeatherAlertType(StrEnum):
    STORM = "storm"
    RAIN = "rain"
    DROUGHT = "drought"
    FROST = "frost"
    HEATWAVE = "heatwave"
    HAIL = "hail"
    WIND = "wind"


class WeatherSeverity(StrEnum):
    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"
    EXTREME = "extreme"


class CropImpact(StrEnum):
    MINIMAL = "minimal"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    SEVERE = "severe"


class PriceTrigger(StrEnum):
    THRESHOLD_REACHED = "threshold-reached"
    SUDDEN_SPIKE = "sudden-spike"
    SUDDEN_DROP = "sudden-drop"
    VOLATILITY = "volatility"
    TARGET_ACHIEVED = "target-achieved"


class Season(StrEnum):
    SPRING = "spring"
    SUMMER = "summer"
    MONSOON = "monsoon"
    WINTER = "winter"


class TipCategory(StrEnum):
    PLANTING = "planting"
    IRRIGATION = "irrigation"
    FERTILIZATION = "fertilization"
    PEST_CONTROL = "pest-control"
    HARVESTING = "harvesting"
    POST_HARVEST = "post-harvest"


class TipImportance(StrEnum):
    OPTIONAL = "optional"
    RECOMMENDED = "recommended"
    CRITICAL = "critical"


class GovernmentUpdateType(StrEnum):
    NEW_SCHEME = "new-scheme"
    POLICY_CHANGE = "policy-change"
    DEADLINE_REMINDER = "deadline-reminder"
    APPLICATION_OPEN = "application-open"
    PAYMENT_RELEASED = "payment-released"
