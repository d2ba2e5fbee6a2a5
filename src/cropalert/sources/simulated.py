"""Simulated event sources for local development and demos.

Stand-ins for the real weather, market, crop-calendar and government feeds.
Randomness and time are injectable so tests can drive them deterministically.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from cropalert.models.enums import (
    CropImpact,
    GovernmentUpdateType,
    PriceTrigger,
    Season,
    TipCategory,
    TipImportance,
    WeatherAlertType,
    WeatherSeverity,
)
from cropalert.models.events import (
    ContactInfo,
    CropImpactAssessment,
    GovernmentUpdate,
    PriceAlert,
    SeasonalTip,
    WeatherAlert,
)
from cropalert.sources.base import EventSource

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class _SimulatedSource(EventSource):
    def __init__(self, rng: random.Random | None = None, clock: Clock | None = None):
        self._rng = rng or random.Random()
        self._clock = clock or _utcnow


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------


class SimulatedWeatherSource(_SimulatedSource):
    source_type = "weather"
    probability = 0.10

    _ALERT_TYPES = [
        WeatherAlertType.STORM,
        WeatherAlertType.RAIN,
        WeatherAlertType.DROUGHT,
        WeatherAlertType.FROST,
        WeatherAlertType.HEATWAVE,
    ]
    _SEVERITIES = [WeatherSeverity.MODERATE, WeatherSeverity.SEVERE]

    async def poll(self) -> list[WeatherAlert]:
        if self._rng.random() >= self.probability:
            return []
        now = self._clock()
        return [
            WeatherAlert(
                id=f"weather_{_millis(now)}",
                alert_type=self._rng.choice(self._ALERT_TYPES),
                severity=self._rng.choice(self._SEVERITIES),
                start_time=now,
                end_time=now + timedelta(hours=24),
                affected_area="Local region",
                description="Severe weather conditions expected in your area",
                recommendations=[
                    "Secure loose farm equipment",
                    "Check drainage systems",
                    "Monitor crop conditions closely",
                ],
                impact_on_crops=[
                    CropImpactAssessment(
                        crop="Rice",
                        impact=CropImpact.MODERATE,
                        recommendations=["Ensure proper drainage", "Monitor for diseases"],
                    )
                ],
            )
        ]


# ---------------------------------------------------------------------------
# Market prices
# ---------------------------------------------------------------------------


class SimulatedPriceSource(_SimulatedSource):
    source_type = "price"
    probability = 0.15

    _COMMODITIES = ["Rice", "Wheat", "Onion", "Potato"]

    async def poll(self) -> list[PriceAlert]:
        if self._rng.random() >= self.probability:
            return []
        now = self._clock()
        commodity = self._rng.choice(self._COMMODITIES)
        previous_price = 2000 + self._rng.random() * 3000
        change = (self._rng.random() - 0.5) * 500
        current_price = previous_price + change

        return [
            PriceAlert(
                id=f"price_{_millis(now)}",
                commodity=commodity,
                variety="Standard",
                current_price=round(current_price),
                previous_price=round(previous_price),
                change=round(change),
                change_percentage=round(change / previous_price * 100 * 10) / 10,
                market_name="Local Mandi",
                alert_trigger=PriceTrigger.SUDDEN_SPIKE if abs(change) > 200 else PriceTrigger.THRESHOLD_REACHED,
                recommendations=[
                    "Consider selling if holding inventory" if change > 0 else "Monitor for buying opportunities",
                    "Check multiple markets for best prices",
                    "Review storage and transportation costs",
                ],
            )
        ]


# ---------------------------------------------------------------------------
# Seasonal tips
# ---------------------------------------------------------------------------

SEASONAL_TIPS: list[dict] = [
    {
        "season": Season.MONSOON,
        "months": [6, 7, 8, 9],
        "tips": [
            {
                "category": TipCategory.IRRIGATION,
                "title": "Monitor Rainfall and Drainage",
                "tip": "Ensure proper drainage in fields to prevent waterlogging during heavy rains",
                "timing": "During monsoon season",
                "importance": TipImportance.CRITICAL,
                "applicable_crops": ["Rice", "Sugarcane", "Cotton"],
            },
            {
                "category": TipCategory.PEST_CONTROL,
                "title": "Pest Management in Humid Conditions",
                "tip": "Increase vigilance for pest attacks as humidity favors pest multiplication",
                "timing": "Weekly monitoring required",
                "importance": TipImportance.RECOMMENDED,
                "applicable_crops": ["Rice", "Maize", "Vegetables"],
            },
        ],
    },
    {
        "season": Season.WINTER,
        "months": [12, 1, 2],
        "tips": [
            {
                "category": TipCategory.PLANTING,
                "title": "Winter Crop Sowing",
                "tip": "Optimal time for sowing winter crops like wheat, mustard, and gram",
                "timing": "November-December",
                "importance": TipImportance.CRITICAL,
                "applicable_crops": ["Wheat", "Mustard", "Gram"],
            },
        ],
    },
]


class SimulatedSeasonalSource(_SimulatedSource):
    source_type = "seasonal"
    probability = 0.10

    async def poll(self) -> list[SeasonalTip]:
        now = self._clock()
        month = now.month
        week = math.ceil(now.day / 7)
        tips: list[SeasonalTip] = []

        for season in SEASONAL_TIPS:
            if month not in season["months"]:
                continue
            for index, entry in enumerate(season["tips"]):
                if self._rng.random() >= self.probability:
                    continue
                tips.append(
                    SeasonalTip(
                        id=f"tip_{month}_{week}_{index}",
                        season=season["season"],
                        month=month,
                        week=week,
                        **entry,
                    )
                )
        return tips


# ---------------------------------------------------------------------------
# Government schemes
# ---------------------------------------------------------------------------

SCHEMES = [
    "PM-KISAN",
    "Pradhan Mantri Fasal Bima Yojana",
    "Soil Health Card Scheme",
    "National Agriculture Market (e-NAM)",
]

SCHEME_DESCRIPTIONS: dict[str, dict[GovernmentUpdateType, str]] = {
    "PM-KISAN": {
        GovernmentUpdateType.DEADLINE_REMINDER: "Reminder: Complete your KYC verification to receive the next installment",
        GovernmentUpdateType.PAYMENT_RELEASED: "PM-KISAN 15th installment of ₹2,000 has been released",
        GovernmentUpdateType.APPLICATION_OPEN: "New registrations are now open for PM-KISAN scheme",
    },
    "Pradhan Mantri Fasal Bima Yojana": {
        GovernmentUpdateType.DEADLINE_REMINDER: "Last date to enroll for Kharif season crop insurance",
        GovernmentUpdateType.PAYMENT_RELEASED: "Crop insurance claims have been processed and payments released",
        GovernmentUpdateType.APPLICATION_OPEN: "Enrollment open for Rabi season crop insurance",
    },
}

DEFAULT_SCHEME_DESCRIPTION = "Government scheme update available"


def describe_scheme_update(scheme: str, update_type: GovernmentUpdateType) -> str:
    return SCHEME_DESCRIPTIONS.get(scheme, {}).get(update_type, DEFAULT_SCHEME_DESCRIPTION)


class SimulatedGovernmentSource(_SimulatedSource):
    source_type = "government"
    probability = 0.05

    _UPDATE_TYPES = [
        GovernmentUpdateType.DEADLINE_REMINDER,
        GovernmentUpdateType.PAYMENT_RELEASED,
        GovernmentUpdateType.APPLICATION_OPEN,
    ]

    async def poll(self) -> list[GovernmentUpdate]:
        if self._rng.random() >= self.probability:
            return []
        now = self._clock()
        scheme = self._rng.choice(SCHEMES)
        update_type = self._rng.choice(self._UPDATE_TYPES)
        deadline = now + timedelta(days=7) if update_type == GovernmentUpdateType.DEADLINE_REMINDER else None

        return [
            GovernmentUpdate(
                id=f"gov_{_millis(now)}",
                scheme=scheme,
                update_type=update_type,
                title=f"{scheme}: {update_type.value.replace('-', ' ', 1).upper()}",
                description=describe_scheme_update(scheme, update_type),
                deadline=deadline,
                contact_info=ContactInfo(office="District Agriculture Office", phone="+91-1800-180-1551"),
            )
        ]
