"""Domain events emitted by event sources.

Each event carries a ``kind`` literal so a ``DomainEvent`` can be parsed as a
discriminated union and stored as a Notification's typed ``data`` payload.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from cropalert.models.common import UtcDatetime
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


class CropImpactAssessment(BaseModel):
    model_config = ConfigDict(extra="forbid")

    crop: str
    impact: CropImpact
    recommendations: list[str] = Field(default_factory=list)


class WeatherAlert(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    kind: Literal["weather"] = "weather"
    id: str
    alert_type: WeatherAlertType = Field(alias="alertType")
    severity: WeatherSeverity
    start_time: UtcDatetime = Field(alias="startTime")
    end_time: UtcDatetime = Field(alias="endTime")
    affected_area: str = Field(alias="affectedArea")
    description: str
    recommendations: list[str] = Field(default_factory=list)
    impact_on_crops: list[CropImpactAssessment] = Field(default_factory=list, alias="impactOnCrops")


class PriceAlert(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    kind: Literal["price"] = "price"
    id: str
    commodity: str
    variety: str = "Standard"
    current_price: float = Field(alias="currentPrice")
    previous_price: float = Field(alias="previousPrice")
    change: float
    change_percentage: float = Field(alias="changePercentage")
    market_name: str = Field(alias="marketName")
    alert_trigger: PriceTrigger = Field(alias="alertTrigger")
    recommendations: list[str] = Field(default_factory=list)


class TipResources(BaseModel):
    model_config = ConfigDict(extra="forbid")

    videos: list[str] | None = None
    articles: list[str] | None = None
    contacts: list[str] | None = None


class SeasonalTip(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    kind: Literal["seasonal"] = "seasonal"
    id: str
    season: Season
    month: int = Field(..., ge=1, le=12)
    week: int = Field(..., ge=1, le=5)
    category: TipCategory
    applicable_crops: list[str] = Field(default_factory=list, alias="applicableCrops")
    title: str
    tip: str
    timing: str
    importance: TipImportance
    resources: TipResources | None = None


class ContactInfo(BaseModel):
    model_config = ConfigDict(extra="forbid")

    office: str
    phone: str
    website: str | None = None


class GovernmentUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    kind: Literal["government"] = "government"
    id: str
    scheme: str
    update_type: GovernmentUpdateType = Field(alias="updateType")
    title: str
    description: str
    eligibility_criteria: list[str] | None = Field(None, alias="eligibilityCriteria")
    application_process: list[str] | None = Field(None, alias="applicationProcess")
    deadline: UtcDatetime | None = None
    benefit_amount: float | None = Field(None, alias="benefitAmount")
    contact_info: ContactInfo | None = Field(None, alias="contactInfo")
    applicable_states: list[str] | None = Field(None, alias="applicableStates")
    target_beneficiaries: list[str] | None = Field(None, alias="targetBeneficiaries")


DomainEvent = Annotated[
    WeatherAlert | PriceAlert | SeasonalTip | GovernmentUpdate,
    Field(discriminator="kind"),
]
