"""Pydantic schemas for cross-sell opportunity records.

An opportunity is one customer's cross-sell candidacy: the flat record
supplied by ingestion plus the product-gap classification derived from it.
"""

from datetime import date, datetime
from enum import Enum
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


EZPayStatus = Literal["Yes", "No", "Pending"]

RenewalStatus = Literal["Renewed", "Pending", "At Risk", "Cancelled", "Not Taken"]


class CrossSellSegment(str, Enum):
    """Cross-sell segment type derived from product gaps."""

    AUTO_TO_HOME = "auto_to_home"
    HOME_TO_AUTO = "home_to_auto"
    MONO_TO_BUNDLE = "mono_to_bundle"
    ADD_LIFE = "add_life"
    ADD_UMBRELLA = "add_umbrella"
    OTHER = "other"


class PriorityTier(str, Enum):
    """Ordered cross-sell priority bucket."""

    HOT = "HOT"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class OpportunityRecord(BaseModel):
    """Flat customer/policy record as handed over by ingestion."""
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    customer_name: str = Field(..., min_length=1, description="Customer display name")
    customer_id: Optional[str] = Field(
        None, description="Stable customer identifier when the source provides one"
    )
    agency_id: Optional[str] = Field(None, description="Owning agency")

    phone: str = Field("", description="Primary phone number")
    email: str = Field("", description="Primary email address")
    address: str = Field("", description="Street address")
    city: str = Field("", description="City")
    zip_code: str = Field("", description="Postal code")

    current_products: str = Field(
        "Unknown", description="Comma/semicolon-delimited list of held products"
    )
    has_auto: Optional[bool] = Field(None, description="Auto presence flag")
    has_property: Optional[bool] = Field(None, description="Home/property presence flag")
    has_life: Optional[bool] = Field(None, description="Life presence flag")
    has_umbrella: Optional[bool] = Field(None, description="Umbrella presence flag")
    monoline_flag: Optional[str] = Field(
        None, description="Source monoline/multiline indicator text"
    )

    policy_count: int = Field(1, ge=0, description="Number of policies held")
    current_premium: float = Field(0.0, ge=0, description="Current annual premium")
    tenure_years: float = Field(0.0, ge=0, description="Years as a customer")

    renewal_date: Optional[date] = Field(None, description="Next renewal date")
    renewal_status: RenewalStatus = Field("Not Taken", description="Renewal status")
    balance_due: float = Field(0.0, ge=0, description="Outstanding balance, 0 when current")
    ezpay_status: EZPayStatus = Field("No", description="Autopay enrollment")

    @field_validator("current_products", mode="before")
    @classmethod
    def _default_products(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return "Unknown"
        return value

    @property
    def presence_flags(self) -> dict[str, Optional[bool]]:
        return {
            "auto": self.has_auto,
            "property": self.has_property,
            "life": self.has_life,
            "umbrella": self.has_umbrella,
        }


class ProductHoldings(BaseModel):
    """Which product lines a customer holds."""
    model_config = ConfigDict(from_attributes=True)

    has_auto: bool = False
    has_property: bool = False
    has_life: bool = False
    has_umbrella: bool = False


class ProductGapResult(BaseModel):
    """Classification of a record's product gap and next recommended product."""
    model_config = ConfigDict(from_attributes=True)

    products: list[str] = Field(default_factory=list, description="Parsed product lines")
    holdings: ProductHoldings = Field(default_factory=ProductHoldings)
    is_true_monoline: bool = Field(..., description="Holds at most one product line")
    segment_type: CrossSellSegment = Field(..., description="Cross-sell segment")
    recommended_product: str = Field(..., description="Next product to pitch")

    @property
    def product_count(self) -> int:
        return len(self.products)


class OpportunityFilters(BaseModel):
    """Filters for listing persisted opportunities."""

    agency_id: Optional[str] = None
    tier: Optional[PriorityTier] = None
    segment_type: Optional[CrossSellSegment] = None
    min_priority_score: Optional[int] = Field(None, ge=0, le=100)
    days_until_renewal_max: Optional[int] = Field(None, ge=0)
    dismissed: bool = False
    search: Optional[str] = Field(None, description="Case-insensitive customer name search")


class OpportunityResponse(BaseModel):
    """A persisted opportunity as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    agency_id: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: str
    phone: str = ""
    email: str = ""
    current_products: str
    policy_count: int
    current_premium: float
    tenure_years: float
    renewal_date: Optional[date] = None
    days_until_renewal: Optional[int] = None
    renewal_status: str
    balance_due: float
    ezpay_status: str
    is_true_monoline: bool
    recommended_product: str
    segment_type: CrossSellSegment
    priority_score: int
    legacy_score: int
    priority_tier: PriorityTier
    priority_rank: int
    confidence: float
    enhanced: bool
    customer_segment: str
    potential_premium_add: float
    expected_conversion_pct: int
    retention_lift_pct: int
    talking_points: list[str] = Field(default_factory=list)
    dismissed: bool = False
    dismissed_reason: Optional[str] = None
    task_id: Optional[str] = None
    created_at: Optional[datetime] = None


class OpportunityListResponse(BaseModel):
    opportunities: list[OpportunityResponse]
    total: int
    limit: int
    offset: int
    tier_summary: dict[str, int] = Field(default_factory=dict)
