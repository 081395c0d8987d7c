"""Pydantic schemas for customer value segmentation."""

from enum import Enum

from pydantic import BaseModel, Field


class SegmentTier(str, Enum):
    """Customer value tier from total premium and policy count."""

    ELITE = "elite"
    PREMIUM = "premium"
    STANDARD = "standard"
    ENTRY = "entry"

    @property
    def rank(self) -> int:
        """0 for entry up to 3 for elite."""
        return [SegmentTier.ENTRY, SegmentTier.STANDARD, SegmentTier.PREMIUM, SegmentTier.ELITE].index(self)


class SegmentConfig(BaseModel):
    """Business profile of a customer value tier."""

    tier: SegmentTier
    label: str
    avg_ltv: float
    avg_retention: float = Field(..., gt=0, lt=1)
    recommended_cac: float
    service_tier: str
    description: str


class SegmentClassificationRequest(BaseModel):
    total_premium: float = Field(..., description="Total annual premium across policies")
    policy_count: int = Field(..., description="Number of policies held")


class SegmentClassificationResponse(BaseModel):
    tier: SegmentTier
    config: SegmentConfig
    estimated_ltv: float
