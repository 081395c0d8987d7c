"""Pydantic schemas for priority scoring, lead scoring and batch results."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from crosssell.schemas.opportunity import (
    CrossSellSegment,
    OpportunityRecord,
    PriorityTier,
    ProductGapResult,
)
from crosssell.schemas.segmentation import SegmentTier
from crosssell.services.scoring.configs.scoring import DEFAULT_BLEND_WEIGHT, DEFAULT_MIN_BASE_SCORE


class LeadQualityTier(str, Enum):
    """Lead quality bucket from the weighted lead model."""

    ELITE = "elite"
    PREMIUM = "premium"
    STANDARD = "standard"
    LOW_VALUE = "low_value"


class ScoreBreakdown(BaseModel):
    """The five additive priority sub-scores on the canonical 0-100 scale."""
    model_config = ConfigDict(from_attributes=True)

    gap_score: int = Field(..., ge=0, le=40, description="Product gap (max 40)")
    timing_score: int = Field(..., ge=0, le=25, description="Renewal timing (max 25)")
    value_score: int = Field(..., ge=0, le=20, description="Premium and tenure (max 20)")
    risk_score: int = Field(..., ge=0, le=10, description="Payment risk (max 10)")
    contact_score: int = Field(..., ge=0, le=5, description="Contactability (max 5)")

    @property
    def total(self) -> int:
        return (
            self.gap_score
            + self.timing_score
            + self.value_score
            + self.risk_score
            + self.contact_score
        )


class LeadFactorScores(BaseModel):
    """Raw 0-100 values of each lead-model factor before weighting."""

    product_intent: float = 0.0
    bundle_potential: float = 0.0
    premium_range: float = 0.0
    demographics: float = 0.0
    engagement: float = 0.0
    credit_tier: float = 0.0
    source_quality: float = 0.0


class LeadProfile(BaseModel):
    """Lead attributes inferred from an opportunity record."""

    products_shopping: list[str] = Field(default_factory=lambda: ["auto"])
    current_premium: Optional[float] = None
    age_range: str = "25-29"
    homeowner_status: str = "unknown"
    engagement_level: str = "low"
    credit_tier: str = "unknown"
    lead_source: str = "direct"


class LeadScore(BaseModel):
    """Weighted lead quality score."""

    total_score: float = Field(..., ge=0, le=100)
    tier: LeadQualityTier
    factors: LeadFactorScores
    predicted_ltv: float
    recommended_cac: float
    conversion_probability: float = Field(..., ge=0, le=1)
    key_factors: list[str] = Field(default_factory=list)


class ScoringOptions(BaseModel):
    """Caller-supplied options for the enhancement layer."""

    use_lead_scoring: bool = Field(False, description="Blend in the lead quality score")
    blend_weight: float = Field(
        DEFAULT_BLEND_WEIGHT, ge=0.0, le=1.0,
        description="Fraction of the final score taken from the lead score",
    )
    min_base_score_for_enhancement: int = Field(
        DEFAULT_MIN_BASE_SCORE, ge=0, le=100, description="Base scores below this skip enhancement"
    )
    include_breakdown: bool = Field(False, description="Return the sub-score breakdown")


class EnhancedScoreResult(BaseModel):
    """Final priority score for one record."""
    model_config = ConfigDict(from_attributes=True)

    score: int = Field(..., ge=0, le=100, description="Final canonical score")
    tier: PriorityTier
    base_score: int = Field(..., ge=0, le=100)
    lead_score: Optional[float] = None
    lead_tier: Optional[LeadQualityTier] = None
    enhanced: bool = False
    confidence: float = Field(..., ge=0.0, le=0.95)
    breakdown: Optional[ScoreBreakdown] = None
    top_factors: list[str] = Field(default_factory=list)
    legacy_score: int = Field(..., ge=0, le=150, description="Final score on the 0-150 view")
    legacy_base_score: int = Field(..., ge=0, le=150)


class ScoredOpportunity(BaseModel):
    """A record with its classification, score and enrichment."""
    model_config = ConfigDict(from_attributes=True)

    record: OpportunityRecord
    gap: ProductGapResult
    result: EnhancedScoreResult
    priority_rank: int = Field(0, ge=0)
    days_until_renewal: Optional[int] = Field(None, description="Signed days, negative when overdue")
    renewal_label: str
    customer_segment: SegmentTier
    potential_premium_add: float
    expected_conversion_pct: int
    retention_lift_pct: int
    talking_points: list[str] = Field(default_factory=list, max_length=3)

    @property
    def priority_score(self) -> int:
        return self.result.score

    @property
    def priority_tier(self) -> PriorityTier:
        return self.result.tier

    @property
    def segment_type(self) -> CrossSellSegment:
        return self.gap.segment_type


class BatchStatistics(BaseModel):
    """Aggregates over the full scored set, before pagination."""

    total: int = 0
    tier_counts: dict[str, int] = Field(default_factory=dict)
    score_histogram: dict[str, int] = Field(default_factory=dict)
    average_score: float = 0.0
    average_confidence: float = 0.0
    enhanced_count: int = 0
    segment_counts: dict[str, int] = Field(default_factory=dict)
    renewals_this_week: int = 0
    renewals_within_30_days: int = 0
    total_potential_premium: float = 0.0
    average_conversion_pct: float = 0.0
    expected_revenue: float = 0.0


class BatchScoringResult(BaseModel):
    """Sorted, ranked and paginated batch output."""

    opportunities: list[ScoredOpportunity] = Field(default_factory=list)
    total: int = 0
    limit: int
    offset: int = 0
    statistics: BatchStatistics


class BatchScoringRequest(BaseModel):
    """Request body for scoring records without persisting them."""

    records: list[OpportunityRecord] = Field(..., min_length=1)
    options: Optional[ScoringOptions] = None
    limit: Optional[int] = Field(None, ge=1)
    offset: int = Field(0, ge=0)
    as_of: Optional[date] = Field(None, description="Reference date, defaults to today")


class EnhanceRequest(BaseModel):
    """Request body for scoring a single record."""

    record: OpportunityRecord
    options: Optional[ScoringOptions] = None
    as_of: Optional[date] = None
