"""
Lead Quality Scoring

Weighted seven-factor lead model on a 0-100 scale. An opportunity record
carries no explicit lead attributes, so a LeadProfile is inferred from
the record first (products, tenure, payment behaviour).
"""

from typing import Optional

from crosssell.schemas.opportunity import OpportunityRecord, ProductGapResult
from crosssell.schemas.scoring import (
    LeadFactorScores,
    LeadProfile,
    LeadQualityTier,
    LeadScore,
)
from crosssell.services.scoring.configs.scoring import (
    AGE_SCORE_DEFAULT,
    AGE_SCORES,
    BUNDLE_POTENTIAL_DEFAULT,
    BUNDLE_POTENTIAL_SCORES,
    CREDIT_TIER_SCORES,
    ENGAGEMENT_SCORES,
    HOMEOWNER_MULTIPLIER,
    LEAD_SCORE_WEIGHTS,
    LEAD_TIER_CAC,
    LEAD_TIER_CONVERSION,
    LEAD_TIER_LTV,
    LEAD_TIER_THRESHOLDS,
    PREMIUM_RANGE_FLOOR,
    PREMIUM_RANGE_STEPS,
    PREMIUM_RANGE_UNKNOWN,
    PRODUCT_INTENT_DEFAULT,
    PRODUCT_INTENT_SCORES,
    RECOMMENDED_PRODUCT_LEAD_KEYS,
    SOURCE_QUALITY_DEFAULT,
    SOURCE_QUALITY_SCORES,
    TENURE_AGE_BRACKETS,
    YOUNGEST_AGE_BRACKET,
)
from crosssell.utils.logging import get_logger

LOGGER = get_logger(__name__)


def estimate_age_range(tenure_years: float) -> str:
    """Approximate an age bracket from customer tenure."""
    for min_tenure, bracket in TENURE_AGE_BRACKETS:
        if tenure_years > min_tenure:
            return bracket
    return YOUNGEST_AGE_BRACKET


def infer_homeowner_status(products_text: str) -> str:
    text = (products_text or "").lower()
    if "home" in text:
        return "owner"
    if "renter" in text:
        return "renter"
    return "unknown"


def infer_credit_tier(balance_due: float, ezpay_status: str) -> str:
    """Payment behaviour stands in for a credit tier."""
    if balance_due == 0 and ezpay_status == "Yes":
        return "excellent"
    if balance_due == 0:
        return "good"
    if balance_due < 100:
        return "fair"
    return "poor"


def infer_engagement_level(ezpay_status: str, tenure_years: float) -> str:
    if ezpay_status == "Yes" and tenure_years > 3:
        return "high"
    if ezpay_status == "Yes" or tenure_years > 2:
        return "medium"
    return "low"


def build_lead_profile(record: OpportunityRecord, gap: ProductGapResult) -> LeadProfile:
    """Infer lead attributes from an opportunity record and its product gap."""
    shopping: list[str] = []
    holdings = gap.holdings
    if holdings.has_auto:
        shopping.append("auto")
    if holdings.has_property:
        shopping.append("home")
    if holdings.has_life:
        shopping.append("life")
    if holdings.has_umbrella:
        shopping.append("umbrella")

    recommended_key = RECOMMENDED_PRODUCT_LEAD_KEYS.get(gap.segment_type.value)
    if recommended_key and recommended_key not in shopping:
        shopping.append(recommended_key)

    return LeadProfile(
        products_shopping=shopping or ["auto"],
        current_premium=record.current_premium or None,
        age_range=estimate_age_range(record.tenure_years),
        homeowner_status=infer_homeowner_status(record.current_products),
        engagement_level=infer_engagement_level(record.ezpay_status, record.tenure_years),
        credit_tier=infer_credit_tier(record.balance_due, record.ezpay_status),
        lead_source="direct",
    )


def calculate_lead_tier(total_score: float) -> LeadQualityTier:
    for threshold, tier in LEAD_TIER_THRESHOLDS:
        if total_score >= threshold:
            return LeadQualityTier(tier)
    return LeadQualityTier.LOW_VALUE


class LeadQualityScorer:
    """Scores a lead profile with the weighted seven-factor model."""

    def score_record(self, record: OpportunityRecord, gap: ProductGapResult) -> LeadScore:
        return self.score(build_lead_profile(record, gap))

    def score(self, profile: LeadProfile) -> LeadScore:
        """
        Score a lead profile.

        Args:
            profile: Inferred or supplied lead attributes

        Returns:
            LeadScore with total, tier, raw factor values and business estimates
        """
        factors = LeadFactorScores(
            product_intent=self._product_intent_score(profile.products_shopping),
            bundle_potential=self._bundle_potential_score(profile.products_shopping),
            premium_range=self._premium_range_score(profile.current_premium),
            demographics=self._demographic_score(profile.age_range, profile.homeowner_status),
            engagement=ENGAGEMENT_SCORES.get(profile.engagement_level, ENGAGEMENT_SCORES["low"]),
            credit_tier=CREDIT_TIER_SCORES.get(profile.credit_tier, CREDIT_TIER_SCORES["unknown"]),
            source_quality=SOURCE_QUALITY_SCORES.get(profile.lead_source, SOURCE_QUALITY_DEFAULT),
        )

        weighted = sum(
            getattr(factors, name) * weight for name, weight in LEAD_SCORE_WEIGHTS.items()
        )
        total_score = float(max(0, min(100, round(weighted))))
        tier = calculate_lead_tier(total_score)

        return LeadScore(
            total_score=total_score,
            tier=tier,
            factors=factors,
            predicted_ltv=LEAD_TIER_LTV[tier.value],
            recommended_cac=LEAD_TIER_CAC[tier.value],
            conversion_probability=LEAD_TIER_CONVERSION[tier.value],
            key_factors=self._key_factors(profile, factors),
        )

    def _product_intent_score(self, products: list[str]) -> float:
        key = ",".join(sorted(product.lower() for product in products))
        return PRODUCT_INTENT_SCORES.get(key, PRODUCT_INTENT_DEFAULT)

    def _bundle_potential_score(self, products: list[str]) -> float:
        count = len(set(products))
        if count >= max(BUNDLE_POTENTIAL_SCORES):
            return BUNDLE_POTENTIAL_SCORES[max(BUNDLE_POTENTIAL_SCORES)]
        return BUNDLE_POTENTIAL_SCORES.get(count, BUNDLE_POTENTIAL_DEFAULT)

    def _premium_range_score(self, premium: Optional[float]) -> float:
        if not premium:
            return PREMIUM_RANGE_UNKNOWN
        for minimum, points in PREMIUM_RANGE_STEPS:
            if premium >= minimum:
                return points
        return PREMIUM_RANGE_FLOOR

    def _demographic_score(self, age_range: str, homeowner_status: str) -> float:
        base = AGE_SCORES.get(age_range, AGE_SCORE_DEFAULT)
        multiplier = HOMEOWNER_MULTIPLIER.get(homeowner_status, HOMEOWNER_MULTIPLIER["unknown"])
        return min(100.0, base * multiplier)

    def _key_factors(self, profile: LeadProfile, factors: LeadFactorScores) -> list[str]:
        key_factors = []
        if factors.bundle_potential >= 80:
            key_factors.append("Multi-product bundle opportunity")
        if profile.homeowner_status == "owner":
            key_factors.append("Homeowner")
        if factors.premium_range >= 75:
            key_factors.append("High premium tier")
        if profile.engagement_level == "high":
            key_factors.append("Highly engaged customer")
        if profile.credit_tier in ("excellent", "good"):
            key_factors.append("Strong payment history")
        return key_factors
