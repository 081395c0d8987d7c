"""
Score Enhancement

Blends the base priority score with the lead quality score. Both scores are
on the canonical 0-100 scale, so blending is a plain weighted average; the
0-150 view is derived only for the result's legacy fields.
"""

from datetime import date
from typing import Optional

from crosssell.schemas.opportunity import OpportunityRecord, ProductGapResult
from crosssell.schemas.scoring import (
    EnhancedScoreResult,
    LeadFactorScores,
    LeadScore,
    ScoringOptions,
)
from crosssell.services.scoring.configs.scoring import (
    CANONICAL_MAX_SCORE,
    CONFIDENCE_BASE,
    CONFIDENCE_BELOW_THRESHOLD,
    CONFIDENCE_CEILING,
    CONFIDENCE_LEAD_DISABLED,
    CONFIDENCE_SIGNALS,
    LEAD_FACTOR_LABELS,
    STRONG_LEAD_SCORE,
    TOP_FACTOR_COUNT,
)
from crosssell.services.scoring.lead_quality_scorer import LeadQualityScorer
from crosssell.services.scoring.priority_scorer import (
    PriorityScorer,
    calculate_priority_tier,
    has_valid_email,
    has_valid_phone,
    to_legacy_scale,
)
from crosssell.services.scoring.product_gap_classifier import ProductGapClassifier
from crosssell.utils.logging import get_logger

LOGGER = get_logger(__name__)


def blend_scores(base_score: float, lead_score: float, blend_weight: float) -> int:
    """Weighted average of base and lead scores, rounded to an integer."""
    blended = round(base_score * (1 - blend_weight) + lead_score * blend_weight)
    return max(0, min(CANONICAL_MAX_SCORE, blended))


def calculate_confidence(record: OpportunityRecord, lead_score: Optional[float] = None) -> float:
    """Confidence in a blended score from the completeness of the record.

    Never exceeds CONFIDENCE_CEILING.
    """
    confidence = CONFIDENCE_BASE
    if has_valid_phone(record.phone):
        confidence += CONFIDENCE_SIGNALS["phone"]
    if has_valid_email(record.email):
        confidence += CONFIDENCE_SIGNALS["email"]
    if record.renewal_date is not None:
        confidence += CONFIDENCE_SIGNALS["renewal_date"]
    if record.tenure_years > 0:
        confidence += CONFIDENCE_SIGNALS["tenure"]
    if record.current_premium > 0:
        confidence += CONFIDENCE_SIGNALS["premium"]
    if record.ezpay_status != "Pending":
        confidence += CONFIDENCE_SIGNALS["ezpay_resolved"]
    if lead_score is not None and lead_score >= STRONG_LEAD_SCORE:
        confidence += CONFIDENCE_SIGNALS["strong_lead"]
    return round(min(CONFIDENCE_CEILING, confidence), 2)


def top_lead_factors(factors: LeadFactorScores, count: int = TOP_FACTOR_COUNT) -> list[str]:
    """Label the highest raw lead factors, e.g. "Product intent (85pts)"."""
    ranked = sorted(factors.model_dump().items(), key=lambda item: item[1], reverse=True)
    return [
        f"{LEAD_FACTOR_LABELS.get(name, name)} ({round(value)}pts)"
        for name, value in ranked[:count]
    ]


class ScoreEnhancer:
    """Produces the final score for a record, optionally lead-enhanced."""

    def __init__(
        self,
        classifier: Optional[ProductGapClassifier] = None,
        priority_scorer: Optional[PriorityScorer] = None,
        lead_scorer: Optional[LeadQualityScorer] = None,
    ):
        self.classifier = classifier or ProductGapClassifier()
        self.priority_scorer = priority_scorer or PriorityScorer(self.classifier)
        self.lead_scorer = lead_scorer or LeadQualityScorer()

    def enhance(
        self,
        record: OpportunityRecord,
        options: Optional[ScoringOptions] = None,
        as_of: Optional[date] = None,
        gap: Optional[ProductGapResult] = None,
    ) -> EnhancedScoreResult:
        """
        Score a record and blend in its lead score when enabled.

        Args:
            record: Opportunity record to score
            options: Enhancement options, defaults when omitted
            as_of: Reference date for renewal timing
            gap: Pre-computed product-gap classification

        Returns:
            EnhancedScoreResult on the canonical scale with legacy views
        """
        options = options or ScoringOptions()
        gap = gap or self.classifier.classify(record)

        breakdown = self.priority_scorer.score(record, gap, as_of)
        base_score = breakdown.total
        reported_breakdown = breakdown if options.include_breakdown else None

        if not options.use_lead_scoring:
            return self._passthrough(base_score, CONFIDENCE_LEAD_DISABLED, reported_breakdown)

        if base_score < options.min_base_score_for_enhancement:
            LOGGER.debug(
                "Base score below enhancement threshold",
                extra={
                    "customer_name": record.customer_name,
                    "base_score": base_score,
                    "threshold": options.min_base_score_for_enhancement,
                },
            )
            return self._passthrough(base_score, CONFIDENCE_BELOW_THRESHOLD, reported_breakdown)

        lead: LeadScore = self.lead_scorer.score_record(record, gap)
        final_score = blend_scores(base_score, lead.total_score, options.blend_weight)

        return EnhancedScoreResult(
            score=final_score,
            tier=calculate_priority_tier(final_score),
            base_score=base_score,
            lead_score=lead.total_score,
            lead_tier=lead.tier,
            enhanced=True,
            confidence=calculate_confidence(record, lead.total_score),
            breakdown=reported_breakdown,
            top_factors=top_lead_factors(lead.factors),
            legacy_score=to_legacy_scale(final_score),
            legacy_base_score=to_legacy_scale(base_score),
        )

    def _passthrough(self, base_score, confidence, breakdown) -> EnhancedScoreResult:
        return EnhancedScoreResult(
            score=base_score,
            tier=calculate_priority_tier(base_score),
            base_score=base_score,
            enhanced=False,
            confidence=confidence,
            breakdown=breakdown,
            legacy_score=to_legacy_scale(base_score),
            legacy_base_score=to_legacy_scale(base_score),
        )
