"""
Batch Scoring

Scores a set of opportunity records independently, ranks them by final
score and paginates the ranked list. Statistics are always computed over
the full scored set, never the returned page.
"""

from collections import Counter
from datetime import date
from typing import Iterable, Optional

from crosssell.schemas.opportunity import CrossSellSegment, OpportunityRecord, PriorityTier
from crosssell.schemas.scoring import (
    BatchScoringResult,
    BatchStatistics,
    ScoredOpportunity,
    ScoringOptions,
)
from crosssell.services.scoring.configs.scoring import LEGACY_HISTOGRAM_BUCKETS
from crosssell.services.scoring.opportunity_insights import (
    calculate_potential_premium,
    expected_conversion_pct,
    generate_talking_points,
    retention_lift_pct,
)
from crosssell.services.scoring.priority_scorer import days_until_renewal, renewal_label
from crosssell.services.scoring.product_gap_classifier import ProductGapClassifier
from crosssell.services.scoring.score_enhancer import ScoreEnhancer
from crosssell.services.segmentation.customer_segmentation import get_customer_segment
from crosssell.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_LIMIT = 50
RENEWAL_WEEK_DAYS = 7
RENEWAL_MONTH_DAYS = 30


def legacy_histogram_bucket(legacy_score: int) -> str:
    for label, upper in LEGACY_HISTOGRAM_BUCKETS:
        if legacy_score <= upper:
            return label
    return LEGACY_HISTOGRAM_BUCKETS[-1][0]


def compute_statistics(scored: list[ScoredOpportunity]) -> BatchStatistics:
    """Aggregate tier, histogram, segment and revenue statistics."""
    total = len(scored)
    tier_counts = {tier.value: 0 for tier in PriorityTier}
    histogram = {label: 0 for label, _ in LEGACY_HISTOGRAM_BUCKETS}
    segment_counts = {segment.value: 0 for segment in CrossSellSegment}

    if not total:
        return BatchStatistics(
            tier_counts=tier_counts,
            score_histogram=histogram,
            segment_counts=segment_counts,
        )

    tier_counts.update(Counter(opp.result.tier.value for opp in scored))
    histogram.update(Counter(legacy_histogram_bucket(opp.result.legacy_score) for opp in scored))
    segment_counts.update(Counter(opp.gap.segment_type.value for opp in scored))

    upcoming = [
        opp.days_until_renewal
        for opp in scored
        if opp.days_until_renewal is not None and opp.days_until_renewal >= 0
    ]

    total_potential = sum(opp.potential_premium_add for opp in scored)
    expected_revenue = sum(
        opp.potential_premium_add * opp.expected_conversion_pct / 100 for opp in scored
    )

    return BatchStatistics(
        total=total,
        tier_counts=tier_counts,
        score_histogram=histogram,
        average_score=round(sum(opp.result.score for opp in scored) / total, 1),
        average_confidence=round(sum(opp.result.confidence for opp in scored) / total, 3),
        enhanced_count=sum(1 for opp in scored if opp.result.enhanced),
        segment_counts=segment_counts,
        renewals_this_week=sum(1 for days in upcoming if days <= RENEWAL_WEEK_DAYS),
        renewals_within_30_days=sum(1 for days in upcoming if days <= RENEWAL_MONTH_DAYS),
        total_potential_premium=round(total_potential, 2),
        average_conversion_pct=round(
            sum(opp.expected_conversion_pct for opp in scored) / total, 1
        ),
        expected_revenue=round(expected_revenue, 2),
    )


class BatchScoringService:
    """Scores, ranks and paginates opportunity records."""

    def __init__(
        self,
        enhancer: Optional[ScoreEnhancer] = None,
        classifier: Optional[ProductGapClassifier] = None,
        default_limit: int = DEFAULT_LIMIT,
    ):
        self.classifier = classifier or ProductGapClassifier()
        self.enhancer = enhancer or ScoreEnhancer(classifier=self.classifier)
        self.default_limit = default_limit

    def score_record(
        self,
        record: OpportunityRecord,
        options: Optional[ScoringOptions] = None,
        as_of: Optional[date] = None,
    ) -> ScoredOpportunity:
        """Classify, score and enrich a single record. The rank is left at 0."""
        as_of = as_of or date.today()
        gap = self.classifier.classify(record)
        result = self.enhancer.enhance(record, options, as_of, gap=gap)
        days = days_until_renewal(record.renewal_date, as_of)

        return ScoredOpportunity(
            record=record,
            gap=gap,
            result=result,
            days_until_renewal=days,
            renewal_label=renewal_label(days),
            customer_segment=get_customer_segment(record.current_premium, record.policy_count),
            potential_premium_add=calculate_potential_premium(gap.segment_type, record.current_premium),
            expected_conversion_pct=expected_conversion_pct(gap.segment_type),
            retention_lift_pct=retention_lift_pct(gap.segment_type),
            talking_points=generate_talking_points(record, gap, days),
        )

    def score_all(
        self,
        records: Iterable[OpportunityRecord],
        options: Optional[ScoringOptions] = None,
        as_of: Optional[date] = None,
    ) -> list[ScoredOpportunity]:
        """Score every record and return them ranked, best first.

        Ties keep their input order.
        """
        as_of = as_of or date.today()
        scored = [self.score_record(record, options, as_of) for record in records]
        ranked = sorted(scored, key=lambda opp: opp.result.score, reverse=True)
        return [
            opp.model_copy(update={"priority_rank": rank})
            for rank, opp in enumerate(ranked, start=1)
        ]

    def score_batch(
        self,
        records: Iterable[OpportunityRecord],
        options: Optional[ScoringOptions] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        as_of: Optional[date] = None,
    ) -> BatchScoringResult:
        """
        Score a batch of records.

        Args:
            records: Records to score; they are not modified
            options: Enhancement options shared by the whole batch
            limit: Page size, the service default when omitted
            offset: Number of ranked results to skip
            as_of: Reference date for renewal timing, defaults to today

        Returns:
            BatchScoringResult with the requested page and full-set statistics
        """
        limit = limit or self.default_limit
        offset = max(0, offset)

        ranked = self.score_all(records, options, as_of)
        statistics = compute_statistics(ranked)

        LOGGER.info(
            "Batch scoring complete",
            extra={
                "total": len(ranked),
                "enhanced": statistics.enhanced_count,
                "hot": statistics.tier_counts.get(PriorityTier.HOT.value, 0),
                "limit": limit,
                "offset": offset,
            },
        )

        return BatchScoringResult(
            opportunities=ranked[offset:offset + limit],
            total=len(ranked),
            limit=limit,
            offset=offset,
            statistics=statistics,
        )
