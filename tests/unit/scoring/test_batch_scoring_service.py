"""Unit tests for batch scoring, ranking and statistics."""

from datetime import date

import pytest

from crosssell.schemas.scoring import ScoringOptions
from crosssell.schemas.segmentation import SegmentTier
from crosssell.services.scoring.batch_scoring_service import (
    BatchScoringService,
    compute_statistics,
    legacy_histogram_bucket,
)


@pytest.fixture
def service() -> BatchScoringService:
    return BatchScoringService(default_limit=2)


@pytest.fixture
def records(record_factory, upgrade_record, low_value_record):
    middle = record_factory(
        customer_name="Middle",
        current_products="Auto, Home",
        policy_count=2,
        current_premium=2200,
        renewal_date=date(2025, 1, 5),
    )
    return [low_value_record, upgrade_record, middle]


class TestBatchScoringService:

    def test_ranked_by_score(self, service, records, as_of):
        ranked = service.score_all(records, as_of=as_of)

        assert [opp.record.customer_name for opp in ranked] == ["Upgrade Path", "Middle", "Low Value"]
        assert [opp.priority_rank for opp in ranked] == [1, 2, 3]
        scores = [opp.priority_score for opp in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_input_order(self, service, record_factory, as_of):
        first = record_factory(customer_name="First")
        second = record_factory(customer_name="Second")

        ranked = service.score_all([first, second], as_of=as_of)

        assert [opp.record.customer_name for opp in ranked] == ["First", "Second"]

    def test_pagination_keeps_full_statistics(self, service, records, as_of):
        result = service.score_batch(records, limit=1, offset=1, as_of=as_of)

        assert result.total == 3
        assert len(result.opportunities) == 1
        assert result.opportunities[0].priority_rank == 2
        assert result.statistics.total == 3
        assert sum(result.statistics.tier_counts.values()) == 3
        assert sum(result.statistics.score_histogram.values()) == 3

    def test_default_limit(self, service, records, as_of):
        result = service.score_batch(records, as_of=as_of)

        assert result.limit == 2
        assert len(result.opportunities) == 2

    def test_inputs_are_not_modified(self, service, records, as_of):
        before = [record.model_dump() for record in records]
        service.score_batch(records, ScoringOptions(use_lead_scoring=True), as_of=as_of)

        assert [record.model_dump() for record in records] == before

    def test_enrichment(self, service, upgrade_record, as_of):
        scored = service.score_record(upgrade_record, as_of=as_of)

        assert scored.days_until_renewal == 10
        assert scored.renewal_label == "10 days"
        assert scored.customer_segment == SegmentTier.STANDARD
        assert scored.potential_premium_add == 2963
        assert scored.expected_conversion_pct == 22
        assert scored.priority_rank == 0


class TestStatistics:

    def test_statistics_counts(self, service, records, as_of):
        ranked = service.score_all(records, ScoringOptions(use_lead_scoring=True), as_of=as_of)
        stats = compute_statistics(ranked)

        assert stats.total == 3
        assert stats.tier_counts["HOT"] >= 1
        assert stats.enhanced_count == 2
        assert stats.renewals_this_week == 1
        assert stats.renewals_within_30_days == 2
        assert stats.segment_counts["add_life"] == 2
        assert stats.total_potential_premium == round(
            sum(opp.potential_premium_add for opp in ranked), 2
        )

    def test_empty_statistics(self):
        stats = compute_statistics([])

        assert stats.total == 0
        assert stats.average_score == 0.0
        assert set(stats.tier_counts) == {"HOT", "HIGH", "MEDIUM", "LOW"}

    @pytest.mark.parametrize(
        "legacy,bucket",
        [(0, "0-25"), (25, "0-25"), (26, "26-50"), (126, "126-150"), (150, "126-150")],
    )
    def test_histogram_buckets(self, legacy, bucket):
        assert legacy_histogram_bucket(legacy) == bucket
