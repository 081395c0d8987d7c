"""Unit tests for the five-part priority score."""

from datetime import date

import pytest

from crosssell.core.exceptions import ConfigurationError
from crosssell.schemas.opportunity import PriorityTier
from crosssell.services.scoring.configs.scoring import build_tier_thresholds
from crosssell.services.scoring.priority_scorer import (
    PriorityScorer,
    calculate_priority_tier,
    days_until_renewal,
    has_valid_phone,
    renewal_label,
    to_legacy_scale,
)


@pytest.fixture
def scorer() -> PriorityScorer:
    return PriorityScorer()


class TestPriorityScorer:

    def test_upgrade_path_scenario(self, scorer, upgrade_record, as_of):
        breakdown = scorer.score(upgrade_record, as_of=as_of)

        assert breakdown.gap_score == 35
        assert breakdown.timing_score == 25
        assert breakdown.value_score == 20
        assert breakdown.risk_score == 10
        assert breakdown.contact_score == 3
        assert breakdown.total == 93
        assert calculate_priority_tier(breakdown.total) == PriorityTier.HOT

    def test_low_value_scenario(self, scorer, low_value_record, as_of):
        breakdown = scorer.score(low_value_record, as_of=as_of)

        assert breakdown.gap_score == 15
        assert breakdown.timing_score == 5
        assert breakdown.value_score == 2
        assert breakdown.risk_score == 2
        assert breakdown.contact_score == 3
        assert breakdown.total == 27

    def test_sub_scores_stay_within_caps(self, scorer, record_factory, as_of):
        record = record_factory(
            current_products="Life",
            current_premium=50000,
            tenure_years=40,
            renewal_date=as_of,
            ezpay_status="Yes",
            phone="(555) 123-4567",
            email="jane@example.com",
        )
        breakdown = scorer.score(record, as_of=as_of)

        assert breakdown.gap_score == 40
        assert breakdown.total == 100

    def test_add_umbrella_bonus(self, scorer, record_factory, as_of):
        record = record_factory(current_products="Auto, Home, Life", policy_count=3)
        assert scorer.score(record, as_of=as_of).gap_score == 18

    def test_zero_policies_scored_as_one(self, scorer, record_factory, as_of):
        record = record_factory(policy_count=0)
        assert scorer.score(record, as_of=as_of).gap_score == 35

    @pytest.mark.parametrize(
        "renewal,expected",
        [
            (None, 10),
            (date(2024, 12, 20), 25),
            (date(2025, 1, 1), 25),
            (date(2025, 1, 31), 25),
            (date(2025, 2, 1), 15),
            (date(2025, 3, 3), 10),
            (date(2025, 4, 2), 5),
        ],
    )
    def test_timing_steps(self, scorer, record_factory, as_of, renewal, expected):
        record = record_factory(renewal_date=renewal)
        assert scorer.score(record, as_of=as_of).timing_score == expected

    def test_contact_requires_ten_digit_phone(self, scorer, record_factory, as_of):
        short = record_factory(phone="555-1234")
        full = record_factory(phone="555-123-4567", email="a@b.com")

        assert scorer.score(short, as_of=as_of).contact_score == 3
        assert scorer.score(full, as_of=as_of).contact_score == 5
        assert has_valid_phone("+1 (555) 123-4567")


class TestTiersAndScales:

    @pytest.mark.parametrize(
        "score,tier",
        [
            (100, PriorityTier.HOT),
            (80, PriorityTier.HOT),
            (79, PriorityTier.HIGH),
            (60, PriorityTier.HIGH),
            (59, PriorityTier.MEDIUM),
            (40, PriorityTier.MEDIUM),
            (39, PriorityTier.LOW),
            (0, PriorityTier.LOW),
        ],
    )
    def test_tier_boundaries(self, score, tier):
        assert calculate_priority_tier(score) == tier

    def test_legacy_scale(self):
        assert to_legacy_scale(100) == 150
        assert to_legacy_scale(80) == 120
        assert to_legacy_scale(0) == 0

    def test_overlapping_thresholds_rejected(self):
        with pytest.raises(ConfigurationError):
            build_tier_thresholds({"HOT": 80, "HIGH": 80, "MEDIUM": 40})

    def test_out_of_range_threshold_rejected(self):
        with pytest.raises(ConfigurationError):
            build_tier_thresholds({"HOT": 120, "HIGH": 60, "MEDIUM": 40})

    def test_thresholds_sorted_descending(self):
        assert build_tier_thresholds({"MEDIUM": 40, "HOT": 80, "HIGH": 60}) == [
            ("HOT", 80),
            ("HIGH", 60),
            ("MEDIUM", 40),
        ]


class TestRenewalHelpers:

    def test_days_until_renewal_is_signed(self, as_of):
        assert days_until_renewal(date(2025, 1, 11), as_of) == 10
        assert days_until_renewal(date(2024, 12, 29), as_of) == -3
        assert days_until_renewal(None, as_of) is None

    @pytest.mark.parametrize(
        "days,label",
        [(None, "No renewal date"), (-3, "Overdue"), (0, "TODAY"), (1, "1 day"), (45, "45 days")],
    )
    def test_renewal_label(self, days, label):
        assert renewal_label(days) == label
