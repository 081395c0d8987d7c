"""Unit tests for revenue estimates and talking points."""

from datetime import date

import pytest

from crosssell.schemas.opportunity import CrossSellSegment
from crosssell.services.scoring.opportunity_insights import (
    calculate_potential_premium,
    expected_conversion_pct,
    generate_talking_points,
    retention_lift_pct,
)
from crosssell.services.scoring.priority_scorer import days_until_renewal
from crosssell.services.scoring.product_gap_classifier import ProductGapClassifier


@pytest.fixture
def classifier() -> ProductGapClassifier:
    return ProductGapClassifier()


class TestRevenueEstimates:

    def test_potential_premium_by_segment(self):
        assert calculate_potential_premium(CrossSellSegment.AUTO_TO_HOME, 1000) == 2963
        assert calculate_potential_premium(CrossSellSegment.ADD_UMBRELLA, 1000) == 350

    def test_bundle_premium_scales_with_current_premium(self):
        assert calculate_potential_premium(CrossSellSegment.MONO_TO_BUNDLE, 1000) == 800
        assert calculate_potential_premium(CrossSellSegment.MONO_TO_BUNDLE, 100) == 250

    def test_conversion_and_retention_lookups(self):
        assert expected_conversion_pct(CrossSellSegment.HOME_TO_AUTO) == 25
        assert retention_lift_pct(CrossSellSegment.MONO_TO_BUNDLE) == 25


class TestTalkingPoints:

    def test_balance_due_comes_first(self, classifier, low_value_record, as_of):
        gap = classifier.classify(low_value_record)
        points = generate_talking_points(
            low_value_record, gap, days_until_renewal(low_value_record.renewal_date, as_of)
        )

        assert points == [
            "NOTE: $120.00 balance due - address first",
            "Already bundled (Auto, Home) - perfect candidate for Life Insurance",
            "Mention EZPay convenience for automatic payments",
        ]

    def test_monoline_renewal_and_loyalty(self, classifier, upgrade_record):
        gap = classifier.classify(upgrade_record)
        points = generate_talking_points(upgrade_record, gap, 10)

        assert points == [
            "Currently Auto-only - great opportunity to discuss Homeowners/Renters",
            "Renewal coming up soon - perfect time to review coverage",
            "Loyal customer of 6 years - thank them for their business",
        ]

    def test_truncated_to_three(self, classifier, record_factory):
        record = record_factory(
            balance_due=50,
            tenure_years=8,
            ezpay_status="No",
            renewal_date=date(2025, 1, 5),
        )
        points = generate_talking_points(record, classifier.classify(record), 4)

        assert len(points) == 3
        assert points[0].startswith("NOTE:")

    def test_fallback_points(self, classifier, record_factory):
        record = record_factory(current_products="Auto, Life", tenure_years=1, ezpay_status="Yes")
        points = generate_talking_points(record, classifier.classify(record), None)

        assert points == [
            "Review current coverage and identify any gaps",
            "Discuss Umbrella Coverage options",
        ]

    def test_overdue_renewal_is_not_upcoming(self, classifier, record_factory):
        record = record_factory(current_products="Auto, Life", tenure_years=1, ezpay_status="Yes")
        points = generate_talking_points(record, classifier.classify(record), -5)

        assert "Renewal coming up soon - perfect time to review coverage" not in points
