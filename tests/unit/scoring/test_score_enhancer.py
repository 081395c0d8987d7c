"""Unit tests for blending base and lead scores."""

import pytest

from crosssell.schemas.opportunity import PriorityTier
from crosssell.core.config import settings
from crosssell.schemas.scoring import LeadFactorScores, ScoringOptions
from crosssell.services.scoring.configs.scoring import load_scoring_config
from crosssell.services.scoring.priority_scorer import to_legacy_scale
from crosssell.services.scoring.score_enhancer import (
    ScoreEnhancer,
    blend_scores,
    calculate_confidence,
    top_lead_factors,
)


@pytest.fixture
def enhancer() -> ScoreEnhancer:
    return ScoreEnhancer()


@pytest.fixture
def lead_options() -> ScoringOptions:
    return ScoringOptions(use_lead_scoring=True)


class TestBlendScores:

    def test_weight_edges(self):
        assert blend_scores(40, 90, 0.0) == 40
        assert blend_scores(40, 90, 1.0) == 90

    def test_weighted_average(self):
        assert blend_scores(50, 100, 0.5) == 75
        assert blend_scores(93, 83, 0.6) == 87

    def test_defaults_come_from_scoring_config(self):
        enhancement = load_scoring_config()["enhancement"]

        assert ScoringOptions().blend_weight == enhancement["blend_weight"]
        assert ScoringOptions().min_base_score_for_enhancement == enhancement["min_base_score_for_enhancement"]
        assert settings.scoring.blend_weight == enhancement["blend_weight"]


class TestScoreEnhancer:

    def test_lead_scoring_disabled_passes_base_through(self, enhancer, upgrade_record, as_of):
        result = enhancer.enhance(upgrade_record, as_of=as_of)

        assert result.enhanced is False
        assert result.score == result.base_score == 93
        assert result.confidence == 0.7
        assert result.lead_score is None
        assert result.legacy_score == to_legacy_scale(93)

    def test_upgrade_record_enhanced(self, enhancer, upgrade_record, lead_options, as_of):
        result = enhancer.enhance(upgrade_record, lead_options, as_of=as_of)

        assert result.enhanced is True
        assert result.base_score == 93
        assert result.lead_score == 83
        assert result.score == 87
        assert result.tier == PriorityTier.HOT
        assert result.confidence == 0.8
        assert result.legacy_score == to_legacy_scale(87)
        assert result.legacy_base_score == to_legacy_scale(93)
        assert result.top_factors[0] == "Credit quality (95pts)"
        assert len(result.top_factors) == 3

    def test_low_value_skips_enhancement(self, enhancer, low_value_record, lead_options, as_of):
        result = enhancer.enhance(low_value_record, lead_options, as_of=as_of)

        assert result.enhanced is False
        assert result.score == 27
        assert result.confidence == 0.6
        assert result.tier == PriorityTier.LOW

    def test_breakdown_only_when_requested(self, enhancer, upgrade_record, as_of):
        without = enhancer.enhance(upgrade_record, as_of=as_of)
        with_breakdown = enhancer.enhance(
            upgrade_record, ScoringOptions(include_breakdown=True), as_of=as_of
        )

        assert without.breakdown is None
        assert with_breakdown.breakdown.total == with_breakdown.base_score

    def test_zero_blend_weight_keeps_base(self, enhancer, upgrade_record, as_of):
        options = ScoringOptions(use_lead_scoring=True, blend_weight=0.0)
        result = enhancer.enhance(upgrade_record, options, as_of=as_of)

        assert result.enhanced is True
        assert result.score == result.base_score


class TestConfidence:

    def test_confidence_never_exceeds_ceiling(self, upgrade_record):
        record = upgrade_record.model_copy(
            update={"phone": "555-123-4567", "email": "jane@example.com"}
        )
        assert calculate_confidence(record, lead_score=95) == 0.95

    def test_sparse_record_confidence(self, record_factory):
        record = record_factory(current_premium=0, tenure_years=0, ezpay_status="Pending")
        assert calculate_confidence(record) == 0.5

    def test_top_factor_labels(self):
        factors = LeadFactorScores(product_intent=85, bundle_potential=40, engagement=90)
        assert top_lead_factors(factors, count=2) == [
            "Engagement level (90pts)",
            "Product intent (85pts)",
        ]
