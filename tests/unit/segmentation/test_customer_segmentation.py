"""Unit tests for customer value segmentation."""

import pytest

from crosssell.schemas.segmentation import SegmentTier
from crosssell.services.segmentation.customer_segmentation import (
    SEGMENT_CONFIGS,
    calculate_segment_ltv,
    get_customer_segment,
    get_customer_segment_with_config,
)


class TestGetCustomerSegment:
    """Tests for tier boundaries."""

    @pytest.mark.parametrize(
        "premium,policies,expected",
        [
            (15000, 3, SegmentTier.ELITE),
            (20000, 1, SegmentTier.ELITE),
            (100, 5, SegmentTier.ELITE),
            (14999, 3, SegmentTier.PREMIUM),
            (7000, 2, SegmentTier.PREMIUM),
            (10000, 1, SegmentTier.PREMIUM),
            (100, 4, SegmentTier.PREMIUM),
            (6999, 2, SegmentTier.STANDARD),
            (3000, 1, SegmentTier.STANDARD),
            (0, 2, SegmentTier.STANDARD),
            (2999, 1, SegmentTier.ENTRY),
            (0, 0, SegmentTier.ENTRY),
        ],
    )
    def test_boundaries(self, premium, policies, expected):
        assert get_customer_segment(premium, policies) == expected

    def test_negative_inputs_fall_through_to_entry(self):
        assert get_customer_segment(-500, -1) == SegmentTier.ENTRY

    def test_monotonic_in_premium_and_policies(self):
        premiums = [0, 1000, 2999, 3000, 6999, 7000, 9999, 10000, 14999, 15000, 19999, 20000, 50000]
        counts = [0, 1, 2, 3, 4, 5, 8]

        for count in counts:
            ranks = [get_customer_segment(p, count).rank for p in premiums]
            assert ranks == sorted(ranks)

        for premium in premiums:
            ranks = [get_customer_segment(premium, c).rank for c in counts]
            assert ranks == sorted(ranks)


class TestSegmentConfig:
    """Tests for tier configuration and LTV."""

    def test_with_config_returns_matching_config(self):
        tier, config = get_customer_segment_with_config(16000, 3)

        assert tier == SegmentTier.ELITE
        assert config.tier == SegmentTier.ELITE
        assert config.service_tier == "white_glove"

    def test_every_tier_has_config(self):
        assert set(SEGMENT_CONFIGS) == set(SegmentTier)

    def test_ltv_is_never_negative(self):
        assert calculate_segment_ltv(0, 3) == 0.0

    def test_ltv_grows_with_segment(self):
        assert calculate_segment_ltv(20000, 4) > calculate_segment_ltv(2000, 1) > 0
