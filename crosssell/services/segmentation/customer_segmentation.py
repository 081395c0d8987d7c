"""
Customer value segmentation.

Tiers a customer by total annual premium and policy count. A high premium
or a high policy count alone can qualify for an upper tier:

- Elite: (premium >= 15K and policies >= 3) or premium >= 20K or policies >= 5
- Premium: (premium >= 7K and policies >= 2) or premium >= 10K or policies >= 4
- Standard: premium >= 3K or policies >= 2
- Entry: everything else
"""

import math

from crosssell.schemas.segmentation import SegmentConfig, SegmentTier

SEGMENT_THRESHOLDS: dict[str, dict[str, float]] = {
    "elite": {
        "combined_premium": 15000,
        "combined_policies": 3,
        "premium_only": 20000,
        "policies_only": 5,
    },
    "premium": {
        "combined_premium": 7000,
        "combined_policies": 2,
        "premium_only": 10000,
        "policies_only": 4,
    },
    "standard": {
        "premium": 3000,
        "policies": 2,
    },
}

SEGMENT_CONFIGS: dict[SegmentTier, SegmentConfig] = {
    SegmentTier.ELITE: SegmentConfig(
        tier=SegmentTier.ELITE,
        label="Elite",
        avg_ltv=18000,
        avg_retention=0.97,
        recommended_cac=1200,
        service_tier="white_glove",
        description="High-value multi-product customer",
    ),
    SegmentTier.PREMIUM: SegmentConfig(
        tier=SegmentTier.PREMIUM,
        label="Premium",
        avg_ltv=9000,
        avg_retention=0.91,
        recommended_cac=700,
        service_tier="standard",
        description="Bundled product customer",
    ),
    SegmentTier.STANDARD: SegmentConfig(
        tier=SegmentTier.STANDARD,
        label="Standard",
        avg_ltv=4500,
        avg_retention=0.72,
        recommended_cac=400,
        service_tier="standard",
        description="Growth potential customer",
    ),
    SegmentTier.ENTRY: SegmentConfig(
        tier=SegmentTier.ENTRY,
        label="Entry",
        avg_ltv=1800,
        avg_retention=0.65,
        recommended_cac=200,
        service_tier="automated",
        description="New or single-product customer",
    ),
}


def _qualifies(thresholds: dict[str, float], total_premium: float, policy_count: int) -> bool:
    return (
        (total_premium >= thresholds["combined_premium"] and policy_count >= thresholds["combined_policies"])
        or total_premium >= thresholds["premium_only"]
        or policy_count >= thresholds["policies_only"]
    )


def get_customer_segment(total_premium: float, policy_count: int) -> SegmentTier:
    """Determine a customer's value tier.

    Defined for every numeric input; negative values fall through to entry.

    Args:
        total_premium: Total annual premium in dollars
        policy_count: Number of policies held

    Returns:
        The customer's SegmentTier
    """
    if _qualifies(SEGMENT_THRESHOLDS["elite"], total_premium, policy_count):
        return SegmentTier.ELITE

    if _qualifies(SEGMENT_THRESHOLDS["premium"], total_premium, policy_count):
        return SegmentTier.PREMIUM

    standard = SEGMENT_THRESHOLDS["standard"]
    if total_premium >= standard["premium"] or policy_count >= standard["policies"]:
        return SegmentTier.STANDARD

    return SegmentTier.ENTRY


def get_customer_segment_with_config(
    total_premium: float, policy_count: int
) -> tuple[SegmentTier, SegmentConfig]:
    tier = get_customer_segment(total_premium, policy_count)
    return tier, SEGMENT_CONFIGS[tier]


def calculate_segment_ltv(
    total_premium: float,
    policy_count: int,
    commission_rate: float = 0.07,
    servicing_cost_per_policy: float = 50,
) -> float:
    """Estimate lifetime value from the segment's retention rate.

    LTV = premium * commission * expected years - servicing cost * policies * expected years,
    with expected years = -1 / ln(retention), floored at 0.
    """
    tier = get_customer_segment(total_premium, policy_count)
    retention = SEGMENT_CONFIGS[tier].avg_retention
    expected_years = -1 / math.log(retention) if retention < 1.0 else 20

    lifetime_revenue = total_premium * commission_rate * expected_years
    lifetime_servicing_cost = servicing_cost_per_policy * policy_count * expected_years

    return max(0.0, lifetime_revenue - lifetime_servicing_cost)
