"""Revenue estimates and sales talking points for a classified opportunity."""

from typing import Optional

from crosssell.schemas.opportunity import CrossSellSegment, OpportunityRecord, ProductGapResult
from crosssell.services.scoring.configs.scoring import (
    BUNDLE_PREMIUM_FLOOR,
    BUNDLE_PREMIUM_RATIO,
    EXPECTED_CONVERSION_PCT,
    LOYAL_TENURE_YEARS,
    MAX_TALKING_POINTS,
    POTENTIAL_PREMIUM_BY_SEGMENT,
    RETENTION_LIFT_PCT,
    URGENT_RENEWAL_DAYS,
)


def calculate_potential_premium(segment_type: CrossSellSegment, current_premium: float) -> float:
    """Estimated annual premium added if the cross-sell converts."""
    if segment_type == CrossSellSegment.MONO_TO_BUNDLE:
        return float(max(BUNDLE_PREMIUM_FLOOR, round(current_premium * BUNDLE_PREMIUM_RATIO)))
    return float(
        POTENTIAL_PREMIUM_BY_SEGMENT.get(segment_type.value, POTENTIAL_PREMIUM_BY_SEGMENT["other"])
    )


def expected_conversion_pct(segment_type: CrossSellSegment) -> int:
    return EXPECTED_CONVERSION_PCT.get(segment_type.value, EXPECTED_CONVERSION_PCT["other"])


def retention_lift_pct(segment_type: CrossSellSegment) -> int:
    return RETENTION_LIFT_PCT.get(segment_type.value, RETENTION_LIFT_PCT["other"])


def generate_talking_points(
    record: OpportunityRecord,
    gap: ProductGapResult,
    days_until_renewal: Optional[int],
) -> list[str]:
    """
    Build up to three sales talking points, most relevant first.

    Args:
        record: Opportunity record
        gap: Product-gap classification for the record
        days_until_renewal: Signed days until renewal, None when unknown

    Returns:
        At most MAX_TALKING_POINTS talking points
    """
    points: list[str] = []
    products = record.current_products
    recommended = gap.recommended_product
    holdings = gap.holdings

    if record.balance_due > 0:
        points.append(f"NOTE: ${record.balance_due:,.2f} balance due - address first")

    if gap.is_true_monoline:
        points.append(f"Currently {products}-only - great opportunity to discuss {recommended}")
    elif holdings.has_auto and holdings.has_property and not holdings.has_life:
        points.append(f"Already bundled ({products}) - perfect candidate for {recommended}")

    if days_until_renewal is not None and 0 <= days_until_renewal <= URGENT_RENEWAL_DAYS:
        points.append("Renewal coming up soon - perfect time to review coverage")

    if record.tenure_years >= LOYAL_TENURE_YEARS:
        points.append(
            f"Loyal customer of {round(record.tenure_years)} years - thank them for their business"
        )

    if record.ezpay_status == "No":
        points.append("Mention EZPay convenience for automatic payments")

    if not points:
        points.append("Review current coverage and identify any gaps")
        points.append(f"Discuss {recommended} options")

    return points[:MAX_TALKING_POINTS]
