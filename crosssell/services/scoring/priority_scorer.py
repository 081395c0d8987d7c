"""
Cross-Sell Priority Scoring

Computes the base priority score of an opportunity on the canonical 0-100
scale as the sum of five capped sub-scores:
1. Gap (40): how much room the customer has to add products
2. Timing (25): how close the renewal is
3. Value (20): current premium and tenure
4. Risk (10): payment behaviour
5. Contact (5): reachable phone and email
"""

from datetime import date
from typing import Optional

from crosssell.schemas.opportunity import (
    CrossSellSegment,
    OpportunityRecord,
    PriorityTier,
    ProductGapResult,
)
from crosssell.schemas.scoring import ScoreBreakdown
from crosssell.services.scoring.configs.scoring import (
    CONTACT_BASE_SCORE,
    CONTACT_CHANNEL_BONUS,
    GAP_SCORE_BY_POLICY_COUNT,
    GAP_SCORE_DEFAULT,
    GAP_SEGMENT_BONUS,
    LEGACY_MAX_SCORE,
    LEGACY_SCALE_FACTOR,
    MIN_PHONE_DIGITS,
    PREMIUM_VALUE_FLOOR,
    PREMIUM_VALUE_STEPS,
    PRIORITY_TIER_THRESHOLDS,
    RISK_BALANCE_PENALTY,
    RISK_EZPAY_BONUS,
    RISK_NEUTRAL_SCORE,
    RISK_TENURE_BONUS,
    RISK_TENURE_YEARS,
    SUB_SCORE_CAPS,
    TENURE_VALUE_STEPS,
    TIMING_BEYOND_SCORE,
    TIMING_NO_DATE_SCORE,
    TIMING_STEPS,
)
from crosssell.services.scoring.product_gap_classifier import ProductGapClassifier
from crosssell.utils.logging import get_logger

LOGGER = get_logger(__name__)


def calculate_priority_tier(score: float) -> PriorityTier:
    """Map a canonical score to its priority tier."""
    for tier, threshold in PRIORITY_TIER_THRESHOLDS:
        if score >= threshold:
            return PriorityTier(tier)
    return PriorityTier.LOW


def to_legacy_scale(score: float) -> int:
    """Convert a canonical 0-100 score to the 0-150 display scale."""
    return max(0, min(LEGACY_MAX_SCORE, round(score * LEGACY_SCALE_FACTOR)))


def days_until_renewal(renewal_date: Optional[date], as_of: date) -> Optional[int]:
    """Signed days from ``as_of`` to the renewal date; negative when overdue."""
    if renewal_date is None:
        return None
    return (renewal_date - as_of).days


def renewal_label(days: Optional[int]) -> str:
    if days is None:
        return "No renewal date"
    if days < 0:
        return "Overdue"
    if days == 0:
        return "TODAY"
    if days == 1:
        return "1 day"
    return f"{days} days"


def count_digits(value: Optional[str]) -> int:
    return sum(ch.isdigit() for ch in value or "")


def has_valid_phone(phone: Optional[str]) -> bool:
    return count_digits(phone) >= MIN_PHONE_DIGITS


def has_valid_email(email: Optional[str]) -> bool:
    return "@" in (email or "")


def _step_score(value: float, steps: list[tuple[float, int]], floor: int) -> int:
    for minimum, points in steps:
        if value >= minimum:
            return points
    return floor


class PriorityScorer:
    """Computes the five-part base priority score."""

    def __init__(self, classifier: Optional[ProductGapClassifier] = None):
        self.classifier = classifier or ProductGapClassifier()

    def score(
        self,
        record: OpportunityRecord,
        gap: Optional[ProductGapResult] = None,
        as_of: Optional[date] = None,
    ) -> ScoreBreakdown:
        """
        Score a record.

        Args:
            record: Opportunity record to score
            gap: Pre-computed product-gap classification, computed when omitted
            as_of: Reference date for renewal timing, defaults to today

        Returns:
            ScoreBreakdown whose ``total`` is the base score
        """
        gap = gap or self.classifier.classify(record)
        as_of = as_of or date.today()

        return ScoreBreakdown(
            gap_score=self._gap_score(record.policy_count, gap.segment_type),
            timing_score=self._timing_score(days_until_renewal(record.renewal_date, as_of)),
            value_score=self._value_score(record.current_premium, record.tenure_years),
            risk_score=self._risk_score(record),
            contact_score=self._contact_score(record.phone, record.email),
        )

    def _gap_score(self, policy_count: int, segment_type: CrossSellSegment) -> int:
        # 0 policies is treated as a single policy
        effective_count = max(policy_count, 1)
        base = GAP_SCORE_BY_POLICY_COUNT.get(effective_count, GAP_SCORE_DEFAULT)
        bonus = GAP_SEGMENT_BONUS.get(segment_type.value, 0)
        return min(SUB_SCORE_CAPS["gap"], base + bonus)

    def _timing_score(self, days: Optional[int]) -> int:
        if days is None:
            return TIMING_NO_DATE_SCORE

        # Overdue renewals score as due today
        days = max(0, days)
        for max_days, points in TIMING_STEPS:
            if days <= max_days:
                return min(SUB_SCORE_CAPS["timing"], points)
        return TIMING_BEYOND_SCORE

    def _value_score(self, premium: float, tenure_years: float) -> int:
        premium_points = _step_score(premium, PREMIUM_VALUE_STEPS, PREMIUM_VALUE_FLOOR)
        tenure_points = _step_score(tenure_years, TENURE_VALUE_STEPS, 0)
        return min(SUB_SCORE_CAPS["value"], premium_points + tenure_points)

    def _risk_score(self, record: OpportunityRecord) -> int:
        score = RISK_NEUTRAL_SCORE
        if record.balance_due > 0:
            score -= RISK_BALANCE_PENALTY
        if record.ezpay_status == "Yes":
            score += RISK_EZPAY_BONUS
        if record.tenure_years >= RISK_TENURE_YEARS:
            score += RISK_TENURE_BONUS
        return max(0, min(SUB_SCORE_CAPS["risk"], score))

    def _contact_score(self, phone: str, email: str) -> int:
        score = CONTACT_BASE_SCORE
        if has_valid_phone(phone):
            score += CONTACT_CHANNEL_BONUS
        if has_valid_email(email):
            score += CONTACT_CHANNEL_BONUS
        return min(SUB_SCORE_CAPS["contact"], score)
