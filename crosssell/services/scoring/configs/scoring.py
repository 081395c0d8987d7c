"""Configuration for cross-sell priority and lead scoring.

This module contains every tunable constant the scoring pipeline uses. Values
in ``scoring.yaml`` beside this file override the hard-coded defaults, and a
handful of enhancement defaults can be overridden from the environment through
``crosssell.core.config.ScoringSettings``.
"""

from pathlib import Path

import yaml

from crosssell.core.exceptions import ConfigurationError
from crosssell.utils.logging import get_logger

LOGGER = get_logger(__name__)

# Path to the YAML overrides
CONFIG_PATH = Path(__file__).parent / "scoring.yaml"


def load_scoring_config(path: Path = CONFIG_PATH) -> dict:
    """Load scoring configuration from YAML."""
    if not path.exists():
        return {}
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        LOGGER.warning(
            f"Could not load scoring config from {path}, using defaults: {e}",
            extra={"config_path": str(path)},
        )
        return {}


CONFIG = load_scoring_config()


def build_tier_thresholds(raw: dict[str, int]) -> list[tuple[str, int]]:
    """Return (tier, minimum score) pairs ordered from highest to lowest.

    Raises:
        ConfigurationError: If two tiers share a threshold or a threshold is
            outside the canonical range.
    """
    ordered = sorted(raw.items(), key=lambda item: item[1], reverse=True)
    for (upper_tier, upper), (lower_tier, lower) in zip(ordered, ordered[1:]):
        if upper == lower:
            raise ConfigurationError(
                f"Tier thresholds overlap: {upper_tier} and {lower_tier} both start at {upper}"
            )
    for tier, threshold in ordered:
        if not 0 < threshold <= CANONICAL_MAX_SCORE:
            raise ConfigurationError(f"Tier threshold for {tier} out of range: {threshold}")
    return [(tier, int(threshold)) for tier, threshold in ordered]


# Score scales

_scale = CONFIG.get("scale", {})
CANONICAL_MAX_SCORE: int = _scale.get("canonical_max", 100)
LEGACY_MAX_SCORE: int = _scale.get("legacy_max", 150)
LEGACY_SCALE_FACTOR: float = LEGACY_MAX_SCORE / CANONICAL_MAX_SCORE

# Priority tiers (canonical scale); anything below the last threshold is LOW
PRIORITY_TIER_THRESHOLDS: list[tuple[str, int]] = build_tier_thresholds(
    CONFIG.get("priority_tiers") or {"HOT": 80, "HIGH": 60, "MEDIUM": 40}
)

# Legacy-scale histogram buckets: (label, inclusive upper bound)
LEGACY_HISTOGRAM_BUCKETS: list[tuple[str, int]] = [
    ("0-25", 25),
    ("26-50", 50),
    ("51-75", 75),
    ("76-100", 100),
    ("101-125", 125),
    ("126-150", 150),
]

# Priority sub-scores

SUB_SCORE_CAPS: dict[str, int] = {
    "gap": 40,
    "timing": 25,
    "value": 20,
    "risk": 10,
    "contact": 5,
    **CONFIG.get("sub_score_caps", {}),
}

if sum(SUB_SCORE_CAPS.values()) != CANONICAL_MAX_SCORE:
    raise ConfigurationError(
        f"Sub-score caps sum to {sum(SUB_SCORE_CAPS.values())}, expected {CANONICAL_MAX_SCORE}"
    )

GAP_SCORE_BY_POLICY_COUNT: dict[int, int] = {1: 35, 2: 25}
GAP_SCORE_DEFAULT: int = 15
GAP_SEGMENT_BONUS: dict[str, int] = {
    "mono_to_bundle": 5,
    "add_umbrella": 3,
}

_timing = CONFIG.get("timing", {})
# (max days until renewal, points), first match wins
TIMING_STEPS: list[tuple[int, int]] = [
    (int(days), int(points)) for days, points in _timing.get("steps", [(30, 25), (60, 15), (90, 10)])
]
TIMING_BEYOND_SCORE: int = _timing.get("beyond", 5)
TIMING_NO_DATE_SCORE: int = _timing.get("no_renewal_date", 10)

# (minimum, points), first match wins
PREMIUM_VALUE_STEPS: list[tuple[float, int]] = [(3000, 10), (2000, 8), (1000, 5)]
PREMIUM_VALUE_FLOOR: int = 2
TENURE_VALUE_STEPS: list[tuple[float, int]] = [(5, 10), (3, 7), (1, 4)]

RISK_NEUTRAL_SCORE: int = 5
RISK_BALANCE_PENALTY: int = 3
RISK_EZPAY_BONUS: int = 3
RISK_TENURE_BONUS: int = 2
RISK_TENURE_YEARS: float = 3

CONTACT_BASE_SCORE: int = 3
CONTACT_CHANNEL_BONUS: int = 1
MIN_PHONE_DIGITS: int = 10

# Enhancement

_enhancement = CONFIG.get("enhancement", {})
DEFAULT_BLEND_WEIGHT: float = float(_enhancement.get("blend_weight", 0.6))
DEFAULT_MIN_BASE_SCORE: int = int(_enhancement.get("min_base_score_for_enhancement", 30))

CONFIDENCE_CEILING: float = _enhancement.get("confidence_ceiling", 0.95)
CONFIDENCE_LEAD_DISABLED: float = 0.7
CONFIDENCE_BELOW_THRESHOLD: float = 0.6
CONFIDENCE_BASE: float = 0.5
CONFIDENCE_SIGNALS: dict[str, float] = {
    "phone": 0.1,
    "email": 0.1,
    "renewal_date": 0.1,
    "tenure": 0.05,
    "premium": 0.05,
    "ezpay_resolved": 0.05,
    "strong_lead": 0.05,
}
STRONG_LEAD_SCORE: float = 70
TOP_FACTOR_COUNT: int = 3

# Lead quality model

LEAD_SCORE_WEIGHTS: dict[str, float] = {
    "product_intent": 0.25,
    "bundle_potential": 0.20,
    "premium_range": 0.15,
    "demographics": 0.15,
    "engagement": 0.10,
    "credit_tier": 0.10,
    "source_quality": 0.05,
    **CONFIG.get("lead_scoring", {}).get("weights", {}),
}

LEAD_FACTOR_LABELS: dict[str, str] = {
    "product_intent": "Product intent",
    "bundle_potential": "Bundle potential",
    "premium_range": "Premium tier",
    "demographics": "Demographics",
    "engagement": "Engagement level",
    "credit_tier": "Credit quality",
    "source_quality": "Source quality",
}

# Keyed by sorted, comma-joined product list
PRODUCT_INTENT_SCORES: dict[str, int] = {
    "auto": 50,
    "home": 55,
    "auto,home": 85,
    "auto,umbrella": 75,
    "home,umbrella": 80,
    "auto,home,umbrella": 95,
    "life": 45,
    "motorcycle": 40,
    "renters": 35,
}
PRODUCT_INTENT_DEFAULT: int = 50

BUNDLE_POTENTIAL_SCORES: dict[int, int] = {3: 95, 2: 80}
BUNDLE_POTENTIAL_DEFAULT: int = 40

PREMIUM_RANGE_STEPS: list[tuple[float, int]] = [(4000, 95), (2500, 75), (1500, 60)]
PREMIUM_RANGE_FLOOR: int = 40
PREMIUM_RANGE_UNKNOWN: int = 60

AGE_SCORES: dict[str, int] = {
    "18-24": 40,
    "25-29": 65,
    "30-39": 85,
    "40-49": 90,
    "50-59": 85,
    "60-69": 75,
    "70+": 60,
}
AGE_SCORE_DEFAULT: int = 70

# (tenure strictly above, age bracket), first match wins
TENURE_AGE_BRACKETS: list[tuple[float, str]] = [(10, "40-49"), (5, "30-39"), (2, "25-29")]
YOUNGEST_AGE_BRACKET: str = "18-24"

HOMEOWNER_MULTIPLIER: dict[str, float] = {
    "owner": 1.3,
    "renter": 0.9,
    "unknown": 1.0,
}

ENGAGEMENT_SCORES: dict[str, int] = {
    "high": 90,
    "medium": 70,
    "low": 40,
}

CREDIT_TIER_SCORES: dict[str, int] = {
    "excellent": 95,
    "good": 80,
    "fair": 60,
    "poor": 35,
    "unknown": 70,
}

SOURCE_QUALITY_SCORES: dict[str, int] = {
    "referral": 95,
    "organic": 85,
    "smartfinancial": 75,
    "google_search": 75,
    "facebook": 60,
    "tiktok": 60,
}
SOURCE_QUALITY_DEFAULT: int = 70

# (minimum total, tier), first match wins
LEAD_TIER_THRESHOLDS: list[tuple[float, str]] = [(90, "elite"), (70, "premium"), (50, "standard")]

LEAD_TIER_LTV: dict[str, float] = {
    "elite": 18000,
    "premium": 9000,
    "standard": 4500,
    "low_value": 1800,
}
LEAD_TIER_CAC: dict[str, float] = {
    "elite": 1200,
    "premium": 700,
    "standard": 400,
    "low_value": 200,
}
LEAD_TIER_CONVERSION: dict[str, float] = {
    "elite": 0.42,
    "premium": 0.28,
    "standard": 0.12,
    "low_value": 0.04,
}

# Lead-model product keyword for each recommended product
RECOMMENDED_PRODUCT_LEAD_KEYS: dict[str, str] = {
    "auto_to_home": "home",
    "home_to_auto": "auto",
    "add_life": "life",
    "add_umbrella": "umbrella",
}

# Opportunity enrichment

POTENTIAL_PREMIUM_BY_SEGMENT: dict[str, float] = {
    "auto_to_home": 2963,
    "home_to_auto": 2800,
    "add_life": 1200,
    "add_umbrella": 350,
    "other": 1000,
}
BUNDLE_PREMIUM_RATIO: float = 0.8
BUNDLE_PREMIUM_FLOOR: float = 250

EXPECTED_CONVERSION_PCT: dict[str, int] = {
    "auto_to_home": 22,
    "home_to_auto": 25,
    "mono_to_bundle": 30,
    "add_life": 15,
    "add_umbrella": 18,
    "other": 10,
}

RETENTION_LIFT_PCT: dict[str, int] = {
    "auto_to_home": 19,
    "home_to_auto": 19,
    "mono_to_bundle": 25,
    "add_life": 15,
    "add_umbrella": 12,
    "other": 10,
}


MAX_TALKING_POINTS: int = 3
URGENT_RENEWAL_DAYS: int = 30
LOYAL_TENURE_YEARS: float = 5
