"""
Product-Gap Classification

Works out which product lines a customer already holds and which product
to pitch next:
1. Product parsing: presence flags when the source sets them, else the
   delimited products text
2. Holdings: synonym matching per product line
3. Recommendation: ordered decision list, first match wins
"""

import re
from typing import Optional

from crosssell.schemas.opportunity import (
    CrossSellSegment,
    OpportunityRecord,
    ProductGapResult,
    ProductHoldings,
)
from crosssell.utils.logging import get_logger

LOGGER = get_logger(__name__)

PRODUCT_DELIMITERS = re.compile(r"[,;]")

PRODUCT_SYNONYMS: dict[str, tuple[str, ...]] = {
    "auto": ("auto", "private passenger", "motorcycle"),
    "property": ("home", "property", "condo", "renter", "landlord", "dwelling"),
    "life": ("life",),
    "umbrella": ("umbrella",),
}

# Product names emitted when presence flags drive parsing
FLAG_PRODUCT_NAMES: dict[str, str] = {
    "auto": "Auto",
    "property": "Property",
    "life": "Life",
    "umbrella": "Umbrella",
}

MONOLINE_FLAG_VALUES = {"1", "y", "yes", "true", "single"}

# Placeholder products text for records with no known products
UNKNOWN_PRODUCTS = "unknown"


def parse_products(products_text: Optional[str], flags: Optional[dict[str, Optional[bool]]] = None) -> list[str]:
    """Split a record's products into a list of product names.

    Presence flags take precedence over the products text whenever at least
    one flag is set to True. The "Unknown" placeholder yields no products.

    Args:
        products_text: Comma or semicolon delimited product text
        flags: Optional mapping of product line to presence flag

    Returns:
        List of non-empty, stripped product names
    """
    if flags and any(flags.values()):
        return [FLAG_PRODUCT_NAMES[line] for line, present in flags.items() if present]

    if not products_text:
        return []

    return [
        part.strip()
        for part in PRODUCT_DELIMITERS.split(products_text)
        if part.strip() and part.strip().lower() != UNKNOWN_PRODUCTS
    ]


def detect_holdings(products: list[str]) -> ProductHoldings:
    """Match product names against the synonym table, case-insensitively."""
    lowered = [product.lower() for product in products]

    def holds(line: str) -> bool:
        return any(
            synonym in product
            for product in lowered
            for synonym in PRODUCT_SYNONYMS[line]
        )

    return ProductHoldings(
        has_auto=holds("auto"),
        has_property=holds("property"),
        has_life=holds("life"),
        has_umbrella=holds("umbrella"),
    )


def is_multiline_flag(flag_text: Optional[str]) -> bool:
    """True when a source indicator explicitly says the household is multiline."""
    return flag_text is not None and "multi" in str(flag_text).lower()


def monoline_from_flag(flag_text: Optional[str]) -> bool:
    """Interpret a source monoline indicator.

    "multi" always wins, so "Multiline Household" is not monoline even though
    it contains "mono".
    """
    if flag_text is None:
        return False

    if is_multiline_flag(flag_text):
        return False

    value = str(flag_text).strip().lower()
    if "mono" in value:
        return True
    return value in MONOLINE_FLAG_VALUES


def recommend_product(
    holdings: ProductHoldings, is_true_monoline: bool
) -> tuple[str, CrossSellSegment]:
    """Pick the next product and cross-sell segment from current holdings."""
    if is_true_monoline:
        if holdings.has_auto and not holdings.has_property:
            return "Homeowners/Renters", CrossSellSegment.AUTO_TO_HOME
        if holdings.has_property and not holdings.has_auto:
            return "Auto Insurance", CrossSellSegment.HOME_TO_AUTO
        return "Bundle Package", CrossSellSegment.MONO_TO_BUNDLE

    if holdings.has_auto and holdings.has_property:
        if not holdings.has_life:
            return "Life Insurance", CrossSellSegment.ADD_LIFE
        if not holdings.has_umbrella:
            return "Umbrella Coverage", CrossSellSegment.ADD_UMBRELLA

    if not holdings.has_life:
        return "Life Insurance", CrossSellSegment.ADD_LIFE

    # Fully loaded households fall through to umbrella
    return "Umbrella Coverage", CrossSellSegment.ADD_UMBRELLA


class ProductGapClassifier:
    """Classifies an opportunity record's product gap."""

    def classify(self, record: OpportunityRecord) -> ProductGapResult:
        """
        Classify a record into a cross-sell segment.

        Args:
            record: Opportunity record to classify

        Returns:
            ProductGapResult with parsed products, holdings, monoline status,
            segment type and recommended product
        """
        products = parse_products(record.current_products, record.presence_flags)
        holdings = detect_holdings(products)

        product_count = len(products)
        # A single product is monoline unless the source flag says multiline
        is_true_monoline = (
            (product_count == 1 or monoline_from_flag(record.monoline_flag))
            and product_count <= 1
            and not is_multiline_flag(record.monoline_flag)
        )

        recommended_product, segment_type = recommend_product(holdings, is_true_monoline)

        LOGGER.debug(
            "Product gap classified",
            extra={
                "customer_name": record.customer_name,
                "product_count": product_count,
                "segment_type": segment_type.value,
            },
        )

        return ProductGapResult(
            products=products,
            holdings=holdings,
            is_true_monoline=is_true_monoline,
            segment_type=segment_type,
            recommended_product=recommended_product,
        )
