"""
Customer Matching

Correlates an opportunity with customer-insight records:
1. Stable key join on customer_id
2. Exact match on the normalized customer name
3. Fuzzy name match (token sort ratio) above a threshold, logged as a
   warning since common names can collide

Ambiguous matches at any name stage return no match.
"""

import re
from typing import Optional, Sequence

from rapidfuzz import fuzz

from crosssell.schemas.customer import CustomerInsight, CustomerMatch
from crosssell.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_FUZZY_THRESHOLD = 90.0

_NON_ALPHANUMERIC = re.compile(r"[^\w\s]|_")


def normalize_customer_name(name: Optional[str]) -> str:
    """Casefold, drop punctuation and collapse whitespace."""
    cleaned = _NON_ALPHANUMERIC.sub(" ", (name or "").casefold())
    return " ".join(cleaned.split())


class CustomerMatcher:
    """Matches opportunities to customer-insight records."""

    def __init__(self, fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD):
        self.fuzzy_threshold = fuzzy_threshold

    def match(
        self,
        customer_name: str,
        candidates: Sequence[CustomerInsight],
        customer_id: Optional[str] = None,
    ) -> Optional[CustomerMatch]:
        """
        Find the customer-insight record for an opportunity.

        Args:
            customer_name: Opportunity customer name
            candidates: Customer-insight records to search
            customer_id: Stable identifier of the opportunity, when known

        Returns:
            CustomerMatch, or None when nothing matches or the match is ambiguous
        """
        if not candidates:
            return None

        if customer_id:
            for insight in candidates:
                if insight.customer_id and insight.customer_id == customer_id:
                    return CustomerMatch(insight=insight, method="customer_id")

        target = normalize_customer_name(customer_name)
        if not target:
            return None

        exact = [c for c in candidates if normalize_customer_name(c.customer_name) == target]
        if len(exact) == 1:
            return CustomerMatch(insight=exact[0], method="exact_name")
        if len(exact) > 1:
            LOGGER.warning(
                "Ambiguous exact name match, skipping",
                extra={"customer_name": customer_name, "candidates": len(exact)},
            )
            return None

        return self._fuzzy_match(customer_name, target, candidates)

    def _fuzzy_match(
        self,
        customer_name: str,
        target: str,
        candidates: Sequence[CustomerInsight],
    ) -> Optional[CustomerMatch]:
        scored = [
            (fuzz.token_sort_ratio(target, normalize_customer_name(c.customer_name)), c)
            for c in candidates
        ]
        above = [(score, c) for score, c in scored if score >= self.fuzzy_threshold]
        if not above:
            return None

        best_score = max(score for score, _ in above)
        best = [c for score, c in above if score == best_score]
        if len(best) > 1:
            LOGGER.warning(
                "Ambiguous fuzzy name match, skipping",
                extra={"customer_name": customer_name, "score": best_score, "candidates": len(best)},
            )
            return None

        LOGGER.warning(
            f"Fuzzy name match used for '{customer_name}' -> '{best[0].customer_name}' "
            f"(score {best_score:.1f})",
            extra={"customer_name": customer_name, "score": best_score},
        )
        return CustomerMatch(insight=best[0], method="fuzzy_name", score=round(best_score, 1))
