"""
Holdings enrichment and ordering.

Joins holdings against the latest-price index and sorts the
enriched view for display.
"""

import unicodedata
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional

from etf_insight.models import (
    EnrichedHolding,
    Holding,
    LatestPrice,
    SortField,
    SortOrder,
)


def enrich_holdings(
    holdings: Iterable[Holding],
    index: dict[str, LatestPrice],
) -> list[EnrichedHolding]:
    """
    Left-join holdings against the latest-price index.

    Args:
        holdings: Holdings in display order
        index: Latest price per constituent

    Returns:
        EnrichedHolding per input holding, in the same order. Holdings
        without a price carry neither latest_price nor holding_size.
    """
    enriched = []
    for holding in holdings:
        latest = index.get(holding.constituent)
        enriched.append(
            EnrichedHolding.from_holding(
                holding,
                latest.price if latest is not None else None,
            )
        )
    return enriched


def parse_sort_field(value: Optional[str]) -> SortField:
    """Map a query value to a SortField, defaulting to constituent."""
    try:
        return SortField(value)
    except ValueError:
        return SortField.CONSTITUENT


def parse_sort_order(value: Optional[str]) -> SortOrder:
    """Map a query value to a SortOrder, defaulting to ascending."""
    try:
        return SortOrder(value)
    except ValueError:
        return SortOrder.ASC


def collation_key(value: str) -> tuple[str, str]:
    """
    Locale-style sort key for display names.

    Primary ordering ignores accents and case; on ties lower case
    sorts before upper case.
    """
    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return base.casefold(), value.swapcase()


def _price_or_zero(holding: EnrichedHolding) -> Decimal:
    if holding.latest_price is None:
        return Decimal("0")
    return holding.latest_price


_SORT_KEYS: dict[SortField, Callable[[EnrichedHolding], Any]] = {
    SortField.CONSTITUENT: lambda h: collation_key(h.constituent),
    SortField.WEIGHT: lambda h: h.weight,
    SortField.PRICE: _price_or_zero,
}


def sort_holdings(
    holdings: Iterable[EnrichedHolding],
    field: SortField = SortField.CONSTITUENT,
    order: SortOrder = SortOrder.ASC,
) -> list[EnrichedHolding]:
    """
    Sort enriched holdings by a single field.

    The sort is stable in both directions: holdings with equal keys
    keep their input order.

    Args:
        holdings: Enriched holdings
        field: Field to sort by; missing prices sort as 0
        order: Ascending or descending

    Returns:
        New sorted list
    """
    return sorted(
        holdings,
        key=_SORT_KEYS[field],
        reverse=order is SortOrder.DESC,
    )
