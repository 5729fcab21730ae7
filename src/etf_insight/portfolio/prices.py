"""
Latest observed price per constituent.
"""

from decimal import Decimal
from typing import Iterable

from etf_insight.models import LatestPrice, PriceObservation


def build_latest_price_index(
    observations: Iterable[PriceObservation],
) -> dict[str, LatestPrice]:
    """
    Reduce price observations to the most recent one per constituent.

    Dates are compared as strings. An observation only replaces the
    stored one when its date is strictly greater, so among equal dates
    the first observation processed wins.

    Args:
        observations: Price observations in arrival order

    Returns:
        Dictionary mapping constituent -> LatestPrice, covering only
        constituents with at least one observation
    """
    index: dict[str, LatestPrice] = {}

    for obs in observations:
        existing = index.get(obs.constituent)
        if existing is None or obs.date > existing.date:
            index[obs.constituent] = LatestPrice(date=obs.date, price=obs.price)

    return index


def latest_prices(index: dict[str, LatestPrice]) -> dict[str, Decimal]:
    """Flatten a latest-price index to constituent -> price."""
    return {constituent: latest.price for constituent, latest in index.items()}
