"""
Top-N ranking of holdings by dollar size.
"""

import re
from decimal import Decimal
from typing import Any, Iterable

from etf_insight.models import Holding, LatestPrice, RankedEntry
from etf_insight.portfolio.holdings import enrich_holdings
from etf_insight.portfolio.valuation import round_cents


DEFAULT_TOP_N = 5
MAX_TOP_N = 100

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_top_n(value: Any) -> int:
    """
    Turn a raw request value into a ranking size.

    A leading integer is read ("3.7" -> 3). Missing, non-numeric and
    non-positive values fall back to DEFAULT_TOP_N; the result is
    capped at MAX_TOP_N.

    Args:
        value: Raw value, usually a query string parameter

    Returns:
        Ranking size in [1, MAX_TOP_N]
    """
    if isinstance(value, int):
        n = value
    else:
        match = _LEADING_INT.match(str(value)) if value is not None else None
        n = int(match.group(1)) if match else 0

    if n <= 0:
        return DEFAULT_TOP_N
    return min(n, MAX_TOP_N)


def top_holdings(
    holdings: Iterable[Holding],
    index: dict[str, LatestPrice],
    n: int = DEFAULT_TOP_N,
) -> list[RankedEntry]:
    """
    Rank holdings by holding size, largest first.

    Only holdings with a price and a strictly positive size are ranked.
    Ties keep input order. Sizes are rounded to cents after ranking.

    Args:
        holdings: Portfolio holdings
        index: Latest price per constituent
        n: Number of entries to return; non-positive values mean
           DEFAULT_TOP_N and larger ones are capped at MAX_TOP_N

    Returns:
        Up to n RankedEntry records
    """
    if n <= 0:
        n = DEFAULT_TOP_N
    n = min(n, MAX_TOP_N)

    sized = [
        h for h in enrich_holdings(holdings, index)
        if h.holding_size is not None and h.holding_size > Decimal("0")
    ]
    sized.sort(key=lambda h: h.holding_size, reverse=True)

    return [
        RankedEntry(name=h.constituent, size=round_cents(h.holding_size))
        for h in sized[:n]
    ]
