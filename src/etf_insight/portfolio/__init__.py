"""
Portfolio analytics module for ETF Insight.

Provides the latest-price index, holdings enrichment and sorting,
the valuation series, and the top-N ranking.
"""

from etf_insight.portfolio.prices import (
    build_latest_price_index,
    latest_prices,
)
from etf_insight.portfolio.holdings import (
    enrich_holdings,
    parse_sort_field,
    parse_sort_order,
    sort_holdings,
)
from etf_insight.portfolio.valuation import compute_valuation_series
from etf_insight.portfolio.ranking import parse_top_n, top_holdings

__all__ = [
    "build_latest_price_index",
    "latest_prices",
    "enrich_holdings",
    "parse_sort_field",
    "parse_sort_order",
    "sort_holdings",
    "compute_valuation_series",
    "parse_top_n",
    "top_holdings",
]
