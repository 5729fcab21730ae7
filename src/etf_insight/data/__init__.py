"""
Data ingestion module for ETF Insight.

Provides CSV parsing of holdings and price panels, and durable
storage of the last uploaded price file.
"""

from etf_insight.data.parsers import (
    CsvParseError,
    DataLoadError,
    holdings_to_csv,
    load_holdings,
    load_price_panel,
    parse_holdings,
    parse_number,
    parse_price_panel,
)
from etf_insight.data.schemas import (
    HOLDINGS_SCHEMA,
    PRICES_SCHEMA,
)
from etf_insight.data.storage import PriceFileStore

__all__ = [
    "CsvParseError",
    "DataLoadError",
    "holdings_to_csv",
    "load_holdings",
    "load_price_panel",
    "parse_holdings",
    "parse_number",
    "parse_price_panel",
    "HOLDINGS_SCHEMA",
    "PRICES_SCHEMA",
    "PriceFileStore",
]
