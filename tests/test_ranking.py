"""
Tests for the top-N holdings ranking.
"""

from decimal import Decimal

import pytest

from etf_insight.models import Holding, LatestPrice, RankedEntry
from etf_insight.portfolio.prices import build_latest_price_index
from etf_insight.portfolio.ranking import (
    DEFAULT_TOP_N,
    MAX_TOP_N,
    parse_top_n,
    top_holdings,
)


@pytest.fixture
def unit_price_index() -> dict[str, LatestPrice]:
    """Every constituent priced at 1, so size equals weight."""
    return {
        name: LatestPrice("2024-01-01", Decimal("1"))
        for name in ["A", "B", "C", "D", "E"]
    }


class TestTopHoldings:
    """Tests for the top_holdings function."""

    def test_ties_keep_input_order_and_non_positive_excluded(self, unit_price_index):
        holdings = [
            Holding("A", Decimal("5")),
            Holding("B", Decimal("5")),
            Holding("C", Decimal("3")),
            Holding("D", Decimal("0")),
            Holding("E", Decimal("-2")),
        ]

        top = top_holdings(holdings, unit_price_index, 2)

        assert top == [
            RankedEntry("A", Decimal("5.00")),
            RankedEntry("B", Decimal("5.00")),
        ]

    def test_excludes_zero_and_negative_sizes(self, unit_price_index):
        holdings = [
            Holding("D", Decimal("0")),
            Holding("E", Decimal("-2")),
            Holding("C", Decimal("3")),
        ]

        top = top_holdings(holdings, unit_price_index, 10)

        assert [entry.name for entry in top] == ["C"]

    def test_excludes_unpriced_holdings(self, unit_price_index):
        holdings = [Holding("A", Decimal("1")), Holding("UNPRICED", Decimal("9"))]

        top = top_holdings(holdings, unit_price_index, 5)

        assert [entry.name for entry in top] == ["A"]

    def test_ranked_on_unrounded_size(self):
        """Test ordering uses exact sizes even when rounding ties them."""
        index = {
            "A": LatestPrice("2024-01-01", Decimal("1.001")),
            "B": LatestPrice("2024-01-01", Decimal("1.004")),
        }
        holdings = [Holding("A", Decimal("1")), Holding("B", Decimal("1"))]

        top = top_holdings(holdings, index, 5)

        assert top == [
            RankedEntry("B", Decimal("1.00")),
            RankedEntry("A", Decimal("1.00")),
        ]

    def test_uses_latest_prices(self, sample_holdings, sample_observations):
        index = build_latest_price_index(sample_observations)

        top = top_holdings(sample_holdings, index, 3)

        # MSFT 0.35*370.60, AAPL 0.4*181.91, XOM 0.25*101.20
        assert top == [
            RankedEntry("MSFT", Decimal("129.71")),
            RankedEntry("AAPL", Decimal("72.76")),
            RankedEntry("XOM", Decimal("25.30")),
        ]

    @pytest.mark.parametrize("n", [0, -1, -50])
    def test_non_positive_n_uses_default(self, n):
        names = ["A", "B", "C", "D", "E", "F", "G"]
        index = {name: LatestPrice("2024-01-01", Decimal("1")) for name in names}
        holdings = [Holding(name, Decimal("1")) for name in names]

        top = top_holdings(holdings, index, n)

        assert [entry.name for entry in top] == names[:DEFAULT_TOP_N]

    def test_n_capped(self):
        names = [f"C{i:03d}" for i in range(MAX_TOP_N + 20)]
        index = {name: LatestPrice("2024-01-01", Decimal("1")) for name in names}
        holdings = [Holding(name, Decimal("1")) for name in names]

        assert len(top_holdings(holdings, index, 1000)) == MAX_TOP_N


class TestParseTopN:
    """Tests for the parse_top_n function."""

    @pytest.mark.parametrize("value,expected", [
        (None, DEFAULT_TOP_N),
        ("", DEFAULT_TOP_N),
        ("abc", DEFAULT_TOP_N),
        ("0", DEFAULT_TOP_N),
        ("-3", DEFAULT_TOP_N),
        ("3", 3),
        (" 7", 7),
        ("3.7", 3),
        ("12abc", 12),
        ("100", 100),
        ("101", MAX_TOP_N),
        ("5000", MAX_TOP_N),
        (10, 10),
    ])
    def test_parse(self, value, expected):
        assert parse_top_n(value) == expected
