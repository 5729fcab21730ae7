"""
Tests for the portfolio valuation series.
"""

from decimal import Decimal

from etf_insight.models import Holding, PriceObservation, ValuationPoint
from etf_insight.portfolio.valuation import compute_valuation_series, round_cents


class TestComputeValuationSeries:
    """Tests for the compute_valuation_series function."""

    def test_weighted_sum_per_date(self):
        holdings = [Holding("A", Decimal("0.6")), Holding("B", Decimal("0.4"))]
        observations = [
            PriceObservation("d1", "A", Decimal("10")),
            PriceObservation("d1", "B", Decimal("20")),
            PriceObservation("d2", "A", Decimal("11")),
        ]

        series = compute_valuation_series(holdings, observations)

        assert series == [
            ValuationPoint("d1", Decimal("14.00")),
            # B has no d2 price and contributes 0
            ValuationPoint("d2", Decimal("6.60")),
        ]

    def test_dates_sorted_lexically(self):
        holdings = [Holding("A", Decimal("1"))]
        observations = [
            PriceObservation("2024-01-03", "A", Decimal("3")),
            PriceObservation("2024-01-01", "A", Decimal("1")),
            PriceObservation("2024-01-02", "A", Decimal("2")),
        ]

        series = compute_valuation_series(holdings, observations)

        assert [p.date for p in series] == ["2024-01-01", "2024-01-02", "2024-01-03"]

    def test_date_with_only_unheld_constituents_valued_zero(self):
        """Test every panel date appears even if no holding is priced."""
        holdings = [Holding("A", Decimal("1"))]
        observations = [
            PriceObservation("2024-01-01", "A", Decimal("5")),
            PriceObservation("2024-01-02", "Z", Decimal("99")),
        ]

        series = compute_valuation_series(holdings, observations)

        assert series[1] == ValuationPoint("2024-01-02", Decimal("0.00"))

    def test_last_observation_wins_for_duplicate_key(self):
        """Test duplicate (date, constituent) pairs keep the last price."""
        holdings = [Holding("A", Decimal("1"))]
        observations = [
            PriceObservation("2024-01-01", "A", Decimal("12")),
            PriceObservation("2024-01-01", "A", Decimal("15")),
        ]

        series = compute_valuation_series(holdings, observations)

        assert series[0].value == Decimal("15.00")

    def test_values_rounded_to_cents(self, sample_holdings, sample_observations):
        series = compute_valuation_series(sample_holdings, sample_observations)

        # 0.4*185.64 + 0.35*374.58 + 0.25*100.50 = 74.256 + 131.103 + 25.125
        assert series[0].value == Decimal("230.48")
        # XOM missing on 2024-01-03: 0.4*184.25 + 0.35*370.60
        assert series[1].value == Decimal("203.41")
        # MSFT missing on 2024-01-04: 0.4*181.91 + 0.25*101.20
        assert series[2].value == Decimal("98.06")

    def test_no_holdings(self, sample_observations):
        series = compute_valuation_series([], sample_observations)

        assert [p.value for p in series] == [Decimal("0.00")] * 3

    def test_no_observations(self, sample_holdings):
        assert compute_valuation_series(sample_holdings, []) == []

    def test_to_dict_uses_price_key(self):
        point = ValuationPoint("2024-01-01", Decimal("14.00"))

        assert point.to_dict() == {"date": "2024-01-01", "price": 14.0}


class TestRoundCents:
    """Tests for the round_cents function."""

    def test_half_up(self):
        assert round_cents(Decimal("1.005")) == Decimal("1.01")
        assert round_cents(Decimal("-1.005")) == Decimal("-1.01")
        assert round_cents(Decimal("2.004")) == Decimal("2.00")
