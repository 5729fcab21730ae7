"""
Portfolio valuation series.

Values the weighted portfolio on every date of the price panel.
"""

from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from etf_insight.models import Holding, PriceObservation, ValuationPoint


CENTS = Decimal("0.01")


def round_cents(value: Decimal) -> Decimal:
    """Round a monetary amount to 2 decimal places, half up."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_valuation_series(
    holdings: Iterable[Holding],
    observations: Iterable[PriceObservation],
) -> list[ValuationPoint]:
    """
    Compute total portfolio value for each date in the price panel.

    For each distinct date, the value is the sum over all holdings of
    price * weight. A holding with no price on that date contributes 0,
    which understates the value on dates with partial coverage.

    Args:
        holdings: Portfolio holdings
        observations: Price observations; for a repeated
                      (date, constituent) the last one wins

    Returns:
        ValuationPoints ordered by date (string order), values
        rounded to cents
    """
    holdings = list(holdings)

    prices_by_date: dict[str, dict[str, Decimal]] = defaultdict(dict)
    for obs in observations:
        prices_by_date[obs.date][obs.constituent] = obs.price

    series = []
    for date in sorted(prices_by_date):
        day_prices = prices_by_date[date]
        value = sum(
            (day_prices.get(h.constituent, Decimal("0")) * h.weight for h in holdings),
            Decimal("0"),
        )
        series.append(ValuationPoint(date=date, value=round_cents(value)))

    return series
