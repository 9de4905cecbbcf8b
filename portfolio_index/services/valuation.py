"""Price lookup, portfolio valuation and index normalization."""

from __future__ import annotations

import math
from typing import Iterable, Mapping, Optional, Sequence

from portfolio_index.models import Holding, PortfolioPrice, PriceSeries


def price_on_or_before(series: Optional[Mapping[str, float]], target: str) -> Optional[float]:
    """Return the price at the latest date <= ``target`` (carry-forward over gaps)."""

    if not series:
        return None
    for day in sorted(series, reverse=True):
        if day <= target:
            return series[day]
    return None


def portfolio_price(
    holdings: Iterable[Holding],
    series_by_ticker: Mapping[str, Optional[PriceSeries]],
    date: str,
) -> PortfolioPrice:
    """Weighted sum of prices at ``date``.

    Holdings without a resolvable price are left out of both the total and the
    covered weight rather than priced at zero.
    """

    total = 0.0
    covered = 0.0
    for holding in holdings:
        if not holding.ticker or holding.weight <= 0:
            continue
        price = price_on_or_before(series_by_ticker.get(holding.ticker), date)
        if price is None or not math.isfinite(price):
            continue
        total += holding.weight * price
        covered += holding.weight
    return PortfolioPrice(total=total, covered_weight=covered)


def establish_baseline(prior: Optional[float], candidates: Sequence[float]) -> float:
    """Keep a persisted baseline, else take the first positive total, else 1."""

    if prior is not None and math.isfinite(prior) and prior > 0:
        return prior
    for total in candidates:
        if total > 0:
            return total
    return 1.0


def normalize_index(price: float, baseline: float, precision: int = 4) -> float:
    if not baseline:
        baseline = 1.0
    return round(price / baseline * 100, precision)


def change_pct(values: Sequence[float]) -> float:
    """Percent change of the newest value relative to the first retained one."""

    if not values:
        return 0.0
    first = values[0] or 100.0
    return round((values[-1] / first - 1) * 100, 2)


__all__ = [
    "change_pct",
    "establish_baseline",
    "normalize_index",
    "portfolio_price",
    "price_on_or_before",
]
