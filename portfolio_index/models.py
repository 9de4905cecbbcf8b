"""Domain models used by the performance index pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

PriceSeries = Dict[str, float]


@dataclass(frozen=True)
class Holding:
    """A normalized portfolio entry."""

    ticker: str
    weight: float
    name: Optional[str] = None
    asset_class: Optional[str] = None
    region: Optional[str] = None
    raw_ticker: Optional[str] = None


@dataclass(frozen=True)
class CacheEntry:
    """A persisted price series together with the time it was fetched."""

    fetched_at: datetime
    series: PriceSeries = field(default_factory=dict)
    source: Optional[str] = None


@dataclass(frozen=True)
class PortfolioPrice:
    """Weighted price of the portfolio at a single date."""

    total: float
    covered_weight: float


@dataclass(frozen=True)
class TickerResult:
    """Outcome of resolving prices for one ticker during a run."""

    ticker: str
    series: Optional[PriceSeries] = None
    error: Optional[str] = None
    from_cache: bool = False

    @property
    def latest_price(self) -> Optional[float]:
        """Return the price at the newest date in the series."""

        if not self.series:
            return None
        return self.series[max(self.series)]
