"""Price fetchers: one capability, two Alpha Vantage endpoints."""

from __future__ import annotations

from datetime import date
from typing import Callable, Protocol

from portfolio_index.models import PriceSeries
from portfolio_index.providers.alpha_vantage import (
    GLOBAL_QUOTE,
    WEEKLY_ADJUSTED,
    AlphaVantageClient,
    parse_global_quote,
    parse_weekly_adjusted,
)


class PriceFetcher(Protocol):
    """Fetch price data for one ticker as a date -> price mapping."""

    source: str

    async def fetch(self, ticker: str) -> PriceSeries:
        ...


class WeeklySeriesFetcher:
    """Full weekly adjusted-close history for a ticker."""

    source = WEEKLY_ADJUSTED

    def __init__(self, client: AlphaVantageClient) -> None:
        self.client = client

    async def fetch(self, ticker: str) -> PriceSeries:
        payload = await self.client.weekly_adjusted(ticker)
        return parse_weekly_adjusted(payload)


class PointQuoteFetcher:
    """Current quote for a ticker, keyed by its latest trading day."""

    source = GLOBAL_QUOTE

    def __init__(self, client: AlphaVantageClient, today: Callable[[], date]) -> None:
        self.client = client
        self.today = today

    async def fetch(self, ticker: str) -> PriceSeries:
        payload = await self.client.global_quote(ticker)
        day, price = parse_global_quote(payload)
        return {(day or self.today()).isoformat(): price}


__all__ = ["PointQuoteFetcher", "PriceFetcher", "WeeklySeriesFetcher"]
