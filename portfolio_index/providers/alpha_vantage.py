"""Alpha Vantage client used by the index job."""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

import httpx

from portfolio_index.config.settings import DEFAULT_BASE_URL
from portfolio_index.core.errors import ApiError, DataError, EmptySeriesError, TransportError

logger = logging.getLogger(__name__)

WEEKLY_ADJUSTED = "TIME_SERIES_WEEKLY_ADJUSTED"
GLOBAL_QUOTE = "GLOBAL_QUOTE"
WEEKLY_SERIES_KEY = "Weekly Adjusted Time Series"
GLOBAL_QUOTE_KEY = "Global Quote"
USER_AGENT = "Mozilla/5.0"


class AlphaVantageClient:
    """Paced Alpha Vantage client with convenience helpers.

    Every request after the first waits ``call_delay_seconds`` before it is
    sent, whatever the outcome of the previous request.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        call_delay_seconds: float = 13.0,
        timeout_seconds: float = 30.0,
        client: Any | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._call_delay = call_delay_seconds
        self._timeout = timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(headers={"User-Agent": USER_AGENT})
        self._sleep = sleep or asyncio.sleep
        self.calls_made = 0

    async def __aenter__(self) -> "AlphaVantageClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _pace(self) -> None:
        if self.calls_made and self._call_delay > 0:
            logger.debug("Waiting %.1fs before next Alpha Vantage call", self._call_delay)
            await self._sleep(self._call_delay)

    async def _request(self, params: Dict[str, Any]) -> Dict[str, Any]:
        await self._pace()
        query = dict(params)
        query["apikey"] = self._api_key
        self.calls_made += 1
        try:
            response = await self._client.get(self._base_url, params=query, timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise TransportError(f"Failed to reach Alpha Vantage: {exc}") from exc

        if response.status_code >= 400:
            raise TransportError(
                f"HTTP {response.status_code} for {params.get('function')} {params.get('symbol')}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise DataError("Alpha Vantage returned invalid JSON payload") from exc
        if not isinstance(payload, dict):
            raise DataError("Alpha Vantage payload is not an object")

        note = payload.get("Note") or payload.get("Information")
        if note:
            raise ApiError(f"Alpha Vantage rate limit: {note}")
        if payload.get("Error Message"):
            raise ApiError(f"Alpha Vantage error: {payload['Error Message']}")
        return payload

    async def global_quote(self, symbol: str) -> Dict[str, Any]:
        return await self._request({"function": GLOBAL_QUOTE, "symbol": symbol})

    async def weekly_adjusted(self, symbol: str) -> Dict[str, Any]:
        return await self._request({"function": WEEKLY_ADJUSTED, "symbol": symbol})


def _to_price(raw: Any) -> Optional[float]:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def parse_global_quote(payload: Dict[str, Any]) -> Tuple[Optional[date], float]:
    """Return ``(latest trading day, price)`` from a ``GLOBAL_QUOTE`` payload."""

    quote = payload.get(GLOBAL_QUOTE_KEY)
    if not isinstance(quote, dict) or not quote:
        raise DataError("No Global Quote returned")
    price = _to_price(quote.get("05. price"))
    if price is None:
        raise DataError(f"Global Quote price is missing or not numeric: {quote.get('05. price')!r}")
    day: Optional[date] = None
    raw_day = quote.get("07. latest trading day")
    if raw_day:
        try:
            day = datetime.strptime(str(raw_day), "%Y-%m-%d").date()
        except ValueError:
            day = None
    return day, price


def parse_weekly_adjusted(payload: Dict[str, Any]) -> Dict[str, float]:
    """Map each week in a ``TIME_SERIES_WEEKLY_ADJUSTED`` payload to its adjusted close."""

    series = payload.get(WEEKLY_SERIES_KEY)
    if series is None:
        raise DataError("No Weekly Adjusted Time Series returned")
    if not isinstance(series, dict):
        raise DataError("Weekly Adjusted Time Series is not an object")
    out: Dict[str, float] = {}
    for day_str, row in series.items():
        if not isinstance(row, dict):
            continue
        try:
            datetime.strptime(day_str, "%Y-%m-%d")
        except ValueError:
            continue
        price = _to_price(row.get("5. adjusted close"))
        if price is not None:
            out[day_str] = price
    if not out:
        raise EmptySeriesError("Weekly Adjusted Time Series contains no usable rows")
    return out


__all__ = [
    "AlphaVantageClient",
    "GLOBAL_QUOTE",
    "WEEKLY_ADJUSTED",
    "parse_global_quote",
    "parse_weekly_adjusted",
]
