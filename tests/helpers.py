"""Test doubles and payload builders shared by the suite."""

from __future__ import annotations

import json
import pathlib
from typing import Any


class StubResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class StubClient:
    """Fake ``httpx.AsyncClient`` answering from a ``{(function, symbol): response}`` table."""

    def __init__(self, responses: dict[tuple[str, str], Any] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[dict[str, Any]] = []

    async def get(self, url: str, params: dict[str, Any], timeout: float) -> StubResponse:
        self.calls.append(dict(params))
        response = self.responses.get((params["function"], params["symbol"]))
        if response is None:
            return StubResponse({"Error Message": "Invalid API call"})
        if isinstance(response, Exception):
            raise response
        if isinstance(response, StubResponse):
            return response
        return StubResponse(response)

    async def aclose(self) -> None:  # pragma: no cover - included for interface completeness
        return None

    @property
    def symbols(self) -> list[str]:
        return [call["symbol"] for call in self.calls]


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def global_quote(price: Any, day: str | None = "2024-03-14") -> dict[str, Any]:
    quote: dict[str, Any] = {"01. symbol": "X", "05. price": price}
    if day:
        quote["07. latest trading day"] = day
    return {"Global Quote": quote}


def weekly_series(prices: dict[str, Any]) -> dict[str, Any]:
    return {
        "Meta Data": {"1. Information": "Weekly Adjusted Prices and Volumes"},
        "Weekly Adjusted Time Series": {
            day: {"4. close": str(price), "5. adjusted close": str(price)} for day, price in prices.items()
        },
    }


def write_holdings(path: pathlib.Path, holdings: list[dict[str, Any]], **extra: Any) -> pathlib.Path:
    payload = dict(extra)
    payload["holdings"] = holdings
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path
