"""Schemas for ``holdings.json``, ``performance.json`` and the ticker cache."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

LEGACY_BASELINE_KEY = "_baselinePortfolioPrice"


def _lenient_float(value: Any, default: float | None) -> float | None:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


class HoldingEntry(BaseModel):
    """One row of the input portfolio definition, as written by hand."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    ticker: Any = None
    weight: Any = None
    name: Any = None
    asset_class: Any = Field(default=None, alias="assetClass")
    region: Any = None


class HoldingsFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    base_currency: str | None = Field(default=None, alias="baseCurrency")
    base_index: float | None = Field(default=None, alias="baseIndex")
    holdings: list[HoldingEntry] = Field(default_factory=list)

    @field_validator("base_currency", mode="before")
    @classmethod
    def _currency_or_none(cls, value: Any) -> str | None:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @field_validator("base_index", mode="before")
    @classmethod
    def _index_or_none(cls, value: Any) -> float | None:
        number = _lenient_float(value, None)
        return number if number is not None and number > 0 else None


class LatestPoint(BaseModel):
    index: float = 100.0
    change_pct: float = Field(default=0.0, alias="changePct")

    model_config = ConfigDict(populate_by_name=True)


class HoldingSnapshot(BaseModel):
    """Holding row rendered by the webpage table and pie chart.

    Rows are rebuilt on every run, so unusable values read back as defaults.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    ticker: Any = None
    name: Any = None
    weight: float = 0.0
    price: float | None = None
    asset_class: Any = Field(default=None, alias="assetClass")
    region: Any = None
    error: Any = None

    @field_validator("weight", mode="before")
    @classmethod
    def _weight_or_zero(cls, value: Any) -> float:
        return _lenient_float(value, 0.0)

    @field_validator("price", mode="before")
    @classmethod
    def _price_or_none(cls, value: Any) -> float | None:
        return _lenient_float(value, None)


class PerformanceDocument(BaseModel):
    """Persisted index series and holdings snapshot.

    Every field has a default so documents written by older versions stay
    readable; unknown keys are carried through on rewrite.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    base_currency: str = Field(default="USD", alias="baseCurrency")
    base_index: float = Field(default=100.0, alias="baseIndex")
    labels: list[str] = Field(default_factory=list)
    long_term_index: list[float] = Field(default_factory=list, alias="longTermIndex")
    latest: LatestPoint = Field(default_factory=LatestPoint)
    holdings: list[HoldingSnapshot] = Field(default_factory=list)
    baseline_portfolio_price: float | None = Field(default=None, alias="baselinePortfolioPrice")

    history_source: str | None = Field(default=None, alias="_historySource")
    as_of: str | None = Field(default=None, alias="_historyAsOfFridayUTC")
    updated_at: str | None = Field(default=None, alias="_updatedAt")
    covered_weight: float | None = Field(default=None, alias="_coveredWeight")
    backfilled: bool = Field(default=False, alias="_backfilled")

    @model_validator(mode="before")
    @classmethod
    def _upgrade_legacy_keys(cls, data: Any) -> Any:
        # Older files kept the baseline under an underscore key.
        if not isinstance(data, dict) or LEGACY_BASELINE_KEY not in data:
            return data
        data = dict(data)
        legacy = data.pop(LEGACY_BASELINE_KEY)
        if data.get("baselinePortfolioPrice") is None and data.get("baseline_portfolio_price") is None:
            data["baselinePortfolioPrice"] = legacy
        return data

    @field_validator("baseline_portfolio_price", "covered_weight", mode="before")
    @classmethod
    def _number_or_none(cls, value: Any) -> float | None:
        return _lenient_float(value, None)

    @field_validator("holdings", mode="before")
    @classmethod
    def _object_rows_only(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [row for row in value if isinstance(row, dict)]
        return []

    @property
    def has_series(self) -> bool:
        return bool(self.labels)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class CacheBlob(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    fetched_at: datetime = Field(alias="fetchedAt")
    source: str | None = None
    series: dict[str, float] = Field(default_factory=dict)


__all__ = [
    "CacheBlob",
    "HoldingEntry",
    "HoldingSnapshot",
    "HoldingsFile",
    "LatestPoint",
    "PerformanceDocument",
]
