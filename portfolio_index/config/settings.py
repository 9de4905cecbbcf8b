"""Runtime configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://www.alphavantage.co/query"
DEFAULT_BASE_CURRENCY = "USD"


class IndexSettings(BaseSettings):
    """Configuration options for the weekly performance index job."""

    alphavantage_api_key: str | None = Field(default=None, description="Alpha Vantage API key")
    alphavantage_base_url: str = Field(default=DEFAULT_BASE_URL)
    alphavantage_timeout_seconds: float = Field(default=30.0, gt=0)
    api_call_delay_seconds: float = Field(
        default=13.0,
        ge=0,
        description="Fixed pause between successive Alpha Vantage calls (free tier pacing).",
    )

    holdings_path: Path = Field(default=Path("data/holdings.json"))
    performance_path: Path = Field(default=Path("data/performance.json"))
    cache_dir: Path = Field(default=Path("data/cache"))
    cache_enabled: bool = Field(default=True)
    cache_max_age_hours: float = Field(default=24.0, ge=0)

    index_mode: Literal["history", "quote"] = Field(default="history")
    index_weeks: int = Field(default=52, ge=1)
    index_precision: int = Field(default=4, ge=0)
    base_currency: str = Field(default=DEFAULT_BASE_CURRENCY)

    backfill_seed_key: str = Field(default="portfolio-index-backfill")
    backfill_volatility: float = Field(default=0.02, ge=0, lt=0.5)

    log_level: str = Field(default="INFO")

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="portfolio-index")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"alphavantage_api_key"}
        return {k: ("***" if k in hidden and v else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> IndexSettings:
    """Return cached settings with optional overrides."""

    if overrides:
        return IndexSettings(**overrides)
    return IndexSettings()


__all__ = [
    "DEFAULT_BASE_CURRENCY",
    "DEFAULT_BASE_URL",
    "IndexSettings",
    "get_settings",
]
