"""Load -> fetch -> build -> merge -> save pipeline for ``performance.json``."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from portfolio_index.config import IndexSettings
from portfolio_index.core.errors import ConfigError, FetchError, SeriesOrderError
from portfolio_index.core.telemetry import get_tracer
from portfolio_index.models import CacheEntry, Holding, TickerResult
from portfolio_index.providers.alpha_vantage import AlphaVantageClient
from portfolio_index.schemas import HoldingSnapshot, HoldingsFile, PerformanceDocument

from .cache import TickerCache, is_fresh
from .holdings import is_pseudo_ticker, load_holdings, normalize_holdings, normalize_ticker, parse_weight
from .quotes import PointQuoteFetcher, PriceFetcher, WeeklySeriesFetcher
from .series import apply_merge, decide_merge, replace_series
from .storage import load_document, write_document
from .valuation import establish_baseline, normalize_index, portfolio_price
from .weeks import build_weekly_labels, most_recent_friday

logger = logging.getLogger(__name__)


def check_startup(settings: IndexSettings) -> None:
    """Fail fast on missing credentials or input before any request is made."""

    if not settings.alphavantage_api_key:
        raise ConfigError("Missing ALPHAVANTAGE_API_KEY")
    if not settings.holdings_path.exists():
        raise ConfigError(f"Missing holdings file: {settings.holdings_path}")


async def collect_series(
    holdings: Iterable[Holding],
    fetcher: PriceFetcher,
    cache: TickerCache,
    *,
    now: datetime,
    max_age_hours: float = 24.0,
    use_fresh_cache: bool = True,
) -> Dict[str, TickerResult]:
    """Resolve a price series for every distinct ticker, one at a time.

    A failed fetch falls back to whatever the cache holds, however old, and is
    recorded on the result instead of being raised.
    """

    tracer = get_tracer()
    results: Dict[str, TickerResult] = {}
    for holding in holdings:
        ticker = holding.ticker
        if ticker in results:
            continue
        with tracer.start_as_current_span("fetch_ticker") as span:
            span.set_attribute("ticker", ticker)
            cached = cache.get(ticker, fetcher.source)
            if use_fresh_cache and is_fresh(cached, max_age_hours, now=now, source=fetcher.source):
                span.set_attribute("cache_hit", True)
                logger.debug("Using cached series for %s", ticker)
                results[ticker] = TickerResult(ticker=ticker, series=cached.series, from_cache=True)
                continue

            span.set_attribute("cache_hit", False)
            try:
                series = await fetcher.fetch(ticker)
            except FetchError as exc:
                span.set_attribute("error", str(exc))
                logger.warning("[%s] %s", ticker, exc)
                fallback = cached if cached is not None and cached.series else cache.get(ticker)
                if fallback is not None and fallback.series:
                    logger.info("[%s] falling back to cache fetched at %s", ticker, fallback.fetched_at.isoformat())
                    results[ticker] = TickerResult(ticker=ticker, series=fallback.series, error=str(exc), from_cache=True)
                else:
                    results[ticker] = TickerResult(ticker=ticker, error=str(exc))
                continue

            cache.put(ticker, CacheEntry(fetched_at=now, series=series, source=fetcher.source))
            results[ticker] = TickerResult(ticker=ticker, series=series)
    return results


def _snapshots(holdings_file: HoldingsFile, results: Dict[str, TickerResult]) -> List[HoldingSnapshot]:
    snapshots: List[HoldingSnapshot] = []
    for entry in holdings_file.holdings:
        ticker = normalize_ticker(entry.ticker)
        result = None if not ticker or is_pseudo_ticker(ticker) else results.get(ticker)
        snapshots.append(
            HoldingSnapshot(
                ticker=entry.ticker,
                name=entry.name,
                weight=parse_weight(entry.weight),
                price=result.latest_price if result else None,
                asset_class=entry.asset_class,
                region=entry.region,
                error=result.error if result else None,
            )
        )
    return snapshots


def build_document(
    prior: PerformanceDocument,
    holdings_file: HoldingsFile,
    results: Dict[str, TickerResult],
    *,
    now: datetime,
    settings: IndexSettings,
    source: Optional[str] = None,
) -> PerformanceDocument:
    """Return the next document from the prior one and this run's prices.

    ``prior`` is left untouched.
    """

    holdings = normalize_holdings(holdings_file.holdings)
    series_by_ticker = {ticker: result.series for ticker, result in results.items()}
    friday = most_recent_friday(now)
    label = friday.isoformat()

    document = prior.model_copy(
        update={
            "base_currency": holdings_file.base_currency or settings.base_currency,
            "base_index": holdings_file.base_index or 100.0,
        }
    )
    baseline = prior.baseline_portfolio_price
    covered = None

    if settings.index_mode == "history":
        labels = build_weekly_labels(friday, settings.index_weeks)
        prices = [portfolio_price(holdings, series_by_ticker, day) for day in labels]
        if any(p.covered_weight > 0 for p in prices):
            baseline = establish_baseline(prior.baseline_portfolio_price, [p.total for p in prices])
            values = [normalize_index(p.total, baseline, settings.index_precision) for p in prices]
            document = replace_series(document, labels, values)
            covered = prices[-1].covered_weight
        else:
            logger.warning("No prices resolved for any week; keeping the stored series")
    else:
        point = portfolio_price(holdings, series_by_ticker, _utc_date(now).isoformat())
        if point.covered_weight > 0:
            baseline = establish_baseline(prior.baseline_portfolio_price, [point.total])
            value = normalize_index(point.total, baseline, settings.index_precision)
            try:
                action = decide_merge(document, label, points=settings.index_weeks)
            except SeriesOrderError as exc:
                logger.warning("%s; keeping the stored series", exc)
            else:
                document = apply_merge(
                    document,
                    action,
                    label,
                    value,
                    points=settings.index_weeks,
                    seed_key=settings.backfill_seed_key,
                    volatility=settings.backfill_volatility,
                    precision=settings.index_precision,
                )
                logger.info("Week %s: %s index %.2f", label, action.value, value)
            covered = point.covered_weight
        else:
            logger.warning("No prices resolved for the current quote; keeping the stored series")

    return document.model_copy(
        update={
            "holdings": _snapshots(holdings_file, results),
            "baseline_portfolio_price": round(baseline, 6) if baseline is not None else None,
            "history_source": f"AlphaVantage: {source}" if source else prior.history_source,
            "as_of": label,
            "updated_at": _as_utc(now).isoformat(timespec="seconds"),
            "covered_weight": round(covered, 6) if covered is not None else prior.covered_weight,
        }
    )


def _as_utc(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def _utc_date(now: datetime) -> date:
    return _as_utc(now).date()


def _build_fetcher(settings: IndexSettings, client: AlphaVantageClient, now: datetime) -> PriceFetcher:
    if settings.index_mode == "quote":
        return PointQuoteFetcher(client, today=lambda: _utc_date(now))
    return WeeklySeriesFetcher(client)


async def run_update(
    settings: IndexSettings,
    *,
    now: datetime | None = None,
    http_client: Any | None = None,
    sleep: Callable[[float], Awaitable[Any]] | None = None,
) -> PerformanceDocument:
    """Run one update and write ``performance.json``.

    Raises ``ConfigError`` before any request when the key or the holdings file
    is missing, and ``WriteError`` when the result cannot be saved.
    """

    check_startup(settings)
    now = _as_utc(now or datetime.now(timezone.utc))
    holdings_file = load_holdings(settings.holdings_path)
    holdings = normalize_holdings(holdings_file.holdings)
    prior = load_document(settings.performance_path)
    cache = TickerCache(settings.cache_dir)
    logger.info(
        "Updating %s from %d priced holdings (%s mode)",
        settings.performance_path,
        len(holdings),
        settings.index_mode,
    )

    with get_tracer().start_as_current_span("update_performance") as span:
        span.set_attribute("index_mode", settings.index_mode)
        async with AlphaVantageClient(
            settings.alphavantage_api_key,
            base_url=settings.alphavantage_base_url,
            call_delay_seconds=settings.api_call_delay_seconds,
            timeout_seconds=settings.alphavantage_timeout_seconds,
            client=http_client,
            sleep=sleep,
        ) as client:
            fetcher = _build_fetcher(settings, client, now)
            results = await collect_series(
                holdings,
                fetcher,
                cache,
                now=now,
                max_age_hours=settings.cache_max_age_hours,
                use_fresh_cache=settings.cache_enabled,
            )
            span.set_attribute("api_calls", client.calls_made)

        failed = sorted(t for t, r in results.items() if r.error)
        if failed:
            logger.warning("Degraded tickers: %s", ", ".join(failed))

        document = build_document(prior, holdings_file, results, now=now, settings=settings, source=fetcher.source)
        write_document(settings.performance_path, document)

    logger.info(
        "Updated %s (latest index %.2f, change %.2f%%)",
        settings.performance_path,
        document.latest.index,
        document.latest.change_pct,
    )
    return document


__all__ = ["build_document", "check_startup", "collect_series", "run_update"]
