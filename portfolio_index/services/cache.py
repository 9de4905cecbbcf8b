"""Per-ticker price series cache stored as JSON blobs."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from portfolio_index.models import CacheEntry
from portfolio_index.providers.alpha_vantage import WEEKLY_ADJUSTED
from portfolio_index.schemas import CacheBlob

logger = logging.getLogger(__name__)


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_fresh(
    entry: Optional[CacheEntry],
    max_age_hours: float,
    *,
    now: datetime,
    source: str | None = None,
) -> bool:
    """Return whether ``entry`` is younger than ``max_age_hours``.

    When ``source`` is given the entry must also come from that API function.
    """

    if entry is None:
        return False
    if source is not None and entry.source != source:
        return False
    age = _as_utc(now) - _as_utc(entry.fetched_at)
    return age < timedelta(hours=max_age_hours)


class TickerCache:
    """Read and write per-ticker cache blobs.

    Weekly history lives in ``<directory>/<TICKER>.json``; blobs from any other
    API function get their own ``<TICKER>.<SOURCE>.json`` so that a point quote
    never replaces a stored history.
    """

    def __init__(self, directory: Path, primary_source: str = WEEKLY_ADJUSTED) -> None:
        self.directory = Path(directory)
        self.primary_source = primary_source

    def path_for(self, ticker: str, source: str | None = None) -> Path:
        if source is None or source == self.primary_source:
            return self.directory / f"{ticker.upper()}.json"
        return self.directory / f"{ticker.upper()}.{source}.json"

    def get(self, ticker: str, source: str | None = None) -> Optional[CacheEntry]:
        path = self.path_for(ticker, source)
        if not path.exists():
            return None
        try:
            blob = CacheBlob.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning("Ignoring unreadable cache for %s: %s", ticker, exc)
            return None
        return CacheEntry(fetched_at=_as_utc(blob.fetched_at), series=dict(blob.series), source=blob.source)

    def put(self, ticker: str, entry: CacheEntry) -> None:
        blob = CacheBlob(fetched_at=_as_utc(entry.fetched_at), source=entry.source, series=dict(entry.series))
        path = self.path_for(ticker, entry.source)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(blob.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write cache for %s: %s", ticker, exc)


__all__ = ["TickerCache", "is_fresh"]
