"""Loading and normalizing the portfolio definition."""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, Iterable, List

from pydantic import ValidationError

from portfolio_index.core.errors import ConfigError
from portfolio_index.models import Holding
from portfolio_index.schemas import HoldingEntry, HoldingsFile

logger = logging.getLogger(__name__)

PSEUDO_MARKERS = ("CASH", "HEDGE")
PSEUDO_EXACT = {"USD", "USD-CASH"}


def normalize_ticker(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).strip().upper()


def parse_weight(raw: Any) -> float:
    """Return a non-negative weight, 0 when the value is not a finite number."""

    if isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def is_pseudo_ticker(ticker: str) -> bool:
    """Cash and hedge placeholders are not priced. Hyphens alone do not count (BRK-B)."""

    symbol = normalize_ticker(ticker)
    if symbol in PSEUDO_EXACT:
        return True
    return any(marker in symbol for marker in PSEUDO_MARKERS)


def load_holdings(path: Path) -> HoldingsFile:
    """Read the portfolio definition from ``path``.

    A missing file is fatal. A file that cannot be parsed is logged and read
    as an empty portfolio; rows that are not objects are logged and skipped.
    """

    if not path.exists():
        raise ConfigError(f"Missing holdings file: {path}")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.error("Could not read holdings from %s: %s", path, exc)
        return HoldingsFile()
    if not isinstance(raw, dict):
        logger.error("Holdings file %s is not a JSON object", path)
        return HoldingsFile()

    rows = raw.get("holdings")
    if rows is not None and not isinstance(rows, list):
        logger.error("Holdings in %s are not a list", path)
        rows = None
    entries: List[HoldingEntry] = []
    for position, row in enumerate(rows or []):
        try:
            entries.append(HoldingEntry.model_validate(row))
        except ValidationError as exc:
            logger.warning("Skipping holdings row %d in %s: %s", position, path, exc.errors()[0]["msg"])

    header = {key: value for key, value in raw.items() if key != "holdings"}
    return HoldingsFile.model_validate({**header, "holdings": entries})


def normalize_holdings(entries: Iterable[HoldingEntry]) -> List[Holding]:
    """Return the priced holdings: tickers upper-cased, pseudo-holdings dropped."""

    holdings: List[Holding] = []
    for entry in entries:
        ticker = normalize_ticker(entry.ticker)
        if not ticker or is_pseudo_ticker(ticker):
            continue
        holdings.append(
            Holding(
                ticker=ticker,
                weight=parse_weight(entry.weight),
                name=entry.name,
                asset_class=entry.asset_class,
                region=entry.region,
                raw_ticker=entry.ticker,
            )
        )
    return holdings


__all__ = ["is_pseudo_ticker", "load_holdings", "normalize_holdings", "normalize_ticker", "parse_weight"]
