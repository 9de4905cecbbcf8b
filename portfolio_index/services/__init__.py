"""Pipeline services for building the weekly performance index."""

from .cache import TickerCache, is_fresh
from .holdings import is_pseudo_ticker, load_holdings, normalize_holdings
from .pipeline import build_document, run_update
from .series import MergeAction, decide_merge, merge_point, replace_series, synthetic_backfill
from .valuation import establish_baseline, normalize_index, portfolio_price, price_on_or_before
from .weeks import build_weekly_labels, most_recent_friday

__all__ = [
    "MergeAction",
    "TickerCache",
    "build_document",
    "build_weekly_labels",
    "decide_merge",
    "establish_baseline",
    "is_fresh",
    "is_pseudo_ticker",
    "load_holdings",
    "merge_point",
    "most_recent_friday",
    "normalize_holdings",
    "normalize_index",
    "portfolio_price",
    "price_on_or_before",
    "replace_series",
    "run_update",
    "synthetic_backfill",
]
