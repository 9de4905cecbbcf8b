"""Weekly performance index for a fixed-weight portfolio."""

from .models import CacheEntry, Holding, PortfolioPrice, TickerResult
from .services.pipeline import build_document, run_update

__all__ = [
    "CacheEntry",
    "Holding",
    "PortfolioPrice",
    "TickerResult",
    "build_document",
    "run_update",
]
