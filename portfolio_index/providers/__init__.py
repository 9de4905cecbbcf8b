"""Market data providers."""

from .alpha_vantage import AlphaVantageClient, parse_global_quote, parse_weekly_adjusted

__all__ = ["AlphaVantageClient", "parse_global_quote", "parse_weekly_adjusted"]
