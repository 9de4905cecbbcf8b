"""Exception hierarchy for the performance index pipeline."""

from __future__ import annotations


class PerformanceIndexError(RuntimeError):
    """Base class for every error raised by the pipeline."""


class ConfigError(PerformanceIndexError):
    """Raised when required configuration or input is missing."""


class FetchError(PerformanceIndexError):
    """Raised when price data for a single ticker cannot be obtained."""


class TransportError(FetchError):
    """Raised on transport failures and non-success HTTP responses."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApiError(FetchError):
    """Raised when Alpha Vantage returns a rate-limit note or an error payload."""


class DataError(FetchError):
    """Raised when a payload is missing the expected price fields."""


class EmptySeriesError(DataError):
    """Raised when a historical payload contains no usable rows."""


class SeriesOrderError(PerformanceIndexError):
    """Raised when a new label would precede the stored series."""


class WriteError(PerformanceIndexError):
    """Raised when the output document cannot be persisted."""


__all__ = [
    "ApiError",
    "ConfigError",
    "DataError",
    "EmptySeriesError",
    "FetchError",
    "PerformanceIndexError",
    "SeriesOrderError",
    "TransportError",
    "WriteError",
]
