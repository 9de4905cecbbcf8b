"""Pydantic schemas for the JSON blobs read and written by the job."""

from .documents import (
    CacheBlob,
    HoldingEntry,
    HoldingSnapshot,
    HoldingsFile,
    LatestPoint,
    PerformanceDocument,
)

__all__ = [
    "CacheBlob",
    "HoldingEntry",
    "HoldingSnapshot",
    "HoldingsFile",
    "LatestPoint",
    "PerformanceDocument",
]
