"""Weekly label arithmetic (UTC, weeks ending on Friday)."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import List

FRIDAY = 4


def _utc_day(now: date | datetime) -> date:
    if isinstance(now, datetime):
        if now.tzinfo is None:
            return now.date()
        return now.astimezone(timezone.utc).date()
    return now


def most_recent_friday(now: date | datetime) -> date:
    """Return the latest Friday on or before the UTC calendar day of ``now``."""

    day = _utc_day(now)
    return day - timedelta(days=(day.weekday() - FRIDAY) % 7)


def build_weekly_labels(end: date, weeks: int = 52) -> List[str]:
    """Return ``weeks`` ISO labels seven days apart, oldest first, ending at ``end``."""

    if weeks < 1:
        raise ValueError("weeks must be at least 1")
    return [(end - timedelta(days=7 * offset)).isoformat() for offset in range(weeks - 1, -1, -1)]


__all__ = ["build_weekly_labels", "most_recent_friday"]
