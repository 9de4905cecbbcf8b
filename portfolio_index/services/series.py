"""Merge policy for the persisted weekly index series."""

from __future__ import annotations

import hashlib
from datetime import date
from enum import Enum
from typing import List, Sequence, Tuple

import numpy as np

from portfolio_index.core.errors import SeriesOrderError
from portfolio_index.schemas import LatestPoint, PerformanceDocument

from .valuation import change_pct
from .weeks import build_weekly_labels


class MergeAction(str, Enum):
    BACKFILL = "backfill"
    APPEND = "append"
    UPDATE_LAST = "update_last"


def decide_merge(document: PerformanceDocument, label: str, *, points: int = 52) -> MergeAction:
    """Pick how the point for ``label`` enters the stored series.

    The synthetic backfill only happens for a document that has no series and
    has never been backfilled before.
    """

    if not document.labels:
        if not document.backfilled and points > 1:
            return MergeAction.BACKFILL
        return MergeAction.APPEND
    last = document.labels[-1]
    if label == last:
        return MergeAction.UPDATE_LAST
    if label < last:
        raise SeriesOrderError(f"Label {label} precedes the newest stored label {last}")
    return MergeAction.APPEND


def _seed(seed_key: str, end_label: str, end_index: float) -> int:
    digest = hashlib.sha256(f"{seed_key}|{end_label}|{end_index!r}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def synthetic_backfill(
    seed_key: str,
    end_label: str,
    end_index: float,
    points: int,
    *,
    volatility: float = 0.02,
    precision: int = 4,
) -> Tuple[List[str], List[float]]:
    """Fictitious weekly walk from 100 that lands exactly on ``end_index``."""

    labels = build_weekly_labels(date.fromisoformat(end_label), points)
    if points == 1:
        return labels, [end_index]

    rng = np.random.default_rng(_seed(seed_key, end_label, end_index))
    steps = np.clip(rng.normal(0.0, volatility, points - 1), -0.5, 0.5)
    walk = 100.0 * np.concatenate(([1.0], np.cumprod(1.0 + steps)))
    ramp = np.linspace(0.0, 1.0, points)
    if end_index > 0:
        walk = walk * np.power(end_index / walk[-1], ramp)
    else:
        walk = walk + (end_index - walk[-1]) * ramp

    values = [round(float(v), precision) for v in walk]
    values[-1] = end_index
    return labels, values


def replace_series(
    document: PerformanceDocument,
    labels: Sequence[str],
    values: Sequence[float],
    *,
    backfilled: bool | None = None,
) -> PerformanceDocument:
    """Return a copy of ``document`` holding the given series and its latest point."""

    if len(labels) != len(values):
        raise ValueError("labels and values must have the same length")
    values = list(values)
    latest = LatestPoint(index=round(values[-1], 2), change_pct=change_pct(values)) if values else LatestPoint()
    update = {"labels": list(labels), "long_term_index": values, "latest": latest}
    if backfilled is not None:
        update["backfilled"] = backfilled
    return document.model_copy(update=update)


def apply_merge(
    document: PerformanceDocument,
    action: MergeAction,
    label: str,
    value: float,
    *,
    points: int = 52,
    seed_key: str = "portfolio-index-backfill",
    volatility: float = 0.02,
    precision: int = 4,
) -> PerformanceDocument:
    if action is MergeAction.BACKFILL:
        labels, values = synthetic_backfill(
            seed_key, label, value, points, volatility=volatility, precision=precision
        )
        return replace_series(document, labels, values, backfilled=True)

    # Older documents may hold mismatched lists; keep the aligned tail.
    size = min(len(document.labels), len(document.long_term_index))
    labels = document.labels[len(document.labels) - size:]
    values = document.long_term_index[len(document.long_term_index) - size:]

    if action is MergeAction.UPDATE_LAST and labels:
        values = [*values[:-1], value]
    else:
        labels = [*labels, label]
        values = [*values, value]
    return replace_series(document, labels[-points:], values[-points:])


def merge_point(
    document: PerformanceDocument,
    label: str,
    value: float,
    *,
    points: int = 52,
    seed_key: str = "portfolio-index-backfill",
    volatility: float = 0.02,
    precision: int = 4,
) -> PerformanceDocument:
    """Merge one weekly point into ``document`` without mutating it."""

    action = decide_merge(document, label, points=points)
    return apply_merge(
        document,
        action,
        label,
        value,
        points=points,
        seed_key=seed_key,
        volatility=volatility,
        precision=precision,
    )


__all__ = [
    "MergeAction",
    "apply_merge",
    "decide_merge",
    "merge_point",
    "replace_series",
    "synthetic_backfill",
]
