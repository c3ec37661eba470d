"""Threshold classifier.

Maps a StockRecord to its StockStatus tier. Rules, first match wins:

    incomplete stock data        -> INDETERMINATE
    current_stock == 0           -> OUT_OF_STOCK
    ratio <= thresholds.critical -> CRITICAL
    ratio <= thresholds.low      -> LOW
    ratio <= thresholds.warning  -> WARNING
    otherwise                    -> NORMAL

ratio = current_stock / min_stock. Bounds are inclusive.
"""

from __future__ import annotations

from collections.abc import Iterable

from .config import DEFAULT_THRESHOLDS, ThresholdTable
from .models import StockRecord, StockStatus


def classify(
    record: StockRecord,
    thresholds: ThresholdTable = DEFAULT_THRESHOLDS,
) -> StockStatus:
    ratio = record.stock_ratio
    if ratio is None:
        return StockStatus.INDETERMINATE

    if record.current_stock == 0:
        return StockStatus.OUT_OF_STOCK

    for status, bound in thresholds.tiers():
        if ratio <= bound:
            return status
    return StockStatus.NORMAL


def stock_percentage(record: StockRecord) -> float | None:
    """Current stock as a percentage of the minimum."""
    ratio = record.stock_ratio
    return None if ratio is None else ratio * 100


def matches_status(
    record: StockRecord,
    wanted: str | StockStatus,
    thresholds: ThresholdTable = DEFAULT_THRESHOLDS,
) -> bool:
    """Case-insensitive match against a tier's display label or value."""
    status = classify(record, thresholds)
    if isinstance(wanted, StockStatus):
        return status is wanted
    key = wanted.strip().casefold()
    return key in (status.label.casefold(), status.value)


def urgent_records(
    records: Iterable[StockRecord],
    thresholds: ThresholdTable = DEFAULT_THRESHOLDS,
) -> list[StockRecord]:
    """OUT_OF_STOCK and CRITICAL records, input order preserved."""
    return [r for r in records if classify(r, thresholds).needs_urgent_restock]
