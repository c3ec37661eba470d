"""Filter/sort pipeline for the displayed stock list.

view() is a pure function: the same records and criteria always give
the same ordered list. All sorts are stable, so ties keep their input
order across refreshes.

Records without complete stock data have no ratio and no missing-unit
count. For the 'critical' and 'missing' sorts they are placed after
every orderable record, in both directions, keeping input order.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable, Sequence

from .classifier import matches_status
from .config import DEFAULT_THRESHOLDS, ThresholdTable
from .models import SortBy, SortOrder, StockRecord, ViewFilter


def _collation_key(name: str) -> tuple[int, str, str]:
    """Accent- and case-insensitive key; empty names first."""
    stripped = name.strip()
    decomposed = unicodedata.normalize("NFKD", stripped)
    folded = "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()
    return (1 if stripped else 0, folded, stripped)


def _sort_numeric(
    records: list[StockRecord],
    key: Callable[[StockRecord], float | None],
    descending: bool,
) -> list[StockRecord]:
    orderable = [r for r in records if key(r) is not None]
    unorderable = [r for r in records if key(r) is None]
    orderable.sort(key=key, reverse=descending)
    return orderable + unorderable


def sort_records(
    records: Sequence[StockRecord],
    sort_by: SortBy = SortBy.CRITICAL,
    sort_order: SortOrder = SortOrder.ASC,
) -> list[StockRecord]:
    descending = SortOrder(sort_order) is SortOrder.DESC
    sort_by = SortBy(sort_by)
    items = list(records)

    if sort_by is SortBy.CRITICAL:
        return _sort_numeric(items, lambda r: r.stock_ratio, descending)
    if sort_by is SortBy.MISSING:
        return _sort_numeric(items, lambda r: r.missing_units, descending)
    return sorted(items, key=lambda r: _collation_key(r.name), reverse=descending)


def filter_records(
    records: Sequence[StockRecord],
    status: str | None = None,
    category: str | None = None,
    thresholds: ThresholdTable = DEFAULT_THRESHOLDS,
) -> list[StockRecord]:
    items = list(records)
    if status:
        items = [r for r in items if matches_status(r, status, thresholds)]
    if category:
        wanted = category.strip().casefold()
        items = [r for r in items if r.category_name.casefold() == wanted]
    return items


def view(
    records: Sequence[StockRecord],
    criteria: ViewFilter | None = None,
    thresholds: ThresholdTable = DEFAULT_THRESHOLDS,
) -> list[StockRecord]:
    """Filter then sort records for display."""
    criteria = criteria or ViewFilter()
    filtered = filter_records(records, criteria.status, criteria.category, thresholds)
    return sort_records(filtered, criteria.sort_by, criteria.sort_order)
