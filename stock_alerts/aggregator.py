"""Statistics aggregator.

Reduces the records of one refresh cycle into a StatisticsSnapshot:

    value at risk   = sum(price * current_stock)
    missing units   = sum(max(0, min_stock - current_stock))
    average stock % = sum(current_stock / min_stock * 100) / complete records

Only records with complete stock data contribute. Incomplete records
are counted separately and never dilute the average. The snapshot is
recomputed from scratch on every call.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence

from .classifier import classify
from .config import DEFAULT_THRESHOLDS, ThresholdTable
from .models import StatisticsSnapshot, StockRecord, StockStatus


def aggregate(
    records: Sequence[StockRecord],
    thresholds: ThresholdTable = DEFAULT_THRESHOLDS,
) -> StatisticsSnapshot | None:
    """Aggregate portfolio metrics.

    Returns:
        A StatisticsSnapshot, or None when no record has complete stock
        data (an all-zero snapshot would be misleading).
    """
    complete = [r for r in records if r.has_complete_stock_data]
    if not complete:
        return None

    total_value = 0.0
    total_missing = 0.0
    percentage_sum = 0.0
    counts: Counter[StockStatus] = Counter()

    # Seeded with the first record; strict < keeps the first of equal ratios.
    most_critical = complete[0]
    most_critical_pct = math.inf

    for record in complete:
        percentage = record.stock_ratio * 100

        total_value += record.price * record.current_stock
        total_missing += record.missing_units
        percentage_sum += percentage

        if percentage < most_critical_pct:
            most_critical = record
            most_critical_pct = percentage

        counts[classify(record, thresholds)] += 1

    return StatisticsSnapshot(
        total_products=len(complete),
        incomplete_products=len(records) - len(complete),
        total_value_at_risk=total_value,
        total_missing_units=total_missing,
        average_stock_percentage=percentage_sum / len(complete),
        most_critical=most_critical,
        most_critical_percentage=most_critical_pct,
        out_of_stock_count=counts[StockStatus.OUT_OF_STOCK],
        critical_count=counts[StockStatus.CRITICAL],
        low_count=counts[StockStatus.LOW],
        warning_count=counts[StockStatus.WARNING],
    )
