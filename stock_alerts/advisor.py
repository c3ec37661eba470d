"""Replenishment advisor.

Suggests reorder quantities and builds validated restock intents. The
advisor never touches current_stock: after a restock, the next refresh
is the only source of updated stock levels.

Quantities (target multiplier m, default 2):
    suggested = max(min_stock * m - current_stock, min_stock)
    batch     = max(0, min_stock * m - current_stock)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from .classifier import classify
from .config import DEFAULT_THRESHOLDS, StockAlertSettings, ThresholdTable, get_settings
from .errors import InvalidQuantity, UnknownRecord
from .models import RecordId, RestockIntent, RestockPreview, StockRecord

logger = logging.getLogger("stock_alerts.advisor")

DEFAULT_TARGET_MULTIPLIER = 2.0


def suggest_quantity(
    record: StockRecord,
    multiplier: float = DEFAULT_TARGET_MULTIPLIER,
) -> float:
    """Suggested reorder quantity for one record.

    Never negative, and never below min_stock for a complete record.
    Incomplete records fall back to min_stock, or 0 when that is
    unavailable too.
    """
    if not record.has_complete_stock_data:
        if record.min_stock is None:
            return 0.0
        return max(0.0, record.min_stock)

    return max(record.min_stock * multiplier - record.current_stock, record.min_stock)


def batch_quantity(
    record: StockRecord,
    multiplier: float = DEFAULT_TARGET_MULTIPLIER,
) -> float:
    if not record.has_complete_stock_data:
        return 0.0
    return max(0.0, record.min_stock * multiplier - record.current_stock)


def validate_quantity(quantity: Any) -> float:
    """Return quantity as a float, or raise InvalidQuantity."""
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        raise InvalidQuantity(quantity)
    value = float(quantity)
    if math.isnan(value) or math.isinf(value) or value <= 0:
        raise InvalidQuantity(quantity)
    return value


def default_reason(
    record: StockRecord,
    settings: StockAlertSettings | None = None,
) -> str:
    settings = settings or get_settings()
    return settings.single_restock_reason.format(
        current=_format_qty(record.current_stock),
        minimum=_format_qty(record.min_stock),
    )


def _format_qty(value: float | None) -> str:
    if value is None:
        return "?"
    return str(int(value)) if float(value).is_integer() else str(value)


def create_intent(
    records: Mapping[RecordId, StockRecord],
    record_id: RecordId,
    quantity: Any,
    reason: str | None = None,
    settings: StockAlertSettings | None = None,
) -> RestockIntent:
    """Validate a restock request against the loaded records.

    Raises:
        InvalidQuantity: quantity is not a positive finite number.
        UnknownRecord: record_id is not currently loaded.
    """
    value = validate_quantity(quantity)
    record = records.get(record_id)
    if record is None:
        raise UnknownRecord(record_id)

    return RestockIntent(
        record_id=record.id,
        quantity=value,
        reason=reason or default_reason(record, settings),
    )


def batch_restock_critical(
    records: Sequence[StockRecord],
    thresholds: ThresholdTable = DEFAULT_THRESHOLDS,
    settings: StockAlertSettings | None = None,
) -> list[RestockIntent]:
    """One intent per OUT_OF_STOCK / CRITICAL record with a positive batch quantity."""
    settings = settings or get_settings()
    intents: list[RestockIntent] = []

    for record in records:
        if not classify(record, thresholds).needs_urgent_restock:
            continue
        quantity = batch_quantity(record, settings.restock_target_multiplier)
        if quantity <= 0:
            logger.debug("Skipping %r: batch quantity is zero", record.id)
            continue
        intents.append(
            RestockIntent(
                record_id=record.id,
                quantity=quantity,
                reason=settings.batch_restock_reason,
            )
        )

    return intents


def preview_restock(
    record: StockRecord,
    quantity: Any,
    multiplier: float = DEFAULT_TARGET_MULTIPLIER,
) -> RestockPreview:
    """Projected stock level and cost if `quantity` units arrive."""
    value = validate_quantity(quantity)
    projected = (record.current_stock or 0.0) + value

    if record.min_stock is not None and record.min_stock > 0:
        ratio = projected / record.min_stock
        percentage = ratio * 100
        reaches_target = ratio >= multiplier
    else:
        percentage = None
        reaches_target = False

    return RestockPreview(
        record_id=record.id,
        quantity=value,
        projected_stock=projected,
        projected_percentage=percentage,
        order_cost=record.price * value,
        reaches_target=reaches_target,
    )
