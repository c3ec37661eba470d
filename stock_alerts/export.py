"""Export row shaping.

Projects records into flat dicts for the export collaborator. Values
stay raw (numbers, dates); currency and date formatting belong to
whoever writes the file.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .classifier import classify, stock_percentage
from .config import DEFAULT_THRESHOLDS, ThresholdTable
from .models import StockRecord

EXPORT_COLUMNS = (
    "product",
    "sku",
    "category",
    "current_stock",
    "min_stock",
    "missing_units",
    "stock_percentage",
    "status",
    "unit_price",
    "value_at_risk",
    "unit",
    "supplier",
    "last_purchase_date",
    "last_purchase_price",
)


def export_row(
    record: StockRecord,
    thresholds: ThresholdTable = DEFAULT_THRESHOLDS,
) -> dict[str, Any]:
    return {
        "product": record.name,
        "sku": record.sku,
        "category": record.category_name,
        "current_stock": record.current_stock,
        "min_stock": record.min_stock,
        "missing_units": record.missing_units,
        "stock_percentage": stock_percentage(record),
        "status": classify(record, thresholds).label,
        "unit_price": record.price,
        "value_at_risk": record.value_at_risk,
        "unit": record.unit,
        "supplier": record.supplier_name,
        "last_purchase_date": record.last_purchase_date,
        "last_purchase_price": record.last_purchase_price,
    }


def export_rows(
    records: Sequence[StockRecord],
    thresholds: ThresholdTable = DEFAULT_THRESHOLDS,
) -> list[dict[str, Any]]:
    return [export_row(r, thresholds) for r in records]
