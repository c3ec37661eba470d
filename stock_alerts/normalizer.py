"""StockRecord normalizer.

Turns the loosely-typed rows returned by the inventory query into
StockRecord instances. Missing or unusable stock numbers become None
(never 0) so the classifier can tell "no stock" from "no data".

Accepted keys (snake_case or camelCase):
    id
    name
    sku
    category_name      / categoryName
    supplier_name      / supplierName
    unit
    current_stock      / currentStock
    min_stock          / minStock
    price
    last_purchase_date / lastPurchaseDate
    last_purchase_price / lastPurchasePrice

Numeric strings must use a dot as the decimal separator; strings with
grouping or decimal commas ("1,5", "1,200") are treated as unusable.

Rows without an id are dropped. Nothing here raises on bad input.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from .config import StockAlertSettings, get_settings
from .models import NormalizationResult, RecordId, StockRecord

logger = logging.getLogger("stock_alerts.normalizer")

_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "id": ("id",),
    "name": ("name",),
    "sku": ("sku",),
    "category_name": ("category_name", "categoryName"),
    "supplier_name": ("supplier_name", "supplierName"),
    "unit": ("unit",),
    "current_stock": ("current_stock", "currentStock"),
    "min_stock": ("min_stock", "minStock"),
    "price": ("price",),
    "last_purchase_date": ("last_purchase_date", "lastPurchaseDate"),
    "last_purchase_price": ("last_purchase_price", "lastPurchasePrice"),
}


def _get(raw: Mapping[str, Any], field: str) -> Any:
    for key in _FIELD_KEYS[field]:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _safe_number(value: Any) -> float | None:
    """Parse a finite number, returning None on failure."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            number = float(s)
        except (OverflowError, ValueError):
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _safe_text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _safe_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def _record_id(value: Any) -> RecordId | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    return text or None


def normalize_record(
    raw: Mapping[str, Any],
    settings: StockAlertSettings | None = None,
    warnings: list[str] | None = None,
) -> StockRecord | None:
    """Normalize one raw row.

    Args:
        raw: Row as returned by the inventory query.
        settings: Placeholder configuration. Defaults to get_settings().
        warnings: Optional list that receives human-readable coercion notes.

    Returns:
        A StockRecord, or None when the row has no usable id.
    """
    settings = settings or get_settings()
    notes = warnings if warnings is not None else []

    if not isinstance(raw, Mapping):
        notes.append(f"Dropped non-mapping row: {type(raw).__name__}")
        return None

    record_id = _record_id(_get(raw, "id"))
    if record_id is None:
        notes.append("Dropped row without id")
        return None

    current_raw = _get(raw, "current_stock")
    current_stock = _safe_number(current_raw)
    if current_stock is not None and current_stock < 0:
        notes.append(f"Record {record_id!r}: negative current stock {current_raw!r} ignored")
        current_stock = None
    elif current_stock is None and current_raw is not None:
        notes.append(f"Record {record_id!r}: unusable current stock {current_raw!r}")

    min_raw = _get(raw, "min_stock")
    min_stock = _safe_number(min_raw)
    if min_stock is None and min_raw is not None:
        notes.append(f"Record {record_id!r}: unusable minimum stock {min_raw!r}")

    price = _safe_number(_get(raw, "price"))
    if price is None or price < 0:
        price = 0.0

    last_price = _safe_number(_get(raw, "last_purchase_price"))
    if last_price is not None and last_price < 0:
        last_price = None

    return StockRecord(
        id=record_id,
        name=_safe_text(_get(raw, "name"), settings.placeholder_name),
        sku=_safe_text(_get(raw, "sku"), settings.placeholder_sku),
        category_name=_safe_text(_get(raw, "category_name"), settings.placeholder_category),
        supplier_name=_safe_text(_get(raw, "supplier_name"), settings.placeholder_supplier),
        unit=_safe_text(_get(raw, "unit"), settings.placeholder_unit),
        current_stock=current_stock,
        min_stock=min_stock,
        price=price,
        last_purchase_date=_safe_date(_get(raw, "last_purchase_date")),
        last_purchase_price=last_price,
    )


def normalize_records(
    rows: Iterable[Mapping[str, Any]],
    settings: StockAlertSettings | None = None,
) -> NormalizationResult:
    """Normalize a fetched batch, dropping unidentifiable and duplicate rows.

    Input order is preserved; for duplicate ids the first row wins.
    """
    settings = settings or get_settings()
    result = NormalizationResult()
    seen: set[RecordId] = set()

    for raw in rows:
        record = normalize_record(raw, settings, result.warnings)
        if record is None:
            result.dropped += 1
            continue
        if record.id in seen:
            result.warnings.append(f"Dropped duplicate record {record.id!r}")
            result.dropped += 1
            continue
        seen.add(record.id)
        result.records.append(record)

    for note in result.warnings:
        logger.warning(note)

    return result
