"""Stock Alerts: threshold and replenishment engine.

Decides which catalog products are under-stocked, how critical each one
is, what the business is exposed to, and how much to reorder. Fetching
and persisting inventory is left to caller-supplied collaborators.

Usage:
    from stock_alerts import StockAlertEngine, AutoRefresher

    engine = StockAlertEngine(fetch_low_stock, submit_restock)
    await engine.refresh()
    print(engine.get_statistics())
    for record in engine.get_filtered_view():
        print(record.name, engine.get_status_of(record.id).label)

The pure pieces work without an engine:
    from stock_alerts import normalize_records, classify, aggregate, view
"""

from .advisor import (
    batch_restock_critical,
    create_intent,
    preview_restock,
    suggest_quantity,
)
from .aggregator import aggregate
from .classifier import classify, stock_percentage, urgent_records
from .config import (
    DEFAULT_THRESHOLDS,
    StockAlertSettings,
    ThresholdTable,
    get_settings,
    load_threshold_table,
)
from .engine import CancellationToken, RefreshOutcome, StockAlertEngine
from .errors import (
    FetchFailure,
    InvalidQuantity,
    RestockFailure,
    StockAlertError,
    UnknownRecord,
)
from .export import EXPORT_COLUMNS, export_rows
from .models import (
    BatchRestockReport,
    NormalizationResult,
    RestockIntent,
    RestockOutcome,
    RestockPreview,
    RestockResult,
    SortBy,
    SortOrder,
    StatisticsSnapshot,
    StockRecord,
    StockStatus,
    ViewFilter,
)
from .normalizer import normalize_record, normalize_records
from .pipeline import view
from .refresher import AutoRefresher

__all__ = [
    "AutoRefresher",
    "BatchRestockReport",
    "CancellationToken",
    "DEFAULT_THRESHOLDS",
    "EXPORT_COLUMNS",
    "FetchFailure",
    "InvalidQuantity",
    "NormalizationResult",
    "RefreshOutcome",
    "RestockFailure",
    "RestockIntent",
    "RestockOutcome",
    "RestockPreview",
    "RestockResult",
    "SortBy",
    "SortOrder",
    "StatisticsSnapshot",
    "StockAlertEngine",
    "StockAlertError",
    "StockAlertSettings",
    "StockRecord",
    "StockStatus",
    "ThresholdTable",
    "UnknownRecord",
    "ViewFilter",
    "aggregate",
    "batch_restock_critical",
    "classify",
    "create_intent",
    "export_rows",
    "get_settings",
    "load_threshold_table",
    "normalize_record",
    "normalize_records",
    "preview_restock",
    "stock_percentage",
    "suggest_quantity",
    "urgent_records",
    "view",
]
