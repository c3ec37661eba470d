"""Pydantic models for the stock alert engine.

A refresh cycle turns the raw catalog slice into immutable StockRecord
instances. Everything else in the package (statuses, statistics, views,
restock intents) is derived from those records and never mutates them.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, Field

RecordId = int | str


# ---------------------------------------------------------------------------
# Stock status tiers
# ---------------------------------------------------------------------------


class StockStatus(str, Enum):
    """Discrete stock-health tier of one record."""

    OUT_OF_STOCK = "out_of_stock"
    CRITICAL = "critical"
    LOW = "low"
    WARNING = "warning"
    NORMAL = "normal"
    INDETERMINATE = "indeterminate"

    @property
    def label(self) -> str:
        """Display label shown in lists and used by the status filter."""
        return {
            StockStatus.OUT_OF_STOCK: "Agotado",
            StockStatus.CRITICAL: "Crítico",
            StockStatus.LOW: "Bajo",
            StockStatus.WARNING: "Advertencia",
            StockStatus.NORMAL: "Normal",
            StockStatus.INDETERMINATE: "Datos incompletos",
        }[self]

    @property
    def is_alert(self) -> bool:
        return self in (
            StockStatus.OUT_OF_STOCK,
            StockStatus.CRITICAL,
            StockStatus.LOW,
            StockStatus.WARNING,
        )

    @property
    def needs_urgent_restock(self) -> bool:
        return self in (StockStatus.OUT_OF_STOCK, StockStatus.CRITICAL)


# ---------------------------------------------------------------------------
# Stock records
# ---------------------------------------------------------------------------


class StockRecord(BaseModel):
    """One product's stock-relevant fields in canonical form.

    Numeric stock fields are None when the source did not provide a
    usable value, so "zero stock" and "no data" stay distinguishable.
    """

    id: RecordId
    name: str
    sku: str
    category_name: str
    supplier_name: str
    unit: str
    current_stock: float | None = None
    min_stock: float | None = None
    price: float = 0.0
    last_purchase_date: date | None = None
    last_purchase_price: float | None = None

    model_config = {"frozen": True}

    @property
    def has_complete_stock_data(self) -> bool:
        return (
            self.current_stock is not None
            and self.min_stock is not None
            and self.min_stock > 0
        )

    @property
    def stock_ratio(self) -> float | None:
        """current_stock / min_stock, or None when it cannot be computed."""
        if not self.has_complete_stock_data:
            return None
        return self.current_stock / self.min_stock

    @property
    def missing_units(self) -> float | None:
        if not self.has_complete_stock_data:
            return None
        return max(0.0, self.min_stock - self.current_stock)

    @property
    def value_at_risk(self) -> float | None:
        if self.current_stock is None:
            return None
        return self.price * self.current_stock


class NormalizationResult(BaseModel):
    """Outcome of normalizing one fetched batch of raw records."""

    records: list[StockRecord] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    dropped: int = 0

    @property
    def incomplete_count(self) -> int:
        return sum(1 for r in self.records if not r.has_complete_stock_data)


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class StatisticsSnapshot(BaseModel):
    """Portfolio-level metrics for one refresh cycle."""

    total_products: int
    incomplete_products: int = 0
    total_value_at_risk: float
    total_missing_units: float
    average_stock_percentage: float
    most_critical: StockRecord
    most_critical_percentage: float
    out_of_stock_count: int = 0
    critical_count: int = 0
    low_count: int = 0
    warning_count: int = 0
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"frozen": True}

    @property
    def alert_count(self) -> int:
        return (
            self.out_of_stock_count
            + self.critical_count
            + self.low_count
            + self.warning_count
        )

    def to_dict(self) -> dict:
        return {
            "total_products": self.total_products,
            "incomplete_products": self.incomplete_products,
            "total_value_at_risk": round(self.total_value_at_risk, 2),
            "total_missing_units": self.total_missing_units,
            "average_stock_percentage": round(self.average_stock_percentage, 1),
            "most_critical_id": self.most_critical.id,
            "most_critical_name": self.most_critical.name,
            "most_critical_percentage": round(self.most_critical_percentage, 1),
            "out_of_stock_count": self.out_of_stock_count,
            "critical_count": self.critical_count,
            "low_count": self.low_count,
            "warning_count": self.warning_count,
            "generated_at": self.generated_at.isoformat(),
        }


# ---------------------------------------------------------------------------
# View criteria
# ---------------------------------------------------------------------------


class SortBy(str, Enum):
    CRITICAL = "critical"
    NAME = "name"
    MISSING = "missing"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ViewFilter(BaseModel):
    """User-selected criteria for the displayed list."""

    status: str | None = None
    category: str | None = None
    sort_by: SortBy = SortBy.CRITICAL
    sort_order: SortOrder = SortOrder.ASC

    model_config = {"frozen": True, "extra": "forbid"}


# ---------------------------------------------------------------------------
# Restock
# ---------------------------------------------------------------------------


class RestockIntent(BaseModel):
    """A request to replenish one record, sent to the system of record."""

    record_id: RecordId
    quantity: float
    reason: str

    model_config = {"frozen": True}


class RestockResult(BaseModel):
    """What the inventory mutation collaborator reports back."""

    success: bool = True
    message: str = ""
    reference: str | None = None


class RestockOutcome(BaseModel):
    """Settled result of one submitted (or skipped) intent."""

    intent: RestockIntent
    success: bool
    result: RestockResult | None = None
    error: str | None = None

    @property
    def record_id(self) -> RecordId:
        return self.intent.record_id


class BatchRestockReport(BaseModel):
    """Per-item results of a batch restock. Never all-or-nothing."""

    outcomes: list[RestockOutcome] = Field(default_factory=list)

    @property
    def succeeded(self) -> list[RestockOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> list[RestockOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def total_units(self) -> float:
        return sum(o.intent.quantity for o in self.succeeded)


class RestockPreview(BaseModel):
    """Projected effect of restocking a record by a given quantity."""

    record_id: RecordId
    quantity: float
    projected_stock: float
    projected_percentage: float | None
    order_cost: float
    reaches_target: bool
