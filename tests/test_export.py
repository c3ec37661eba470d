"""Tests for export row shaping."""

from datetime import date

import pytest
from stock_alerts.export import EXPORT_COLUMNS, export_row, export_rows
from stock_alerts.models import StockRecord


def _make_record(**overrides) -> StockRecord:
    fields = {
        "id": 1,
        "name": "Pintura blanca",
        "sku": "PNT-001",
        "category_name": "Pinturas",
        "supplier_name": "Colores SA",
        "unit": "galón",
        "current_stock": 2.0,
        "min_stock": 8.0,
        "price": 25.0,
        "last_purchase_date": date(2025, 5, 1),
    }
    fields.update(overrides)
    return StockRecord(**fields)


class TestExportRow:
    def test_columns(self):
        assert tuple(export_row(_make_record())) == EXPORT_COLUMNS

    def test_values(self):
        row = export_row(_make_record())
        assert row["product"] == "Pintura blanca"
        assert row["missing_units"] == 6.0
        assert row["stock_percentage"] == pytest.approx(25.0)
        assert row["status"] == "Bajo"
        assert row["value_at_risk"] == pytest.approx(50.0)
        assert row["last_purchase_date"] == date(2025, 5, 1)

    def test_incomplete_record(self):
        row = export_row(_make_record(min_stock=None))
        assert row["missing_units"] is None
        assert row["stock_percentage"] is None
        assert row["status"] == "Datos incompletos"
        assert row["value_at_risk"] == pytest.approx(50.0)

    def test_rows_keep_order(self):
        rows = export_rows([_make_record(id=2, name="B"), _make_record(id=1, name="A")])
        assert [r["product"] for r in rows] == ["B", "A"]
