"""Tests for the StockRecord normalizer."""

from datetime import date, datetime

import pytest
from stock_alerts.config import StockAlertSettings
from stock_alerts.normalizer import normalize_record, normalize_records


@pytest.fixture
def settings():
    return StockAlertSettings()


class TestNormalizeRecord:
    def test_full_snake_case_row(self, settings):
        record = normalize_record(
            {
                "id": 7,
                "name": "Tornillo 3/8",
                "sku": "TOR-38",
                "category_name": "Ferretería",
                "supplier_name": "Aceros SA",
                "unit": "caja",
                "current_stock": 4,
                "min_stock": 20,
                "price": "12.50",
                "last_purchase_date": "2025-03-11T10:00:00Z",
                "last_purchase_price": 11.0,
            },
            settings,
        )
        assert record.id == 7
        assert record.name == "Tornillo 3/8"
        assert record.current_stock == 4.0
        assert record.min_stock == 20.0
        assert record.price == 12.5
        assert record.last_purchase_date == date(2025, 3, 11)
        assert record.has_complete_stock_data is True

    def test_camel_case_keys(self, settings):
        record = normalize_record(
            {"id": "a1", "currentStock": 3, "minStock": 6, "categoryName": "Pinturas"},
            settings,
        )
        assert record.current_stock == 3.0
        assert record.min_stock == 6.0
        assert record.category_name == "Pinturas"

    def test_placeholders_for_missing_text(self, settings):
        record = normalize_record({"id": 1, "name": "   "}, settings)
        assert record.name == "N/A"
        assert record.sku == "N/A"
        assert record.category_name == "sin categoría"
        assert record.supplier_name == "N/A"
        assert record.unit == "unidad"

    def test_missing_numbers_stay_none(self, settings):
        record = normalize_record({"id": 1}, settings)
        assert record.current_stock is None
        assert record.min_stock is None
        assert record.price == 0.0
        assert record.has_complete_stock_data is False

    def test_zero_stock_is_not_missing(self, settings):
        record = normalize_record({"id": 1, "current_stock": 0, "min_stock": 10}, settings)
        assert record.current_stock == 0.0
        assert record.has_complete_stock_data is True

    def test_zero_min_stock_is_incomplete(self, settings):
        record = normalize_record({"id": 1, "current_stock": 5, "min_stock": 0}, settings)
        assert record.min_stock == 0.0
        assert record.has_complete_stock_data is False
        assert record.stock_ratio is None

    def test_negative_current_stock_rejected(self, settings):
        notes = []
        record = normalize_record({"id": 1, "current_stock": -3, "min_stock": 5}, settings, notes)
        assert record.current_stock is None
        assert any("negative" in n for n in notes)

    @pytest.mark.parametrize(
        "bad", ["abc", float("nan"), float("inf"), True, [], "", 10**400, "1,5"]
    )
    def test_unusable_numbers(self, settings, bad):
        record = normalize_record({"id": 1, "current_stock": bad, "min_stock": 5}, settings)
        assert record.current_stock is None

    def test_negative_price_defaults_to_zero(self, settings):
        record = normalize_record({"id": 1, "price": -4}, settings)
        assert record.price == 0.0

    def test_datetime_purchase_date(self, settings):
        record = normalize_record(
            {"id": 1, "last_purchase_date": datetime(2025, 1, 2, 8, 30)}, settings
        )
        assert record.last_purchase_date == date(2025, 1, 2)

    def test_unparseable_purchase_date(self, settings):
        record = normalize_record({"id": 1, "last_purchase_date": "yesterday"}, settings)
        assert record.last_purchase_date is None

    @pytest.mark.parametrize("raw", [{}, {"id": None}, {"id": "  "}, {"name": "x"}])
    def test_row_without_id_dropped(self, settings, raw):
        notes = []
        assert normalize_record(raw, settings, notes) is None
        assert notes == ["Dropped row without id"]

    def test_non_mapping_dropped(self, settings):
        assert normalize_record(["id", 1], settings) is None

    def test_record_is_immutable(self, settings):
        record = normalize_record({"id": 1, "current_stock": 2}, settings)
        with pytest.raises(Exception):
            record.current_stock = 5


class TestNormalizeRecords:
    def test_preserves_order_and_counts_drops(self, settings):
        result = normalize_records(
            [
                {"id": 3, "current_stock": 1, "min_stock": 10},
                {"name": "no id"},
                {"id": 1, "current_stock": 5, "min_stock": 10},
            ],
            settings,
        )
        assert [r.id for r in result.records] == [3, 1]
        assert result.dropped == 1
        assert len(result.warnings) == 1

    def test_duplicate_ids_first_wins(self, settings):
        result = normalize_records(
            [
                {"id": 1, "name": "first"},
                {"id": 1, "name": "second"},
            ],
            settings,
        )
        assert [r.name for r in result.records] == ["first"]
        assert result.dropped == 1
        assert "duplicate" in result.warnings[0]

    def test_incomplete_count(self, settings):
        result = normalize_records(
            [
                {"id": 1, "current_stock": 1, "min_stock": 10},
                {"id": 2, "current_stock": 1},
                {"id": 3, "min_stock": 10},
            ],
            settings,
        )
        assert result.incomplete_count == 2

    def test_empty_input(self, settings):
        result = normalize_records([], settings)
        assert result.records == []
        assert result.dropped == 0

    def test_oversized_number_marks_record_incomplete(self, settings):
        result = normalize_records(
            [{"id": 1, "current_stock": 10**400, "min_stock": 10, "price": 10**400}],
            settings,
        )
        record = result.records[0]
        assert record.current_stock is None
        assert record.price == 0.0
        assert result.incomplete_count == 1
