"""Tests for settings and threshold policies."""

import pytest
from pydantic import ValidationError
from stock_alerts.config import (
    DEFAULT_THRESHOLDS,
    StockAlertSettings,
    ThresholdTable,
    load_threshold_table,
)
from stock_alerts.models import StockStatus


class TestThresholdTable:
    def test_defaults(self):
        assert DEFAULT_THRESHOLDS.critical == 0.10
        assert DEFAULT_THRESHOLDS.low == 0.30
        assert DEFAULT_THRESHOLDS.warning == 1.00

    def test_tiers_in_evaluation_order(self):
        assert [s for s, _ in DEFAULT_THRESHOLDS.tiers()] == [
            StockStatus.CRITICAL,
            StockStatus.LOW,
            StockStatus.WARNING,
        ]

    @pytest.mark.parametrize(
        "bounds",
        [
            {"critical": 0, "low": 0.3, "warning": 1.0},
            {"critical": 0.3, "low": 0.3, "warning": 1.0},
            {"critical": 0.1, "low": 1.5, "warning": 1.0},
        ],
    )
    def test_rejects_invalid_ordering(self, bounds):
        with pytest.raises(ValidationError):
            ThresholdTable(**bounds)


class TestLoadThresholdTable:
    def test_load_yaml_policy(self, tmp_path):
        policy = tmp_path / "policy.yaml"
        policy.write_text("thresholds:\n  critical: 0.2\n  low: 0.5\n  warning: 1.5\n")
        table = load_threshold_table(policy)
        assert table == ThresholdTable(critical=0.2, low=0.5, warning=1.5)

    def test_missing_section(self, tmp_path):
        policy = tmp_path / "policy.yaml"
        policy.write_text("other: 1\n")
        with pytest.raises(ValueError, match="thresholds"):
            load_threshold_table(policy)

    def test_invalid_bounds(self, tmp_path):
        policy = tmp_path / "policy.yaml"
        policy.write_text("thresholds:\n  critical: 0.5\n  low: 0.2\n")
        with pytest.raises(ValidationError):
            load_threshold_table(policy)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_threshold_table(tmp_path / "nope.yaml")


class TestSettings:
    def test_defaults(self):
        settings = StockAlertSettings()
        assert settings.refresh_interval_seconds == 300
        assert settings.placeholder_category == "sin categoría"
        assert settings.threshold_table() == DEFAULT_THRESHOLDS

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("STOCK_ALERTS_CRITICAL_THRESHOLD", "0.05")
        monkeypatch.setenv("STOCK_ALERTS_REFRESH_INTERVAL_SECONDS", "60")
        settings = StockAlertSettings()
        assert settings.threshold_table().critical == 0.05
        assert settings.refresh_interval_seconds == 60

    def test_policy_file_overrides_thresholds(self, tmp_path):
        policy = tmp_path / "policy.yaml"
        policy.write_text("thresholds:\n  critical: 0.2\n  low: 0.4\n  warning: 0.9\n")
        settings = StockAlertSettings(critical_threshold=0.01, threshold_policy_path=str(policy))
        assert settings.threshold_table().critical == 0.2
