"""Stock alert configuration.

Follows the pydantic-settings pattern: values load from environment
variables (prefix STOCK_ALERTS_) and an optional .env file. Threshold
policies can also be swapped in from a YAML file, e.g.::

    thresholds:
      critical: 0.15
      low: 0.40
      warning: 1.0
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings

from .models import StockStatus

logger = logging.getLogger("stock_alerts.config")

DEFAULT_CRITICAL_THRESHOLD = 0.10
DEFAULT_LOW_THRESHOLD = 0.30
DEFAULT_WARNING_THRESHOLD = 1.00

# Five minutes
DEFAULT_REFRESH_INTERVAL_SECONDS = 300


class ThresholdTable(BaseModel):
    """Inclusive upper bounds on current_stock / min_stock for each tier."""

    critical: float = DEFAULT_CRITICAL_THRESHOLD
    low: float = DEFAULT_LOW_THRESHOLD
    warning: float = DEFAULT_WARNING_THRESHOLD

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_ordering(self) -> ThresholdTable:
        if self.critical <= 0:
            raise ValueError(f"critical threshold must be positive, got {self.critical}")
        if not (self.critical < self.low < self.warning):
            raise ValueError(
                f"Thresholds must be strictly increasing: "
                f"critical={self.critical}, low={self.low}, warning={self.warning}"
            )
        return self

    def tiers(self) -> list[tuple[StockStatus, float]]:
        """Ratio tiers in evaluation order, tightest bound first."""
        return [
            (StockStatus.CRITICAL, self.critical),
            (StockStatus.LOW, self.low),
            (StockStatus.WARNING, self.warning),
        ]


DEFAULT_THRESHOLDS = ThresholdTable()


def load_threshold_table(path: str | Path) -> ThresholdTable:
    """Load a threshold policy from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file has no ``thresholds`` mapping.
        pydantic.ValidationError: If the bounds are not valid.
    """
    path = Path(path)
    with open(path) as f:
        data: Any = yaml.safe_load(f)

    if not isinstance(data, dict) or not isinstance(data.get("thresholds"), dict):
        raise ValueError(f"{path}: expected a top-level 'thresholds' mapping")

    table = ThresholdTable.model_validate(data["thresholds"])
    logger.info(
        "Loaded threshold policy from %s (critical=%s, low=%s, warning=%s)",
        path,
        table.critical,
        table.low,
        table.warning,
    )
    return table


class StockAlertSettings(BaseSettings):
    """Configuration for the stock alert engine.

    All values can be set via environment variables or .env file,
    e.g. STOCK_ALERTS_CRITICAL_THRESHOLD=0.15.
    """

    # ----- Classification -----
    critical_threshold: float = Field(
        default=DEFAULT_CRITICAL_THRESHOLD,
        description="Ratio at or below which a record is Critical.",
    )
    low_threshold: float = Field(
        default=DEFAULT_LOW_THRESHOLD,
        description="Ratio at or below which a record is Low.",
    )
    warning_threshold: float = Field(
        default=DEFAULT_WARNING_THRESHOLD,
        description="Ratio at or below which a record is Warning.",
    )
    threshold_policy_path: str | None = Field(
        default=None,
        description="Optional YAML policy file; overrides the three thresholds.",
    )

    # ----- Refresh -----
    refresh_interval_seconds: float = Field(
        default=DEFAULT_REFRESH_INTERVAL_SECONDS,
        description="Auto refresh interval.",
    )

    # ----- Normalization placeholders -----
    placeholder_name: str = Field(default="N/A")
    placeholder_sku: str = Field(default="N/A")
    placeholder_category: str = Field(default="sin categoría")
    placeholder_supplier: str = Field(default="N/A")
    placeholder_unit: str = Field(default="unidad")

    # ----- Replenishment -----
    restock_target_multiplier: float = Field(
        default=2.0,
        description="Restock aims at this multiple of the minimum stock.",
    )
    single_restock_reason: str = Field(
        default="Reposición automática - Stock bajo: {current}/{minimum}",
        description="Reason template for single restocks without an explicit reason.",
    )
    batch_restock_reason: str = Field(
        default="Reposición masiva automática - Stock crítico",
        description="Reason attached to every batch restock intent.",
    )

    model_config = {
        "env_prefix": "STOCK_ALERTS_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def threshold_table(self) -> ThresholdTable:
        if self.threshold_policy_path:
            return load_threshold_table(self.threshold_policy_path)
        return ThresholdTable(
            critical=self.critical_threshold,
            low=self.low_threshold,
            warning=self.warning_threshold,
        )


@lru_cache
def get_settings() -> StockAlertSettings:
    """Get cached settings singleton."""
    return StockAlertSettings()
