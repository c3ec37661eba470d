"""Exception taxonomy for the stock alert engine.

Every failure here is local and recoverable by retrying the action that
triggered it. Incomplete stock data is not an error: it is the
INDETERMINATE tier.
"""

from __future__ import annotations

from typing import Any


class StockAlertError(Exception):
    """Base class for all stock alert engine errors."""


class FetchFailure(StockAlertError):
    """Raised when the inbound inventory query fails.

    The engine keeps its previous snapshot and marks it stale.
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class InvalidQuantity(StockAlertError):
    """Raised when a restock quantity is not a positive finite number."""

    def __init__(self, quantity: Any):
        self.quantity = quantity
        super().__init__(f"Invalid restock quantity: {quantity!r}")


class UnknownRecord(StockAlertError):
    """Raised when a record id is not part of the current snapshot."""

    def __init__(self, record_id: Any):
        self.record_id = record_id
        super().__init__(f"Unknown record: {record_id!r}")


class RestockFailure(StockAlertError):
    """Raised when a single restock is rejected by the mutation collaborator."""

    def __init__(self, intent: Any, message: str):
        self.intent = intent
        super().__init__(message)
