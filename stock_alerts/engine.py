"""Stock alert engine.

Holds the snapshot of one refresh cycle and exposes read models and
restock actions to the UI layer. Persistence is delegated to two
collaborators supplied by the caller:

    fetch_records()         -> awaitable list of raw record mappings
    submit_restock(intent)  -> awaitable RestockResult

Concurrency model: a single cooperative event loop. One refresh may be
in flight at a time; a refresh requested meanwhile is a no-op, except
that a restock settling mid-refresh queues one more fetch. Results
that arrive after close() or after their CancellationToken was
cancelled are discarded instead of applied.

Usage:
    engine = StockAlertEngine(api.low_stock_report, api.create_movement)
    await engine.refresh()
    engine.set_filter(status="crítico", sort_by="missing")
    rows = engine.get_filtered_view()
    report = await engine.restock_all_critical()
    engine.close()
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from . import advisor
from .aggregator import aggregate
from .classifier import classify, urgent_records
from .config import StockAlertSettings, ThresholdTable, get_settings
from .errors import FetchFailure, RestockFailure, UnknownRecord
from .export import export_rows
from .models import (
    BatchRestockReport,
    RecordId,
    RestockIntent,
    RestockOutcome,
    RestockPreview,
    RestockResult,
    StatisticsSnapshot,
    StockRecord,
    StockStatus,
    ViewFilter,
)
from .normalizer import normalize_records
from .pipeline import view

logger = logging.getLogger("stock_alerts.engine")

FetchRecords = Callable[[], Awaitable[Sequence[Mapping[str, Any]]]]
SubmitRestock = Callable[[RestockIntent], Awaitable[RestockResult]]

CANCELLED = "cancelled"


class CancellationToken:
    """Marks an async request whose result should no longer be applied."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass(frozen=True)
class RefreshOutcome:
    """Summary of one applied refresh."""

    record_count: int
    dropped: int
    incomplete_count: int
    critical_count: int
    loaded_at: datetime


class StockAlertEngine:
    """Explicit per-screen engine instance; no module-level state."""

    def __init__(
        self,
        fetch_records: FetchRecords,
        submit_restock: SubmitRestock,
        *,
        settings: StockAlertSettings | None = None,
        thresholds: ThresholdTable | None = None,
    ):
        self._fetch_records = fetch_records
        self._submit_restock = submit_restock
        self.settings = settings or get_settings()
        self.thresholds = thresholds or self.settings.threshold_table()

        self._records: tuple[StockRecord, ...] = ()
        self._by_id: dict[RecordId, StockRecord] = {}
        self._statistics: StatisticsSnapshot | None = None
        self._warnings: list[str] = []
        self._filter = ViewFilter()

        self._refreshing = False
        self._refresh_pending = False
        self._generation = 0
        self._closed = False
        self._stale = False
        self._last_updated: datetime | None = None
        self._last_error: FetchFailure | None = None

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------

    def close(self) -> None:
        """Detach the consumer. In-flight results will be discarded."""
        self._closed = True
        self._generation += 1

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def is_busy(self) -> bool:
        return self._refreshing

    @property
    def is_stale(self) -> bool:
        return self._stale

    @property
    def last_updated(self) -> datetime | None:
        return self._last_updated

    @property
    def last_error(self) -> FetchFailure | None:
        return self._last_error

    @property
    def warnings(self) -> list[str]:
        """Normalizer notes from the last applied refresh."""
        return list(self._warnings)

    def _is_current(self, generation: int, token: CancellationToken | None) -> bool:
        if self._closed or generation != self._generation:
            return False
        return token is None or not token.cancelled

    # -----------------------------------------------------------------
    # Refresh
    # -----------------------------------------------------------------

    async def refresh(
        self,
        token: CancellationToken | None = None,
    ) -> RefreshOutcome | None:
        """Fetch, normalize and replace the current snapshot.

        Returns:
            RefreshOutcome when a new snapshot was applied, None when the
            call was suppressed (refresh already in flight, engine closed)
            or its result was discarded.

        Raises:
            FetchFailure: The inbound query failed. The previous snapshot
                is kept and marked stale.
        """
        if self._closed:
            return None
        if self._refreshing:
            logger.debug("Refresh already in flight, ignoring request")
            return None

        self._refreshing = True
        self._refresh_pending = False
        generation = self._generation
        try:
            while True:
                outcome = await self._fetch_and_apply(generation, token)
                if not self._refresh_pending or not self._is_current(generation, token):
                    return outcome
                # A restock settled while this fetch was in flight.
                self._refresh_pending = False
                logger.debug("Re-fetching to pick up a restock saved mid-refresh")
        finally:
            self._refreshing = False
            self._refresh_pending = False

    async def _fetch_and_apply(
        self,
        generation: int,
        token: CancellationToken | None,
    ) -> RefreshOutcome | None:
        try:
            rows = await self._fetch_records()
        except Exception as exc:
            if not self._is_current(generation, token):
                logger.debug("Discarding failed fetch for a stale request")
                return None
            raise self._fetch_failed(f"Inventory query failed: {exc}", exc) from exc

        if not self._is_current(generation, token):
            logger.debug("Discarding fetch result for a stale request")
            return None

        if isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence):
            raise self._fetch_failed(
                f"Inventory query returned {type(rows).__name__}, expected a list"
            )

        return self._apply(rows)

    def _fetch_failed(self, message: str, cause: BaseException | None = None) -> FetchFailure:
        failure = FetchFailure(message, cause)
        self._stale = True
        self._last_error = failure
        logger.warning("%s (keeping %d cached records)", message, len(self._records))
        return failure

    def _apply(self, rows: Sequence[Mapping[str, Any]]) -> RefreshOutcome:
        result = normalize_records(rows, self.settings)

        self._records = tuple(result.records)
        self._by_id = {r.id: r for r in self._records}
        self._statistics = aggregate(self._records, self.thresholds)
        self._warnings = list(result.warnings)
        self._last_updated = datetime.now(UTC)
        self._stale = False
        self._last_error = None

        outcome = RefreshOutcome(
            record_count=len(self._records),
            dropped=result.dropped,
            incomplete_count=result.incomplete_count,
            critical_count=len(urgent_records(self._records, self.thresholds)),
            loaded_at=self._last_updated,
        )
        logger.info(
            "Loaded %d records (%d critical, %d incomplete, %d dropped)",
            outcome.record_count,
            outcome.critical_count,
            outcome.incomplete_count,
            outcome.dropped,
        )
        return outcome

    # -----------------------------------------------------------------
    # Read models
    # -----------------------------------------------------------------

    def get_records(self) -> list[StockRecord]:
        return list(self._records)

    def get_record(self, record_id: RecordId) -> StockRecord:
        record = self._by_id.get(record_id)
        if record is None:
            raise UnknownRecord(record_id)
        return record

    def get_filtered_view(self) -> list[StockRecord]:
        return view(self._records, self._filter, self.thresholds)

    def get_statistics(self) -> StatisticsSnapshot | None:
        return self._statistics

    def get_status_of(self, record_id: RecordId) -> StockStatus:
        return classify(self.get_record(record_id), self.thresholds)

    def get_critical_records(self) -> list[StockRecord]:
        return urgent_records(self._records, self.thresholds)

    def suggest_quantity(self, record_id: RecordId) -> float:
        return advisor.suggest_quantity(
            self.get_record(record_id), self.settings.restock_target_multiplier
        )

    def preview_restock(self, record_id: RecordId, quantity: Any) -> RestockPreview:
        return advisor.preview_restock(
            self.get_record(record_id), quantity, self.settings.restock_target_multiplier
        )

    def export_rows(self) -> list[dict[str, Any]]:
        """Rows of the current filtered view, shaped for export."""
        return export_rows(self.get_filtered_view(), self.thresholds)

    # -----------------------------------------------------------------
    # Filter
    # -----------------------------------------------------------------

    @property
    def filter(self) -> ViewFilter:
        return self._filter

    def set_filter(self, criteria: ViewFilter | None = None, **changes: Any) -> ViewFilter:
        """Replace the view criteria, or update individual fields.

        set_filter(ViewFilter(...)) replaces; set_filter(status="bajo")
        updates only the given fields.
        """
        if criteria is not None:
            self._filter = criteria
        else:
            self._filter = ViewFilter.model_validate({**self._filter.model_dump(), **changes})
        return self._filter

    # -----------------------------------------------------------------
    # Restock
    # -----------------------------------------------------------------

    async def restock(
        self,
        record_id: RecordId,
        quantity: Any,
        reason: str | None = None,
        token: CancellationToken | None = None,
    ) -> RestockOutcome:
        """Submit one restock intent, then refresh on success.

        Raises:
            InvalidQuantity: quantity <= 0 or not a number.
            UnknownRecord: record_id is not in the current snapshot.
            RestockFailure: the mutation collaborator failed or rejected it.
        """
        intent = advisor.create_intent(self._by_id, record_id, quantity, reason, self.settings)
        generation = self._generation
        if not self._is_current(generation, token):
            return RestockOutcome(intent=intent, success=False, error=CANCELLED)

        outcome = await self._submit(intent)
        if not self._is_current(generation, token):
            logger.debug("Discarding restock result for %r", intent.record_id)
            return outcome

        if not outcome.success:
            raise RestockFailure(intent, outcome.error or "Restock rejected")

        await self._refresh_after_restock()
        return outcome

    async def restock_all_critical(
        self,
        token: CancellationToken | None = None,
    ) -> BatchRestockReport:
        """Restock every OUT_OF_STOCK and CRITICAL record.

        Intents are submitted one at a time and each settles on its own;
        the report is returned only after all of them resolved.
        """
        intents = advisor.batch_restock_critical(self._records, self.thresholds, self.settings)
        generation = self._generation
        report = BatchRestockReport()

        for intent in intents:
            if not self._is_current(generation, token):
                report.outcomes.append(RestockOutcome(intent=intent, success=False, error=CANCELLED))
                continue
            report.outcomes.append(await self._submit(intent))

        logger.info(
            "Batch restock: %d submitted, %d succeeded, %d failed",
            len(intents),
            len(report.succeeded),
            len(report.failed),
        )

        if report.succeeded and self._is_current(generation, token):
            await self._refresh_after_restock()
        return report

    async def _submit(self, intent: RestockIntent) -> RestockOutcome:
        logger.info("Submitting restock of %s for %r", intent.quantity, intent.record_id)
        try:
            raw = await self._submit_restock(intent)
        except Exception as exc:
            logger.warning("Restock of %r failed: %s", intent.record_id, exc)
            return RestockOutcome(intent=intent, success=False, error=str(exc) or type(exc).__name__)

        result = _coerce_result(raw)
        if not result.success:
            logger.warning("Restock of %r rejected: %s", intent.record_id, result.message)
            return RestockOutcome(
                intent=intent,
                success=False,
                result=result,
                error=result.message or "Restock rejected",
            )
        return RestockOutcome(intent=intent, success=True, result=result)

    async def _refresh_after_restock(self) -> None:
        if self._refreshing:
            # The in-flight fetch may predate the restock; fetch again after it.
            self._refresh_pending = True
            return
        try:
            await self.refresh()
        except FetchFailure:
            # Restock already settled; the snapshot is flagged stale.
            logger.warning("Refresh after restock failed; snapshot is stale")


def _coerce_result(raw: Any) -> RestockResult:
    if isinstance(raw, RestockResult):
        return raw
    if raw is None:
        return RestockResult()
    if isinstance(raw, Mapping):
        return RestockResult.model_validate(raw)
    return RestockResult(success=bool(raw))
