"""Periodic refresh trigger.

In-process timer that calls engine.refresh() every interval using an
asyncio task. A fetch failure is logged and the loop keeps going; the
engine keeps serving its stale snapshot meanwhile.

Usage:
    refresher = AutoRefresher(engine, interval_seconds=300)
    refresher.start()  # Non-blocking, spawns background task
    refresher.stop()
"""

from __future__ import annotations

import asyncio
import logging

from .engine import StockAlertEngine
from .errors import FetchFailure

logger = logging.getLogger("stock_alerts.refresher")


class AutoRefresher:
    """Background timer driving engine refreshes."""

    def __init__(
        self,
        engine: StockAlertEngine,
        interval_seconds: float | None = None,
        *,
        refresh_immediately: bool = True,
    ):
        self.engine = engine
        self.interval = (
            interval_seconds
            if interval_seconds is not None
            else engine.settings.refresh_interval_seconds
        )
        self.refresh_immediately = refresh_immediately
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        """Start the refresh loop as a background task."""
        if self.interval <= 0:
            logger.warning("Refresh interval %s is not positive, auto refresh disabled", self.interval)
            return
        if self._task and not self._task.done():
            logger.warning("Auto refresh already running")
            return
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Auto refresh started (interval=%ss)", self.interval)

    def stop(self) -> None:
        """Stop the refresh loop."""
        if self._task and not self._task.done():
            self._task.cancel()
            logger.info("Auto refresh stopped")

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run_loop(self) -> None:
        if not self.refresh_immediately:
            await asyncio.sleep(self.interval)
        while not self.engine.is_closed:
            await self._tick()
            await asyncio.sleep(self.interval)
        logger.info("Engine closed, auto refresh exiting")

    async def _tick(self) -> None:
        try:
            await self.engine.refresh()
        except FetchFailure as exc:
            logger.warning("Scheduled refresh failed: %s", exc)
        except Exception:
            logger.exception("Scheduled refresh error")
