# casetrack/infra/scheduler/loop.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from casetrack.domain.deadlines.engine import DeadlineEngine, compute_elapsed
from casetrack.domain.deadlines.ports import DeadlineStore

logger = logging.getLogger(__name__)


@dataclass
class RefreshConfig:
    interval_seconds: float = 600.0


@dataclass(frozen=True)
class RefreshReport:
    checked: int
    updated: int
    failed: int


class RefreshJob:
    """
    Periodic pass that recomputes elapsed days of every active task and
    caches them on the task row. Paused tasks are left alone.

    Each task is written independently; a failure on one is logged and the
    pass moves on. Start with run_forever() in its own asyncio task, stop with
    stop() (or by cancelling that task).
    """

    def __init__(self, engine: DeadlineEngine, store: DeadlineStore, cfg: Optional[RefreshConfig] = None) -> None:
        self._engine = engine
        self._store = store
        self._cfg = cfg or RefreshConfig()
        self._stop = asyncio.Event()

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    async def run_forever(self) -> None:
        while not self._stop.is_set():
            try:
                await self.run_once()
            except Exception as e:
                # never crash the app because of the refresh pass, but log errors
                logger.error(f"Refresh tick error: {e}", exc_info=True)
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._cfg.interval_seconds)
            except asyncio.TimeoutError:
                pass

    async def run_once(self) -> RefreshReport:
        calendar = await self._engine.load_calendar()
        today = self._engine.today()
        tasks = await self._store.list_active_tasks()

        updated = 0
        failed = 0
        for task in tasks:
            try:
                days = compute_elapsed(task, False, calendar, today)
                if task.cached_days == days:
                    continue
                await self._store.update_cached_days(task.task_id, days)
                updated += 1
            except Exception as e:
                failed += 1
                logger.error(f"Refresh failed: task_id={task.task_id}, error={e}", exc_info=True)

        report = RefreshReport(checked=len(tasks), updated=updated, failed=failed)
        logger.debug("Refresh pass: %s", report)
        return report
