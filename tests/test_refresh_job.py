"""
Tests for the periodic refresh pass: active tasks only, idempotent,
log-and-continue on per-task failures.
"""
from __future__ import annotations

import asyncio
from datetime import date

from casetrack.domain.deadlines.engine import DeadlineEngine
from casetrack.infra.scheduler.loop import RefreshConfig, RefreshJob
from tests.fakes import FixedClock, InMemoryDeadlineStore, SeqIds, make_task


def _setup(store=None):
    store = store or InMemoryDeadlineStore()
    clock = FixedClock(date(2025, 1, 10))
    engine = DeadlineEngine(store=store, clock=clock, ids=SeqIds())
    return store, clock, engine


def test_refresh_updates_active_and_skips_paused():
    store, clock, engine = _setup()
    store.tasks["a"] = make_task("a", start_date=date(2025, 1, 1))
    store.tasks["p"] = make_task("p", start_date=date(2025, 1, 1))

    async def run():
        await engine.pause("p", "waiting")
        report = await RefreshJob(engine, store).run_once()
        assert report.checked == 1
        assert report.updated == 1
        assert report.failed == 0
        assert store.tasks["a"].cached_days == 9
        assert store.tasks["p"].cached_days is None

    asyncio.run(run())


def test_refresh_is_idempotent():
    store, clock, engine = _setup()
    store.tasks["a"] = make_task("a", start_date=date(2025, 1, 1))

    async def run():
        job = RefreshJob(engine, store)
        await job.run_once()
        second = await job.run_once()
        assert second.updated == 0
        assert store.cached_updates == ["a"]

        clock.advance(days=1)
        third = await job.run_once()
        assert third.updated == 1
        assert store.tasks["a"].cached_days == 10

    asyncio.run(run())


class _FlakyStore(InMemoryDeadlineStore):
    async def update_cached_days(self, task_id, days):
        if task_id == "bad":
            raise RuntimeError("write failed")
        await super().update_cached_days(task_id, days)


def test_refresh_continues_after_one_failure():
    store, clock, engine = _setup(_FlakyStore())
    store.tasks["bad"] = make_task("bad", start_date=date(2025, 1, 1))
    store.tasks["good"] = make_task("good", start_date=date(2025, 1, 2))

    async def run():
        report = await RefreshJob(engine, store).run_once()
        assert report.failed == 1
        assert report.updated == 1
        assert store.tasks["good"].cached_days == 8

    asyncio.run(run())


def test_run_forever_stops_on_request():
    store, clock, engine = _setup()
    store.tasks["a"] = make_task("a", start_date=date(2025, 1, 1))

    async def run():
        job = RefreshJob(engine, store, RefreshConfig(interval_seconds=0.01))
        task = asyncio.create_task(job.run_forever())
        await asyncio.sleep(0.05)
        job.stop()
        await asyncio.wait_for(task, timeout=1)
        assert job.stopped
        assert store.tasks["a"].cached_days == 9

    asyncio.run(run())


def test_stop_before_start_is_honored():
    store, clock, engine = _setup()
    store.tasks["a"] = make_task("a", start_date=date(2025, 1, 1))

    async def run():
        job = RefreshJob(engine, store, RefreshConfig(interval_seconds=60))
        job.stop()
        await asyncio.wait_for(job.run_forever(), timeout=1)
        assert job.stopped
        assert store.tasks["a"].cached_days is None

    asyncio.run(run())
