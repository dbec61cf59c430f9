"""
Unit tests for PauseLedger: one open interval per task, history order.
"""
from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest

from casetrack.domain.common.errors import InconsistentStateError
from casetrack.domain.deadlines.ledger import PauseLedger
from tests.fakes import InMemoryDeadlineStore, SeqIds

T0 = datetime(2025, 2, 1, 9, 0, tzinfo=timezone.utc)


def _ledger():
    store = InMemoryDeadlineStore()
    return store, PauseLedger(store, SeqIds("p"))


def test_open_then_close():
    store, ledger = _ledger()

    async def run():
        opened = await ledger.open("t1", T0)
        assert opened.is_open
        assert await ledger.is_open("t1") is True

        closed = await ledger.close("t1", T0 + timedelta(days=2))
        assert closed is not None
        assert closed.end_at == T0 + timedelta(days=2)
        assert await ledger.is_open("t1") is False
        assert await ledger.current("t1") is None

    asyncio.run(run())


def test_open_twice_is_rejected():
    store, ledger = _ledger()

    async def run():
        await ledger.open("t1", T0)
        with pytest.raises(InconsistentStateError):
            await ledger.open("t1", T0 + timedelta(hours=1))
        assert len(await ledger.history("t1")) == 1

    asyncio.run(run())


def test_close_without_open_is_noop():
    store, ledger = _ledger()

    async def run():
        assert await ledger.close("t1", T0) is None
        assert await ledger.history("t1") == []

    asyncio.run(run())


def test_intervals_are_per_task():
    store, ledger = _ledger()

    async def run():
        await ledger.open("t1", T0)
        await ledger.open("t2", T0)
        await ledger.close("t1", T0 + timedelta(days=1))
        assert await ledger.is_open("t1") is False
        assert await ledger.is_open("t2") is True

    asyncio.run(run())


def test_history_most_recent_first():
    store, ledger = _ledger()

    async def run():
        await ledger.open("t1", T0)
        await ledger.close("t1", T0 + timedelta(days=1))
        await ledger.open("t1", T0 + timedelta(days=3))

        history = await ledger.history("t1")
        assert [i.start_at for i in history] == [T0 + timedelta(days=3), T0]
        assert history[0].end_at is None
        assert history[1].end_at == T0 + timedelta(days=1)

    asyncio.run(run())


def test_history_puts_open_interval_first_on_same_start():
    store, ledger = _ledger()

    async def run():
        await ledger.open("t1", T0)
        await ledger.close("t1", T0)
        await ledger.open("t1", T0)

        history = await ledger.history("t1")
        assert [i.end_at for i in history] == [None, T0]

    asyncio.run(run())


def test_total_paused_counts_open_interval_until_now():
    store, ledger = _ledger()

    async def run():
        await ledger.open("t1", T0)
        await ledger.close("t1", T0 + timedelta(days=1))
        await ledger.open("t1", T0 + timedelta(days=2))
        total = await ledger.total_paused("t1", now=T0 + timedelta(days=2, hours=12))
        assert total == timedelta(days=1, hours=12)

    asyncio.run(run())


def test_naive_timestamps_are_rejected():
    store, ledger = _ledger()

    async def run():
        with pytest.raises(ValueError):
            await ledger.open("t1", datetime(2025, 2, 1, 9, 0))

    asyncio.run(run())
