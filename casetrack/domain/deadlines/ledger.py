from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from casetrack.domain.common.errors import InconsistentStateError
from casetrack.domain.common.time import ensure_aware
from casetrack.domain.deadlines.models import PauseInterval
from casetrack.domain.deadlines.ports import DeadlineStore, IdGenerator


class PauseLedger:
    """
    Pause intervals per task. At most one interval per task is open
    (end_at is None) at any time.
    """

    def __init__(self, store: DeadlineStore, ids: IdGenerator) -> None:
        self._store = store
        self._ids = ids

    async def open(self, task_id: str, at: datetime) -> PauseInterval:
        ensure_aware(at)
        existing = await self._store.get_open_interval(task_id)
        if existing is not None:
            raise InconsistentStateError(f"Task {task_id} already has an open pause interval.")

        interval = PauseInterval(
            interval_id=self._ids.new_id(),
            task_id=task_id,
            start_at=at,
            end_at=None,
        )
        await self._store.insert_interval(interval)
        return interval

    async def close(self, task_id: str, at: datetime) -> Optional[PauseInterval]:
        """Close the open interval. Returns None (and does nothing) if none is open."""
        ensure_aware(at)
        existing = await self._store.get_open_interval(task_id)
        if existing is None:
            return None
        await self._store.close_interval(existing.interval_id, at)
        return PauseInterval(
            interval_id=existing.interval_id,
            task_id=existing.task_id,
            start_at=existing.start_at,
            end_at=at,
        )

    async def current(self, task_id: str) -> Optional[PauseInterval]:
        return await self._store.get_open_interval(task_id)

    async def is_open(self, task_id: str) -> bool:
        return (await self._store.get_open_interval(task_id)) is not None

    async def history(self, task_id: str) -> Sequence[PauseInterval]:
        intervals = await self._store.list_intervals(task_id)
        # same-instant pause/resume/pause: the open interval is the newer one
        return sorted(intervals, key=lambda i: (i.start_at, i.end_at is None), reverse=True)

    async def total_paused(self, task_id: str, now: datetime) -> timedelta:
        total = timedelta(0)
        for interval in await self._store.list_intervals(task_id):
            end = interval.end_at or now
            if end > interval.start_at:
                total += end - interval.start_at
        return total
