from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from casetrack.domain.common.errors import NotFoundError, ValidationError
from casetrack.domain.common.time import as_date
from casetrack.domain.deadlines.calendar import DEFAULT_CUTOFF_YEAR, HolidayCalendar
from casetrack.domain.deadlines.catalog import ActionTypeCatalog
from casetrack.domain.deadlines.counter import elapsed_days
from casetrack.domain.deadlines.ledger import PauseLedger
from casetrack.domain.deadlines.models import (
    AUTO_PAUSE_PREFIX,
    AlertLevel,
    DeadlineAlert,
    DeadlineSnapshot,
    Holiday,
    PauseInterval,
    Task,
    TaskStatus,
)
from casetrack.domain.deadlines.ports import Clock, DeadlineStore, IdGenerator
from casetrack.domain.deadlines.rules import validate_holiday_name

logger = logging.getLogger(__name__)

DEFAULT_ALERT_HORIZON_DAYS = 3


def compute_elapsed(task: Task, paused: bool, calendar: HolidayCalendar, today: date) -> int:
    """Frozen snapshot while paused, live business-day count otherwise."""
    if task.start_date is None:
        return 0
    if paused:
        return max(task.stored_days or 0, 0)
    return elapsed_days(task.start_date, today, calendar)


def fallback_due_date(task: Task, elapsed: int) -> Optional[date]:
    # start_date + elapsed lands on "today" for an active task. Kept as the
    # legacy behavior until product decides what an undated task is due on.
    if task.start_date is None:
        return None
    return task.start_date + timedelta(days=elapsed)


def classify_alert(task: Task, today: date, horizon_days: int = DEFAULT_ALERT_HORIZON_DAYS) -> Optional[DeadlineAlert]:
    """
    overdue:  due date already passed
    due_soon: due today or tomorrow
    upcoming: due within horizon_days
    Completed tasks and tasks without an explicit due date never alert.
    """
    if task.due_date is None or task.status == TaskStatus.COMPLETED:
        return None

    days_left = (task.due_date - today).days
    if days_left < 0:
        level = AlertLevel.OVERDUE
    elif days_left <= 1:
        level = AlertLevel.DUE_SOON
    elif days_left <= horizon_days:
        level = AlertLevel.UPCOMING
    else:
        return None

    return DeadlineAlert(
        task_id=task.task_id,
        title=task.title,
        level=level,
        due_date=task.due_date,
        days_left=days_left,
    )


class DeadlineEngine:
    """
    Elapsed business days and due dates for tasks, plus the pause/resume
    state machine. No aiogram. No sqlite.

    The pause ledger is the only source of truth for "is this task paused";
    Task.pause_active is a read-side copy of it.
    """

    def __init__(
        self,
        store: DeadlineStore,
        clock: Clock,
        ids: IdGenerator,
        cutoff_year: Optional[int] = DEFAULT_CUTOFF_YEAR,
        alert_horizon_days: int = DEFAULT_ALERT_HORIZON_DAYS,
    ) -> None:
        self._store = store
        self._clock = clock
        self._ids = ids
        self._cutoff_year = cutoff_year
        self._alert_horizon_days = alert_horizon_days
        self.ledger = PauseLedger(store, ids)
        self.catalog = ActionTypeCatalog(store, ids)

    def today(self) -> date:
        return self._clock.now().date()

    async def load_calendar(self) -> HolidayCalendar:
        holidays = await self._store.list_holidays(min_year=self._cutoff_year)
        return HolidayCalendar(holidays, cutoff_year=self._cutoff_year)

    async def _require_task(self, task_id: str) -> Task:
        task = await self._store.get_task(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found.")
        return task

    # ----- queries -----

    async def is_paused(self, task_id: str) -> bool:
        await self._require_task(task_id)
        return await self.ledger.is_open(task_id)

    async def history(self, task_id: str) -> Sequence[PauseInterval]:
        await self._require_task(task_id)
        return await self.ledger.history(task_id)

    async def get_elapsed_days(self, task_id: str) -> int:
        task = await self._require_task(task_id)
        if task.start_date is None:
            return 0
        paused = await self.ledger.is_open(task_id)
        calendar = await self.load_calendar() if not paused else HolidayCalendar()
        return compute_elapsed(task, paused, calendar, self.today())

    async def get_due_date(self, task_id: str) -> Optional[date]:
        task = await self._require_task(task_id)
        if task.due_date is not None:
            return task.due_date
        return fallback_due_date(task, await self.get_elapsed_days(task_id))

    async def deadline_alert(self, task_id: str) -> Optional[DeadlineAlert]:
        task = await self._require_task(task_id)
        return classify_alert(task, self.today(), self._alert_horizon_days)

    async def list_alerts(self) -> List[DeadlineAlert]:
        today = self.today()
        alerts = []
        for task in await self._store.list_open_tasks_with_due_date():
            alert = classify_alert(task, today, self._alert_horizon_days)
            if alert is not None:
                alerts.append(alert)
        alerts.sort(key=lambda a: (a.days_left, a.task_id))
        return alerts

    async def snapshot(self, task_id: str) -> DeadlineSnapshot:
        task = await self._require_task(task_id)
        today = self.today()
        paused = await self.ledger.is_open(task_id)
        calendar = await self.load_calendar() if not paused else HolidayCalendar()
        elapsed = compute_elapsed(task, paused, calendar, today)
        due = task.due_date if task.due_date is not None else fallback_due_date(task, elapsed)
        return DeadlineSnapshot(
            task_id=task.task_id,
            elapsed_days=elapsed,
            due_date=due,
            paused=paused,
            pause_description=task.pause_description if paused else None,
            alert=classify_alert(task, today, self._alert_horizon_days),
        )

    # ----- transitions -----

    async def pause(self, task_id: str, reason: str) -> Task:
        task = await self._require_task(task_id)
        calendar = await self.load_calendar()
        async with self._store.atomic():
            return await self._pause_in_tx(task, reason, calendar, self._clock.now())

    async def resume(self, task_id: str, next_status: Optional[TaskStatus] = None) -> Task:
        task = await self._require_task(task_id)
        now = self._clock.now()

        async with self._store.atomic():
            closed = await self.ledger.close(task_id, now)
            if closed is None:
                logger.warning("Resume ignored, no open pause interval: task_id=%s status=%s", task_id, task.status.value)
                return replace(task, pause_active=False)

            updated = replace(
                task,
                pause_description=None,
                status=next_status if next_status is not None else task.status,
                pause_active=False,
            )
            await self._store.save_task(updated)

        logger.info("Task resumed: task_id=%s paused_since=%s", task_id, closed.start_at.isoformat())
        return updated

    async def apply_action_type(
        self,
        task_id: str,
        action_type_id: str,
        reference_date: Optional[date] = None,
    ) -> Task:
        definition = await self.catalog.lookup(action_type_id)
        task = await self._require_task(task_id)

        ref = as_date(reference_date) or task.start_date or self.today()
        due = ActionTypeCatalog.derive_due_date(definition, ref)
        calendar = await self.load_calendar() if definition.affects_delay else None

        async with self._store.atomic():
            updated = replace(task, due_date=due, action_type_id=definition.action_type_id)
            await self._store.save_task(updated)
            if definition.affects_delay:
                updated = await self._pause_in_tx(
                    updated,
                    f"{AUTO_PAUSE_PREFIX}{definition.name}",
                    calendar,
                    self._clock.now(),
                )

        logger.info(
            "Action type applied: task_id=%s action_type=%s due_date=%s auto_pause=%s",
            task_id,
            definition.name,
            due.isoformat(),
            definition.affects_delay,
        )
        return updated

    async def _pause_in_tx(self, task: Task, reason: str, calendar: HolidayCalendar, now: datetime) -> Task:
        existing = await self.ledger.current(task.task_id)
        if existing is not None:
            logger.warning(
                "Pause ignored, interval already open since %s: task_id=%s",
                existing.start_at.isoformat(),
                task.task_id,
            )
            healed = replace(task, status=TaskStatus.PAUSED, pause_active=True)
            if task.status != TaskStatus.PAUSED:
                await self._store.save_task(healed)
            return healed

        stored = elapsed_days(task.start_date, now, calendar) if task.start_date else 0
        updated = replace(
            task,
            stored_days=stored,
            pause_description=reason,
            status=TaskStatus.PAUSED,
            pause_active=True,
        )
        await self._store.save_task(updated)
        await self.ledger.open(task.task_id, now)

        logger.info("Task paused: task_id=%s stored_days=%s reason=%r", task.task_id, stored, reason)
        return updated

    # ----- reference data -----

    async def add_holiday(self, day: date, name: str, source: str = "manual") -> Holiday:
        d = as_date(day)
        if d is None:
            raise ValidationError("Holiday date is invalid.")
        holiday = Holiday(
            holiday_id=self._ids.new_id(),
            date=d,
            name=validate_holiday_name(name),
            source=source,
        )
        await self._store.add_holiday(holiday)
        return holiday

    async def list_holidays(self) -> Sequence[Holiday]:
        """Every stored holiday, including those before the cutoff year."""
        return await self._store.list_holidays()

    async def _require_holiday(self, holiday_id: str) -> Holiday:
        holiday = await self._store.get_holiday(holiday_id)
        if holiday is None:
            raise NotFoundError(f"Holiday {holiday_id} not found.")
        return holiday

    async def update_holiday(self, holiday_id: str, day: Optional[date] = None, name: Optional[str] = None) -> Holiday:
        current = await self._require_holiday(holiday_id)
        new_date = current.date
        if day is not None:
            new_date = as_date(day)
            if new_date is None:
                raise ValidationError("Holiday date is invalid.")
        updated = replace(
            current,
            date=new_date,
            name=validate_holiday_name(name) if name is not None else current.name,
        )
        await self._store.update_holiday(updated)
        return updated

    async def remove_holiday(self, holiday_id: str) -> None:
        await self._require_holiday(holiday_id)
        await self._store.delete_holiday(holiday_id)
