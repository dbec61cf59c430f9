from __future__ import annotations

from datetime import datetime, timezone
from typing import AsyncContextManager, Optional, Sequence

from casetrack.domain.common.time import as_date, date_to_iso, from_iso, to_iso
from casetrack.domain.deadlines.models import (
    ActionTypeDefinition,
    Holiday,
    PauseInterval,
    Task,
    TaskKind,
    TaskStatus,
)
from casetrack.domain.deadlines.ports import DeadlineStore
from casetrack.infra.db.connection import Database

# pause_active is read from the ledger, never from a column
_TASK_SELECT = """
    SELECT t.*,
           EXISTS(
             SELECT 1 FROM pause_intervals p
             WHERE p.task_id = t.task_id AND p.end_at IS NULL
           ) AS pause_active
    FROM tasks t
"""


class DeadlinesSqliteRepo(DeadlineStore):
    def __init__(self, db: Database) -> None:
        self._db = db

    def atomic(self) -> AsyncContextManager[None]:
        return self._db.transaction()

    def _now_iso(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    # ----- tasks -----

    async def get_task(self, task_id: str) -> Optional[Task]:
        row = await self._db.fetchone(_TASK_SELECT + " WHERE t.task_id = ?;", (task_id,))
        return self._row_to_task(row) if row else None

    async def save_task(self, task: Task) -> None:
        await self._db.execute(
            """
            INSERT INTO tasks(
              task_id, kind, title, start_date, due_date, status,
              stored_days, pause_description, action_type_id, cached_days, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(task_id) DO UPDATE SET
              kind = excluded.kind,
              title = excluded.title,
              start_date = excluded.start_date,
              due_date = excluded.due_date,
              status = excluded.status,
              stored_days = excluded.stored_days,
              pause_description = excluded.pause_description,
              action_type_id = excluded.action_type_id,
              cached_days = excluded.cached_days,
              updated_at = excluded.updated_at;
            """,
            (
                task.task_id,
                task.kind.value,
                task.title,
                date_to_iso(task.start_date),
                date_to_iso(task.due_date),
                task.status.value,
                task.stored_days,
                task.pause_description,
                task.action_type_id,
                task.cached_days,
                self._now_iso(),
            ),
        )

    async def delete_task(self, task_id: str) -> None:
        # pause_intervals go with it (ON DELETE CASCADE)
        await self._db.execute("DELETE FROM tasks WHERE task_id = ?;", (task_id,))

    async def list_active_tasks(self) -> Sequence[Task]:
        rows = await self._db.fetchall(
            _TASK_SELECT
            + """
            WHERE NOT EXISTS(
              SELECT 1 FROM pause_intervals p
              WHERE p.task_id = t.task_id AND p.end_at IS NULL
            )
            ORDER BY t.task_id;
            """
        )
        return [self._row_to_task(r) for r in rows]

    async def list_open_tasks_with_due_date(self) -> Sequence[Task]:
        rows = await self._db.fetchall(
            _TASK_SELECT
            + """
            WHERE t.due_date IS NOT NULL AND t.status != ?
            ORDER BY t.due_date ASC, t.task_id;
            """,
            (TaskStatus.COMPLETED.value,),
        )
        return [self._row_to_task(r) for r in rows]

    async def update_cached_days(self, task_id: str, days: int) -> None:
        await self._db.execute(
            "UPDATE tasks SET cached_days = ?, updated_at = ? WHERE task_id = ?;",
            (days, self._now_iso(), task_id),
        )

    # ----- pause intervals -----

    async def get_open_interval(self, task_id: str) -> Optional[PauseInterval]:
        row = await self._db.fetchone(
            """
            SELECT *
            FROM pause_intervals
            WHERE task_id = ? AND end_at IS NULL
            ORDER BY start_at DESC
            LIMIT 1;
            """,
            (task_id,),
        )
        return self._row_to_interval(row) if row else None

    async def insert_interval(self, interval: PauseInterval) -> None:
        await self._db.execute(
            "INSERT INTO pause_intervals(interval_id, task_id, start_at, end_at) VALUES (?, ?, ?, ?);",
            (
                interval.interval_id,
                interval.task_id,
                to_iso(interval.start_at),
                to_iso(interval.end_at) if interval.end_at else None,
            ),
        )

    async def close_interval(self, interval_id: str, end_at: datetime) -> None:
        await self._db.execute(
            "UPDATE pause_intervals SET end_at = ? WHERE interval_id = ? AND end_at IS NULL;",
            (to_iso(end_at), interval_id),
        )

    async def list_intervals(self, task_id: str) -> Sequence[PauseInterval]:
        rows = await self._db.fetchall(
            """
            SELECT *
            FROM pause_intervals
            WHERE task_id = ?
            ORDER BY start_at DESC, end_at IS NULL DESC;
            """,
            (task_id,),
        )
        return [self._row_to_interval(r) for r in rows]

    # ----- holidays -----

    async def list_holidays(self, min_year: Optional[int] = None) -> Sequence[Holiday]:
        if min_year is None:
            rows = await self._db.fetchall("SELECT * FROM holidays ORDER BY date ASC;")
        else:
            rows = await self._db.fetchall(
                "SELECT * FROM holidays WHERE date >= ? ORDER BY date ASC;",
                (f"{min_year:04d}-01-01",),
            )
        holidays = (self._row_to_holiday(r) for r in rows)
        return [h for h in holidays if h is not None]

    async def get_holiday(self, holiday_id: str) -> Optional[Holiday]:
        row = await self._db.fetchone("SELECT * FROM holidays WHERE holiday_id = ?;", (holiday_id,))
        return self._row_to_holiday(row) if row else None

    async def add_holiday(self, holiday: Holiday) -> None:
        await self._db.execute(
            "INSERT INTO holidays(holiday_id, date, name, source) VALUES (?, ?, ?, ?);",
            (holiday.holiday_id, holiday.date.isoformat(), holiday.name, holiday.source),
        )

    async def update_holiday(self, holiday: Holiday) -> None:
        await self._db.execute(
            "UPDATE holidays SET date = ?, name = ?, source = ? WHERE holiday_id = ?;",
            (holiday.date.isoformat(), holiday.name, holiday.source, holiday.holiday_id),
        )

    async def delete_holiday(self, holiday_id: str) -> None:
        await self._db.execute("DELETE FROM holidays WHERE holiday_id = ?;", (holiday_id,))

    # ----- action types -----

    async def get_action_type(self, action_type_id: str) -> Optional[ActionTypeDefinition]:
        row = await self._db.fetchone("SELECT * FROM action_types WHERE action_type_id = ?;", (action_type_id,))
        return self._row_to_action_type(row) if row else None

    async def list_action_types(self) -> Sequence[ActionTypeDefinition]:
        rows = await self._db.fetchall("SELECT * FROM action_types ORDER BY name COLLATE NOCASE;")
        return [self._row_to_action_type(r) for r in rows]

    async def save_action_type(self, definition: ActionTypeDefinition) -> None:
        await self._db.execute(
            """
            INSERT INTO action_types(action_type_id, name, duration_days, affects_delay)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(action_type_id) DO UPDATE SET
              name = excluded.name,
              duration_days = excluded.duration_days,
              affects_delay = excluded.affects_delay;
            """,
            (
                definition.action_type_id,
                definition.name,
                definition.duration_days,
                1 if definition.affects_delay else 0,
            ),
        )

    async def delete_action_type(self, action_type_id: str) -> None:
        await self._db.execute("DELETE FROM action_types WHERE action_type_id = ?;", (action_type_id,))

    # ----- rows -----

    def _row_to_task(self, row) -> Task:
        return Task(
            task_id=row["task_id"],
            kind=TaskKind(row["kind"]),
            title=row["title"] or "",
            start_date=as_date(row["start_date"]),
            due_date=as_date(row["due_date"]),
            status=TaskStatus(row["status"]),
            stored_days=row["stored_days"],
            pause_description=row["pause_description"],
            action_type_id=row["action_type_id"],
            cached_days=row["cached_days"],
            pause_active=bool(row["pause_active"]),
        )

    def _row_to_interval(self, row) -> PauseInterval:
        return PauseInterval(
            interval_id=row["interval_id"],
            task_id=row["task_id"],
            start_at=from_iso(row["start_at"]),
            end_at=from_iso(row["end_at"]) if row["end_at"] else None,
        )

    def _row_to_action_type(self, row) -> ActionTypeDefinition:
        return ActionTypeDefinition(
            action_type_id=row["action_type_id"],
            name=row["name"],
            duration_days=int(row["duration_days"]),
            affects_delay=bool(row["affects_delay"]),
        )

    def _row_to_holiday(self, row) -> Optional[Holiday]:
        # rows with an unreadable date never match
        d = as_date(row["date"])
        if d is None:
            return None
        return Holiday(holiday_id=row["holiday_id"], date=d, name=row["name"], source=row["source"])
