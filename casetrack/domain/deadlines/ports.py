from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import AsyncContextManager, Optional, Sequence

from casetrack.domain.deadlines.models import (
    ActionTypeDefinition,
    Holiday,
    PauseInterval,
    Task,
)


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime: ...


class IdGenerator(ABC):
    @abstractmethod
    def new_id(self) -> str: ...


class DeadlineStore(ABC):
    """
    Persistence port for the deadline engine.

    Writes issued inside `async with store.atomic():` commit together or not
    at all. Outside of atomic() each write commits on its own.
    """

    @abstractmethod
    def atomic(self) -> AsyncContextManager[None]: ...

    # tasks
    @abstractmethod
    async def get_task(self, task_id: str) -> Optional[Task]: ...

    @abstractmethod
    async def save_task(self, task: Task) -> None: ...

    @abstractmethod
    async def delete_task(self, task_id: str) -> None: ...

    @abstractmethod
    async def list_active_tasks(self) -> Sequence[Task]: ...

    @abstractmethod
    async def list_open_tasks_with_due_date(self) -> Sequence[Task]: ...

    @abstractmethod
    async def update_cached_days(self, task_id: str, days: int) -> None: ...

    # pause intervals
    @abstractmethod
    async def get_open_interval(self, task_id: str) -> Optional[PauseInterval]: ...

    @abstractmethod
    async def insert_interval(self, interval: PauseInterval) -> None: ...

    @abstractmethod
    async def close_interval(self, interval_id: str, end_at: datetime) -> None: ...

    @abstractmethod
    async def list_intervals(self, task_id: str) -> Sequence[PauseInterval]: ...

    # holidays
    @abstractmethod
    async def list_holidays(self, min_year: Optional[int] = None) -> Sequence[Holiday]: ...

    @abstractmethod
    async def get_holiday(self, holiday_id: str) -> Optional[Holiday]: ...

    @abstractmethod
    async def add_holiday(self, holiday: Holiday) -> None: ...

    @abstractmethod
    async def update_holiday(self, holiday: Holiday) -> None: ...

    @abstractmethod
    async def delete_holiday(self, holiday_id: str) -> None: ...

    # action types
    @abstractmethod
    async def get_action_type(self, action_type_id: str) -> Optional[ActionTypeDefinition]: ...

    @abstractmethod
    async def list_action_types(self) -> Sequence[ActionTypeDefinition]: ...

    @abstractmethod
    async def save_action_type(self, definition: ActionTypeDefinition) -> None: ...

    @abstractmethod
    async def delete_action_type(self, action_type_id: str) -> None: ...
