from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


class TaskKind(str, Enum):
    MATTER = "matter"
    SUBJECT = "subject"
    ACTION = "action"


class TaskStatus(str, Enum):
    PENDING_TO_ASSIGNMENT = "pending_to_assignment"
    PENDING_ASSIGNMENT = "pending_assignment"
    PENDING_CONFIRMATION = "pending_confirmation"
    RECENT = "recent"
    COMPLETED = "completed"
    PAUSED = "paused"
    NOTIFICATION_OR_DERIVATION = "notification_or_derivation"


class AlertLevel(str, Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    UPCOMING = "upcoming"


AUTO_PAUSE_PREFIX = "auto-pause: "


@dataclass(frozen=True)
class Task:
    """
    A deadline-bearing record: a case matter, a filing or an assigned action.

    pause_active mirrors the pause ledger. Stores fill it on read and never
    persist it; use DeadlineEngine.is_paused() for the authoritative answer.
    """
    task_id: str
    kind: TaskKind
    title: str
    start_date: Optional[date]
    due_date: Optional[date]
    status: TaskStatus
    stored_days: Optional[int] = None
    pause_description: Optional[str] = None
    action_type_id: Optional[str] = None
    cached_days: Optional[int] = None
    pause_active: bool = False


@dataclass(frozen=True)
class PauseInterval:
    interval_id: str
    task_id: str
    start_at: datetime
    end_at: Optional[datetime]

    @property
    def is_open(self) -> bool:
        return self.end_at is None


@dataclass(frozen=True)
class Holiday:
    holiday_id: str
    date: date
    name: str
    source: str = "manual"


@dataclass(frozen=True)
class ActionTypeDefinition:
    action_type_id: str
    name: str
    duration_days: int
    affects_delay: bool


@dataclass(frozen=True)
class DeadlineAlert:
    task_id: str
    title: str
    level: AlertLevel
    due_date: date
    days_left: int


@dataclass(frozen=True)
class DeadlineSnapshot:
    task_id: str
    elapsed_days: int
    due_date: Optional[date]
    paused: bool
    pause_description: Optional[str]
    alert: Optional[DeadlineAlert]
