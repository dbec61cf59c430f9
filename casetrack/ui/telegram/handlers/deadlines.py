from __future__ import annotations

from datetime import date
from typing import Optional, Sequence, Tuple

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from casetrack.domain.common.errors import DomainError
from casetrack.domain.deadlines.engine import DeadlineEngine
from casetrack.domain.deadlines.models import (
    AlertLevel,
    DeadlineAlert,
    DeadlineSnapshot,
    PauseInterval,
    TaskStatus,
)
from casetrack.ui.telegram import texts

router = Router()

_ALERT_LABELS = {
    AlertLevel.OVERDUE: "OVERDUE",
    AlertLevel.DUE_SOON: "due soon",
    AlertLevel.UPCOMING: "upcoming",
}


def _split_args(command: CommandObject) -> list[str]:
    return (command.args or "").split()


def parse_apply_args(args: Sequence[str]) -> Tuple[str, str, Optional[date]]:
    """
    /apply <task_id> <action_type_id> [YYYY-MM-DD]
    Raises ValueError on missing ids or a malformed date.
    """
    if len(args) < 2:
        raise ValueError(texts.deadlines.USAGE_APPLY)
    ref = None
    if len(args) >= 3:
        try:
            ref = date.fromisoformat(args[2])
        except ValueError:
            raise ValueError(texts.deadlines.INVALID_DATE)
    return args[0], args[1], ref


def render_snapshot(snap: DeadlineSnapshot) -> str:
    lines = [f"Task {snap.task_id}", f"Elapsed business days: {snap.elapsed_days}"]
    lines.append(f"Due date: {snap.due_date.isoformat() if snap.due_date else '-'}")
    if snap.paused:
        lines.append(f"Paused: {snap.pause_description or '(no reason given)'}")
    else:
        lines.append("Clock running.")
    if snap.alert is not None:
        lines.append(f"Alert: {_ALERT_LABELS[snap.alert.level]} ({snap.alert.days_left} days left)")
    return "\n".join(lines)


def render_history(intervals: Sequence[PauseInterval]) -> str:
    if not intervals:
        return texts.deadlines.NO_HISTORY
    lines = ["Pause history (newest first):"]
    for i in intervals:
        end = i.end_at.isoformat(timespec="minutes") if i.end_at else "open"
        lines.append(f"- {i.start_at.isoformat(timespec='minutes')} -> {end}")
    return "\n".join(lines)


def render_alerts(alerts: Sequence[DeadlineAlert]) -> str:
    if not alerts:
        return texts.deadlines.NO_ALERTS
    lines = ["Deadlines:"]
    for a in alerts:
        lines.append(f"- [{_ALERT_LABELS[a.level]}] {a.title or a.task_id} due {a.due_date.isoformat()}")
    return "\n".join(lines)


@router.message(Command("task"))
async def task_cmd(message: Message, command: CommandObject, engine: DeadlineEngine):
    args = _split_args(command)
    if not args:
        await message.answer(texts.deadlines.USAGE_TASK)
        return
    try:
        snap = await engine.snapshot(args[0])
    except DomainError as e:
        await message.answer(str(e))
        return
    await message.answer(render_snapshot(snap))


@router.message(Command("pause"))
async def pause_cmd(message: Message, command: CommandObject, engine: DeadlineEngine):
    args = _split_args(command)
    if not args:
        await message.answer(texts.deadlines.USAGE_PAUSE)
        return
    reason = " ".join(args[1:]) or texts.deadlines.MANUAL_PAUSE_REASON
    try:
        await engine.pause(args[0], reason)
        snap = await engine.snapshot(args[0])
    except DomainError as e:
        await message.answer(str(e))
        return
    await message.answer(render_snapshot(snap))


@router.message(Command("resume"))
async def resume_cmd(message: Message, command: CommandObject, engine: DeadlineEngine):
    args = _split_args(command)
    if not args:
        await message.answer(texts.deadlines.USAGE_RESUME)
        return

    next_status = None
    if len(args) > 1:
        try:
            next_status = TaskStatus(args[1])
        except ValueError:
            await message.answer(texts.deadlines.INVALID_STATUS)
            return

    try:
        await engine.resume(args[0], next_status=next_status)
        snap = await engine.snapshot(args[0])
    except DomainError as e:
        await message.answer(str(e))
        return
    await message.answer(render_snapshot(snap))


@router.message(Command("apply"))
async def apply_cmd(message: Message, command: CommandObject, engine: DeadlineEngine):
    try:
        task_id, action_type_id, ref = parse_apply_args(_split_args(command))
    except ValueError as e:
        await message.answer(str(e))
        return
    try:
        await engine.apply_action_type(task_id, action_type_id, ref)
        snap = await engine.snapshot(task_id)
    except DomainError as e:
        await message.answer(str(e))
        return
    await message.answer(render_snapshot(snap))


@router.message(Command("history"))
async def history_cmd(message: Message, command: CommandObject, engine: DeadlineEngine):
    args = _split_args(command)
    if not args:
        await message.answer(texts.deadlines.USAGE_HISTORY)
        return
    try:
        intervals = await engine.history(args[0])
    except DomainError as e:
        await message.answer(str(e))
        return
    await message.answer(render_history(intervals))


@router.message(Command("alerts"))
async def alerts_cmd(message: Message, engine: DeadlineEngine):
    await message.answer(render_alerts(await engine.list_alerts()))
