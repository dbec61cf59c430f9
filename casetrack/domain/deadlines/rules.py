from __future__ import annotations

from casetrack.domain.common.errors import ValidationError


def validate_action_type_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Action type name is required.")
    if len(cleaned) > 200:
        raise ValidationError("Action type name is too long (max 200 chars).")
    return cleaned


def validate_duration_days(duration_days: int) -> int:
    if isinstance(duration_days, bool) or not isinstance(duration_days, int):
        raise ValidationError("Duration must be a whole number of days.")
    if duration_days < 0:
        raise ValidationError("Duration cannot be negative.")
    return duration_days


def validate_holiday_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Holiday name is required.")
    return cleaned


def validate_pause_reason(reason: str) -> str:
    # Not enforced by DeadlineEngine.pause(); callers opt in.
    cleaned = (reason or "").strip()
    if not cleaned:
        raise ValidationError("Pause reason is required.")
    if len(cleaned) > 2000:
        raise ValidationError("Pause reason is too long (max 2000 chars).")
    return cleaned
