from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional


def ensure_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return dt


def to_iso(dt: datetime) -> str:
    ensure_aware(dt)
    # store as ISO 8601 with offset
    return dt.isoformat()


def from_iso(s: str) -> datetime:
    return datetime.fromisoformat(s)


def as_date(value: Any) -> Optional[date]:
    """
    Reduce a date-like value to a calendar date.

    Accepts date, datetime and ISO strings ("2025-01-05" or a full timestamp).
    Anything else, or an unparseable string, gives None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            return date.fromisoformat(raw[:10])
        except ValueError:
            return None
    return None


def date_to_iso(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d else None
