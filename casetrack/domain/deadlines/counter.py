from __future__ import annotations

from typing import Any, Optional

from casetrack.domain.common.time import as_date
from casetrack.domain.deadlines.calendar import HolidayCalendar


def elapsed_days(start: Any, end: Any, calendar: Optional[HolidayCalendar] = None) -> int:
    """
    Working days elapsed from start to end.

    Whole calendar days between the two dates (clamped at 0) minus the
    holidays the calendar counts in that range, never below 0. Timestamps are
    reduced to their calendar date first.
    """
    d_start = as_date(start)
    d_end = as_date(end)
    if d_start is None or d_end is None:
        return 0

    raw = (d_end - d_start).days
    if raw < 0:
        return 0

    excluded = calendar.count_between(d_start, d_end) if calendar is not None else 0
    return max(raw - excluded, 0)
