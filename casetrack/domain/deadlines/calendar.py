from __future__ import annotations

from bisect import bisect_left, bisect_right
from datetime import date
from typing import Any, Iterable, List, Optional

from casetrack.domain.common.time import as_date
from casetrack.domain.deadlines.models import Holiday

DEFAULT_CUTOFF_YEAR = 2025


class HolidayCalendar:
    """
    Non-working dates used to discount elapsed days.

    Only holidays whose year is >= cutoff_year are counted. Pass
    cutoff_year=None to count every loaded date.
    """

    def __init__(self, dates: Iterable[Any] = (), cutoff_year: Optional[int] = DEFAULT_CUTOFF_YEAR) -> None:
        self._cutoff_year = cutoff_year
        self._dates: List[date] = []
        self.load(dates)

    @property
    def cutoff_year(self) -> Optional[int]:
        return self._cutoff_year

    def load(self, dates: Iterable[Any]) -> None:
        """Replace the working set. Malformed entries are dropped."""
        parsed = set()
        for raw in dates:
            d = as_date(raw.date if isinstance(raw, Holiday) else raw)
            if d is None:
                continue
            if self._cutoff_year is not None and d.year < self._cutoff_year:
                continue
            parsed.add(d)
        self._dates = sorted(parsed)

    def __len__(self) -> int:
        return len(self._dates)

    def is_holiday(self, value: Any) -> bool:
        d = as_date(value)
        if d is None:
            return False
        i = bisect_left(self._dates, d)
        return i < len(self._dates) and self._dates[i] == d

    def count_between(self, a: Any, b: Any) -> int:
        """Holidays inside the inclusive range spanning a and b, in either order."""
        if not self._dates:
            return 0
        da, db = as_date(a), as_date(b)
        if da is None or db is None:
            return 0
        lo, hi = min(da, db), max(da, db)
        return bisect_right(self._dates, hi) - bisect_left(self._dates, lo)
