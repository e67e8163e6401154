"""
Purpose: Time-of-day value type for scheduled leg times.
What it does:
- Parses the schedule's "HH:MM" strings (and the "18:00 (+2)" day-offset form)
- Orders times by minutes from midnight
- Computes day-wrap-safe gaps between two clock times

Rule: No schedule logic here, only clock arithmetic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
import re

MINUTES_PER_DAY = 1440

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
_OFFSET_PATTERN = re.compile(r"\(\+(\d+)\)")


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """
    A clock time within a nominal day.

    Only `minutes` takes part in comparisons. `day_offset` is the "(+N)" marker
    some schedules append to arrival times; it is kept for display and shift
    bucketing but the arithmetic below wraps at most once.
    """

    minutes: int
    day_offset: int = field(default=0, compare=False)

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional[TimeOfDay]:
        """Returns None for blank or malformed input instead of raising."""
        if value is None:
            return None
        text = str(value).strip()
        if not text:
            return None

        clock_part = text.split(" ")[0]
        match = _TIME_PATTERN.match(clock_part)
        if not match:
            return None

        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            return None

        offset_match = _OFFSET_PATTERN.search(text)
        day_offset = int(offset_match.group(1)) if offset_match else 0
        return cls(minutes=hours * 60 + minutes, day_offset=day_offset)

    @property
    def hour(self) -> int:
        return self.minutes // 60

    def minutes_until(self, later: TimeOfDay) -> int:
        """
        Minutes from this time to `later`.
        If `later` is earlier on the clock it is taken to be after midnight.
        """
        gap = later.minutes - self.minutes
        if gap < 0:
            gap += MINUTES_PER_DAY
        return gap

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minutes % 60:02d}"


def wrap_gap_minutes(start: Optional[TimeOfDay], end: Optional[TimeOfDay]) -> Optional[int]:
    # None when either side is missing
    if start is None or end is None:
        return None
    return start.minutes_until(end)
