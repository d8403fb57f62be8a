"""Lazy daily counter rollover, computed on read instead of by a scheduled job."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from app.utils.dates import as_utc, start_of_local_day


@dataclass(frozen=True)
class DailyCounter:
    count: int
    reset_at: Optional[datetime]
    rolled_over: bool = False


def rollover(
    count: int, reset_at: Optional[datetime], now: datetime
) -> DailyCounter:
    """
    Reset the counter when its boundary predates the start of ``now``'s local day.

    Returns the counter unchanged otherwise, so applying it twice on the same
    day only resets once.
    """
    day_start = start_of_local_day(now)
    if reset_at is None or as_utc(reset_at) < day_start:
        return DailyCounter(count=0, reset_at=day_start, rolled_over=True)
    return DailyCounter(count=count, reset_at=reset_at, rolled_over=False)
