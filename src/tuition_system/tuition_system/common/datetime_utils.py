from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator


def now_local() -> datetime:
    """Current local time. Services take `now` as a parameter; controllers pass this."""
    return datetime.now()


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end, both inclusive."""
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")
