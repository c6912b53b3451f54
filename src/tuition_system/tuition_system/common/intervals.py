"""Half-open interval helpers shared by the timetable and appointment schedulers.

[s1, e1) and [s2, e2) conflict iff s1 < e2 and s2 < e1, so a slot ending at
10:00 and one starting at 10:00 do not conflict. Works for "HH:MM" strings and
datetimes alike.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


def overlaps(start_a, end_a, start_b, end_b) -> bool:
    return start_a < end_b and start_b < end_a


def first_overlap(
    start,
    end,
    candidates: Iterable[T],
    *,
    bounds: Callable[[T], Tuple[object, object]],
) -> Optional[T]:
    """Return the first candidate whose interval overlaps [start, end)."""

    for candidate in candidates:
        c_start, c_end = bounds(candidate)
        if overlaps(start, end, c_start, c_end):
            return candidate
    return None


def first_overlapping_pair(
    items: Sequence[T],
    *,
    bounds: Callable[[T], Tuple[object, object]],
) -> Optional[Tuple[T, T]]:
    """Return the first (earlier, later) pair in submission order that overlaps."""

    for i, a in enumerate(items):
        a_start, a_end = bounds(a)
        for b in items[i + 1:]:
            b_start, b_end = bounds(b)
            if overlaps(a_start, a_end, b_start, b_end):
                return a, b
    return None
