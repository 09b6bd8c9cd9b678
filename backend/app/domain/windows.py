from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

WINDOW = timedelta(minutes=30)
WORKDAY_START = time(9, 0)
WORKDAY_END = time(21, 0)
WINDOW_CAPACITY = 6
DAILY_QUOTA = 5


@dataclass(frozen=True, order=True)
class Window:
    start: datetime
    end: datetime


def is_aligned(t: datetime) -> bool:
    return t.minute in (0, 30)


def on_boundary(t: datetime) -> bool:
    """True when `t` sits exactly on a window edge (aligned minute, no seconds)."""
    return is_aligned(t) and t.second == 0 and t.microsecond == 0


def in_working_hours(t: datetime) -> bool:
    return WORKDAY_START <= t.time() < WORKDAY_END


def overlaps(start: datetime, end: datetime, window: Window) -> bool:
    # Half-open: a reservation ending at 10:00 does not touch the 10:00 window.
    return start < window.end and end > window.start


def windows_covering(start: datetime, end: datetime) -> list[Window]:
    """
    Return the ordered windows that partition [start, end).
    Raises ValueError when the range is not a positive whole number of windows.
    """
    if end <= start:
        raise ValueError("end must be after start")
    if not on_boundary(start) or not on_boundary(end):
        raise ValueError("start and end must sit on 30-minute boundaries")
    if (end - start) % WINDOW:
        raise ValueError("duration must be a multiple of 30 minutes")

    windows: list[Window] = []
    cur = start
    while cur < end:
        nxt = cur + WINDOW
        windows.append(Window(start=cur, end=nxt))
        cur = nxt
    return windows


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open [midnight, next midnight) for `day`.
    The last representable day has no next midnight, so it ends at `datetime.max`."""
    start = datetime.combine(day, time.min)
    if day == date.max:
        return start, datetime.max
    return start, start + timedelta(days=1)


def day_windows(day: date) -> list[Window]:
    return windows_covering(datetime.combine(day, WORKDAY_START), datetime.combine(day, WORKDAY_END))
