from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..models import Reservation
from .availability import occupancy_for
from .errors import Rejection, window_full
from .windows import WINDOW_CAPACITY, Window, windows_covering


@dataclass(frozen=True)
class Admitted:
    windows: tuple[Window, ...]


def try_reserve(
    slot_start: datetime,
    slot_end: datetime,
    existing: Sequence[Reservation],
    *,
    exclude_reservation_id: Optional[int] = None,
) -> Admitted | Rejection:
    """
    Decide whether [slot_start, slot_end) fits in every window it covers.
    Windows are checked in chronological order and the first full one is reported.
    Persisting the reservation is left to the caller, under the same day lock.
    """
    windows = windows_covering(slot_start, slot_end)
    for window in windows:
        if occupancy_for(window, existing, exclude_reservation_id) >= WINDOW_CAPACITY:
            return window_full(window.start)
    return Admitted(windows=tuple(windows))
