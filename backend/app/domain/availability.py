from __future__ import annotations

from typing import Iterable, Optional

from ..models import Reservation
from .windows import Window, overlaps


def occupancy_for(
    window: Window,
    reservations: Iterable[Reservation],
    exclude_reservation_id: Optional[int] = None,
) -> int:
    """
    Count reservations overlapping `window`.
    `reservations` must be a fresh read of the store taken in the writing transaction.
    """
    return sum(
        1
        for res in reservations
        if res.id != exclude_reservation_id and overlaps(res.slot_start, res.slot_end, window)
    )


def reservations_in(window: Window, reservations: Iterable[Reservation]) -> list[Reservation]:
    return [res for res in reservations if overlaps(res.slot_start, res.slot_end, window)]
