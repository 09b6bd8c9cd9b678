from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

from ..models import Reservation
from .availability import reservations_in
from .windows import Window, day_windows


@dataclass(frozen=True)
class RosterEntry:
    reservation_id: int
    student_id: int
    company: str
    round: str
    duration_minutes: int


@dataclass(frozen=True)
class WindowSummary:
    window: Window
    occupancy: int
    roster: list[RosterEntry] = field(default_factory=list)


def build_day_view(day: date, reservations: Sequence[Reservation]) -> list[WindowSummary]:
    """All working windows of `day` in ascending order with their occupancy and roster."""
    ordered = sorted(reservations, key=lambda r: (r.slot_start, r.id))
    summaries: list[WindowSummary] = []
    for window in day_windows(day):
        roster = [
            RosterEntry(
                reservation_id=res.id,
                student_id=res.student_id,
                company=res.company,
                round=res.round,
                duration_minutes=int((res.slot_end - res.slot_start).total_seconds() // 60),
            )
            for res in reservations_in(window, ordered)
        ]
        summaries.append(WindowSummary(window=window, occupancy=len(roster), roster=roster))
    return summaries
