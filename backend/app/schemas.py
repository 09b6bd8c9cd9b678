from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_serializer, field_validator

from .domain.day_view import RosterEntry, WindowSummary
from .domain.windows import WINDOW_CAPACITY
from .models import Reservation
from .utils.time import format_local, format_utc, parse_local


class ReservationWrite(BaseModel):
    slot_start: datetime
    slot_end: datetime
    company: str = Field(min_length=1)
    round: str = Field(min_length=1)

    @field_validator("slot_start", "slot_end", mode="before")
    @classmethod
    def _parse_local(cls, value: Any) -> datetime:
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                raise ValueError("local time must not carry an offset")
            return value
        if isinstance(value, str):
            return parse_local(value)
        raise ValueError("expected local time as YYYY-MM-DDTHH:mm")


class ReservationCreate(ReservationWrite):
    pass


class ReservationUpdate(ReservationWrite):
    pass


class ReservationRead(BaseModel):
    reservation_id: int
    student_id: int
    slot_start: datetime
    slot_end: datetime
    company: str
    round: str
    created_at: datetime

    @field_serializer("slot_start", "slot_end")
    def _ser_local(self, dt: datetime) -> str:
        return format_local(dt)

    @field_serializer("created_at")
    def _ser_utc(self, dt: datetime) -> str:
        return format_utc(dt)

    @classmethod
    def from_db(cls, *, reservation: Reservation) -> "ReservationRead":
        return cls(
            reservation_id=reservation.id,
            student_id=reservation.student_id,
            slot_start=reservation.slot_start,
            slot_end=reservation.slot_end,
            company=reservation.company,
            round=reservation.round,
            created_at=reservation.created_at,
        )


class RosterEntryRead(BaseModel):
    reservation_id: int
    student_id: int
    company: str
    round: str
    duration_minutes: int

    @classmethod
    def from_domain(cls, entry: RosterEntry) -> "RosterEntryRead":
        return cls(
            reservation_id=entry.reservation_id,
            student_id=entry.student_id,
            company=entry.company,
            round=entry.round,
            duration_minutes=entry.duration_minutes,
        )


class WindowSummaryRead(BaseModel):
    slot_start: datetime
    slot_end: datetime
    occupancy: int
    capacity: int = WINDOW_CAPACITY
    remaining: int
    roster: list[RosterEntryRead]

    @field_serializer("slot_start", "slot_end")
    def _ser_local(self, dt: datetime) -> str:
        return format_local(dt)

    @classmethod
    def from_domain(cls, summary: WindowSummary) -> "WindowSummaryRead":
        return cls(
            slot_start=summary.window.start,
            slot_end=summary.window.end,
            occupancy=summary.occupancy,
            remaining=max(WINDOW_CAPACITY - summary.occupancy, 0),
            roster=[RosterEntryRead.from_domain(entry) for entry in summary.roster],
        )


class PurgeResult(BaseModel):
    student_id: int
    deleted: int
