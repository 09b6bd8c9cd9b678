from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Protocol

from ..models import Reservation, User


class UserRepository(Protocol):
    async def get(self, user_id: int) -> User | None: ...


class ReservationRepository(Protocol):
    async def lock_days(self, days: Iterable[date]) -> None: ...

    async def find_by_overlap(self, start: datetime, end: datetime) -> list[Reservation]: ...

    async def count_by_student_and_day(
        self,
        student_id: int,
        day: date,
        exclude_reservation_id: int | None = None,
    ) -> int: ...

    async def get_for_update(self, reservation_id: int) -> Reservation | None: ...

    async def create(
        self,
        *,
        student_id: int,
        slot_start: datetime,
        slot_end: datetime,
        company: str,
        round: str,
    ) -> Reservation: ...

    async def update(self, reservation: Reservation) -> Reservation: ...

    async def delete(self, reservation: Reservation) -> None: ...

    async def delete_by_student(self, student_id: int) -> int: ...

    async def list_by_student(self, student_id: int) -> list[Reservation]: ...

    async def list_by_day(self, day: date) -> list[Reservation]: ...
