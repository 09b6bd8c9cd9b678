from datetime import date, datetime, timezone
from typing import Iterable, Optional

import pytest
from app.domain.services import Requester
from app.domain.windows import day_bounds
from app.models import Reservation, UserRole, UserStatus


def _utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class FakeReservationRepo:
    """In-memory stand-in for the SQLAlchemy repository."""

    def __init__(self) -> None:
        self.rows: dict[int, Reservation] = {}
        self.locked: list[list[date]] = []
        self.calls: list[str] = []
        self._next_id = 1

    async def lock_days(self, days: Iterable[date]) -> None:
        self.calls.append("lock_days")
        self.locked.append(sorted(set(days)))

    async def find_by_overlap(self, start: datetime, end: datetime) -> list[Reservation]:
        self.calls.append("find_by_overlap")
        hits = [r for r in self.rows.values() if r.slot_start < end and r.slot_end > start]
        return sorted(hits, key=lambda r: (r.slot_start, r.id))

    async def count_by_student_and_day(
        self,
        student_id: int,
        day: date,
        exclude_reservation_id: int | None = None,
    ) -> int:
        self.calls.append("count_by_student_and_day")
        start, end = day_bounds(day)
        return sum(
            1
            for r in self.rows.values()
            if r.student_id == student_id and start <= r.slot_start < end and r.id != exclude_reservation_id
        )

    async def get_for_update(self, reservation_id: int) -> Optional[Reservation]:
        self.calls.append("get_for_update")
        return self.rows.get(reservation_id)

    async def create(
        self,
        *,
        student_id: int,
        slot_start: datetime,
        slot_end: datetime,
        company: str,
        round: str,
    ) -> Reservation:
        self.calls.append("create")
        now = _utc_now_naive()
        reservation = Reservation(
            id=self._next_id,
            student_id=student_id,
            slot_start=slot_start,
            slot_end=slot_end,
            company=company,
            round=round,
            created_at=now,
            updated_at=now,
        )
        self.rows[reservation.id] = reservation
        self._next_id += 1
        return reservation

    async def update(self, reservation: Reservation) -> Reservation:
        self.calls.append("update")
        reservation.updated_at = _utc_now_naive()
        return reservation

    async def delete(self, reservation: Reservation) -> None:
        del self.rows[reservation.id]

    async def delete_by_student(self, student_id: int) -> int:
        doomed = [rid for rid, r in self.rows.items() if r.student_id == student_id]
        for rid in doomed:
            del self.rows[rid]
        return len(doomed)

    async def list_by_student(self, student_id: int) -> list[Reservation]:
        return sorted(
            (r for r in self.rows.values() if r.student_id == student_id),
            key=lambda r: (r.slot_start, r.id),
        )

    async def list_by_day(self, day: date) -> list[Reservation]:
        start, end = day_bounds(day)
        return sorted(
            (r for r in self.rows.values() if start <= r.slot_start < end),
            key=lambda r: (r.slot_start, r.id),
        )


@pytest.fixture
def res_repo() -> FakeReservationRepo:
    return FakeReservationRepo()


def student(student_id: int, status: UserStatus = UserStatus.APPROVED) -> Requester:
    return Requester(id=student_id, role=UserRole.STUDENT, status=status)


@pytest.fixture
def make_student():
    return student


@pytest.fixture
def admin() -> Requester:
    return Requester(id=999, role=UserRole.ADMIN, status=UserStatus.APPROVED)
