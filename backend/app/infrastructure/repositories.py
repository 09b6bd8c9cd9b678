from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.repositories import ReservationRepository, UserRepository
from ..domain.windows import day_bounds
from ..models import BookingDay, Reservation, User


def _utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, user_id: int) -> User | None:
        result = await self.session.scalar(select(User).where(User.id == user_id))
        return result if isinstance(result, User) else None


class SqlAlchemyReservationRepository(ReservationRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def lock_days(self, days: Iterable[date]) -> None:
        # Ascending order so two writers spanning the same days cannot deadlock.
        for day in sorted(set(days)):
            stmt = select(BookingDay).where(BookingDay.day == day).with_for_update()
            if await self.session.scalar(stmt) is not None:
                continue
            try:
                async with self.session.begin_nested():
                    self.session.add(BookingDay(day=day, created_at=_utc_now_naive()))
            except IntegrityError:
                pass  # created by a concurrent writer; lock it below
            await self.session.scalar(stmt)

    async def find_by_overlap(self, start: datetime, end: datetime) -> List[Reservation]:
        stmt = (
            select(Reservation)
            .where(Reservation.slot_start < end, Reservation.slot_end > start)
            .order_by(Reservation.slot_start, Reservation.id)
        )
        return list((await self.session.scalars(stmt)).all())

    async def count_by_student_and_day(
        self,
        student_id: int,
        day: date,
        exclude_reservation_id: int | None = None,
    ) -> int:
        day_start, day_end = day_bounds(day)
        stmt = select(func.count(Reservation.id)).where(
            Reservation.student_id == student_id,
            Reservation.slot_start >= day_start,
            Reservation.slot_start < day_end,
        )
        if exclude_reservation_id is not None:
            stmt = stmt.where(Reservation.id != exclude_reservation_id)
        return int(await self.session.scalar(stmt) or 0)

    async def get_for_update(self, reservation_id: int) -> Optional[Reservation]:
        result = await self.session.scalar(
            select(Reservation).where(Reservation.id == reservation_id).with_for_update()
        )
        return result if isinstance(result, Reservation) else None

    async def create(
        self,
        *,
        student_id: int,
        slot_start: datetime,
        slot_end: datetime,
        company: str,
        round: str,
    ) -> Reservation:
        now = _utc_now_naive()
        reservation = Reservation(
            student_id=student_id,
            slot_start=slot_start,
            slot_end=slot_end,
            company=company,
            round=round,
            created_at=now,
            updated_at=now,
        )
        self.session.add(reservation)
        await self.session.flush()
        return reservation

    async def update(self, reservation: Reservation) -> Reservation:
        reservation.updated_at = _utc_now_naive()
        self.session.add(reservation)
        await self.session.flush()
        return reservation

    async def delete(self, reservation: Reservation) -> None:
        await self.session.delete(reservation)
        await self.session.flush()

    async def delete_by_student(self, student_id: int) -> int:
        result = await self.session.execute(delete(Reservation).where(Reservation.student_id == student_id))
        return int(result.rowcount or 0)

    async def list_by_student(self, student_id: int) -> List[Reservation]:
        stmt = (
            select(Reservation)
            .where(Reservation.student_id == student_id)
            .order_by(Reservation.slot_start, Reservation.id)
        )
        return list((await self.session.scalars(stmt)).all())

    async def list_by_day(self, day: date) -> List[Reservation]:
        day_start, day_end = day_bounds(day)
        stmt = (
            select(Reservation)
            .where(Reservation.slot_start >= day_start, Reservation.slot_start < day_end)
            .order_by(Reservation.slot_start, Reservation.id)
        )
        return list((await self.session.scalars(stmt)).all())
