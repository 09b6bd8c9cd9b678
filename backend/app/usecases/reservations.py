from datetime import date, datetime

from sqlalchemy.exc import SQLAlchemyError

from ..domain.conflicts import try_reserve
from ..domain.errors import Rejection, RejectionKind, store_unavailable
from ..domain.repositories import ReservationRepository
from ..domain.services import ReservationCandidate, Requester, validate_reservation
from ..models import Reservation


async def create_reservation(
    res_repo: ReservationRepository,
    *,
    requester: Requester,
    slot_start: datetime,
    slot_end: datetime,
    company: str,
    round: str,
) -> Reservation | Rejection:
    if not requester.is_approved_student:
        return Rejection(RejectionKind.NOT_APPROVED, "only approved students may book")

    candidate = ReservationCandidate(
        student_id=requester.id,
        slot_start=slot_start,
        slot_end=slot_end,
        company=company,
        round=round,
    )
    try:
        await res_repo.lock_days([slot_start.date()])
        rejection = await _check_admission(res_repo, candidate, exclude_reservation_id=None)
        if rejection is not None:
            return rejection
        return await res_repo.create(
            student_id=candidate.student_id,
            slot_start=candidate.slot_start,
            slot_end=candidate.slot_end,
            company=candidate.company,
            round=candidate.round,
        )
    except SQLAlchemyError:
        return store_unavailable()


async def update_reservation(
    res_repo: ReservationRepository,
    *,
    reservation_id: int,
    requester: Requester,
    slot_start: datetime,
    slot_end: datetime,
    company: str,
    round: str,
) -> Reservation | Rejection:
    try:
        reservation = await res_repo.get_for_update(reservation_id)
        if reservation is None:
            return Rejection(RejectionKind.NOT_FOUND, "reservation not found")
        if reservation.student_id != requester.id:
            return Rejection(RejectionKind.NOT_OWNER, "not your reservation")

        # Moving to another day must hold both days, so lock the old and the new one.
        await res_repo.lock_days([reservation.slot_start.date(), slot_start.date()])
        candidate = ReservationCandidate(
            student_id=reservation.student_id,
            slot_start=slot_start,
            slot_end=slot_end,
            company=company,
            round=round,
        )
        rejection = await _check_admission(res_repo, candidate, exclude_reservation_id=reservation.id)
        if rejection is not None:
            return rejection

        reservation.slot_start = candidate.slot_start
        reservation.slot_end = candidate.slot_end
        reservation.company = candidate.company
        reservation.round = candidate.round
        return await res_repo.update(reservation)
    except SQLAlchemyError:
        return store_unavailable()


async def delete_reservation(
    res_repo: ReservationRepository,
    *,
    reservation_id: int,
    requester: Requester,
) -> Reservation | Rejection:
    """Delete a reservation owned by the requester, or any reservation for an admin.
    Returns the removed reservation."""
    try:
        reservation = await res_repo.get_for_update(reservation_id)
        if reservation is None:
            return Rejection(RejectionKind.NOT_FOUND, "reservation not found")
        if not requester.is_admin and reservation.student_id != requester.id:
            return Rejection(RejectionKind.NOT_OWNER, "not your reservation")
        await res_repo.delete(reservation)
        return reservation
    except SQLAlchemyError:
        return store_unavailable()


async def list_student_reservations(
    res_repo: ReservationRepository,
    *,
    requester: Requester,
) -> list[Reservation] | Rejection:
    try:
        return await res_repo.list_by_student(requester.id)
    except SQLAlchemyError:
        return store_unavailable()


async def list_reservations_for_day(
    res_repo: ReservationRepository,
    *,
    requester: Requester,
    day: date,
) -> list[Reservation] | Rejection:
    if not requester.is_admin:
        return Rejection(RejectionKind.FORBIDDEN, "admin only")
    try:
        return await res_repo.list_by_day(day)
    except SQLAlchemyError:
        return store_unavailable()


async def delete_student_reservations(
    res_repo: ReservationRepository,
    *,
    requester: Requester,
    student_id: int,
) -> int | Rejection:
    if not requester.is_admin:
        return Rejection(RejectionKind.FORBIDDEN, "admin only")
    try:
        return await res_repo.delete_by_student(student_id)
    except SQLAlchemyError:
        return store_unavailable()


async def _check_admission(
    res_repo: ReservationRepository,
    candidate: ReservationCandidate,
    *,
    exclude_reservation_id: int | None,
) -> Rejection | None:
    """Quota and structural rules first, then window capacity. Caller holds the day lock."""
    same_day_count = await res_repo.count_by_student_and_day(
        candidate.student_id,
        candidate.slot_start.date(),
        exclude_reservation_id=exclude_reservation_id,
    )
    rejection = validate_reservation(candidate, same_day_count=same_day_count)
    if rejection is not None:
        return rejection

    existing = await res_repo.find_by_overlap(candidate.slot_start, candidate.slot_end)
    result = try_reserve(
        candidate.slot_start,
        candidate.slot_end,
        existing,
        exclude_reservation_id=exclude_reservation_id,
    )
    return result if isinstance(result, Rejection) else None
