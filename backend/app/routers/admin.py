from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_user, get_session
from ..domain.errors import Rejection, store_unavailable
from ..domain.services import Requester
from ..infrastructure.repositories import SqlAlchemyReservationRepository
from ..schemas import PurgeResult, ReservationRead
from ..usecases import reservations as reservation_usecase
from ..utils.audit_log import emit_audit_log
from .rejections import rejection_to_http

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/reservations", response_model=List[ReservationRead])
async def list_reservations_for_day(
    day: date = Query(..., alias="date", description="Local calendar day (YYYY-MM-DD)"),
    session: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_current_user),
) -> list[ReservationRead]:
    res_repo = SqlAlchemyReservationRepository(session)
    rows = await reservation_usecase.list_reservations_for_day(res_repo, requester=requester, day=day)
    if isinstance(rows, Rejection):
        raise rejection_to_http(rows)
    return [ReservationRead.from_db(reservation=res) for res in rows]


@router.delete("/students/{student_id}/reservations", response_model=PurgeResult)
async def delete_student_reservations(
    student_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_current_user),
) -> PurgeResult:
    res_repo = SqlAlchemyReservationRepository(session)
    try:
        async with session.begin():
            deleted = await reservation_usecase.delete_student_reservations(
                res_repo,
                requester=requester,
                student_id=student_id,
            )
            if isinstance(deleted, Rejection):
                raise rejection_to_http(deleted)
    except SQLAlchemyError as exc:
        raise rejection_to_http(store_unavailable()) from exc

    try:
        emit_audit_log(
            action="reservation.purged",
            initiator="admin",
            actor_id=requester.id,
            reservation_id=None,
            student_id=student_id,
            extra={"deleted": deleted},
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
    return PurgeResult(student_id=student_id, deleted=deleted)
