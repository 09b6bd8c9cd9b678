from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_user, get_session
from ..domain.errors import Rejection, store_unavailable
from ..domain.services import Requester
from ..infrastructure.repositories import SqlAlchemyReservationRepository
from ..schemas import ReservationCreate, ReservationRead, ReservationUpdate
from ..usecases import reservations as reservation_usecase
from ..utils.audit_log import AuditInitiator, emit_audit_log
from .rejections import rejection_to_http

router = APIRouter(prefix="", tags=["reservations"])


def _initiator(requester: Requester) -> AuditInitiator:
    return "admin" if requester.is_admin else "student"


@router.post("/reservations", response_model=ReservationRead, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationCreate,
    session: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_current_user),
) -> ReservationRead:
    res_repo = SqlAlchemyReservationRepository(session)
    try:
        async with session.begin():
            result = await reservation_usecase.create_reservation(
                res_repo,
                requester=requester,
                slot_start=payload.slot_start,
                slot_end=payload.slot_end,
                company=payload.company,
                round=payload.round,
            )
            if isinstance(result, Rejection):
                raise rejection_to_http(result)
    except SQLAlchemyError as exc:
        raise rejection_to_http(store_unavailable()) from exc

    try:
        emit_audit_log(
            action="reservation.created",
            initiator="student",
            actor_id=requester.id,
            reservation_id=result.id,
            student_id=result.student_id,
            slot_start=result.slot_start,
            slot_end=result.slot_end,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
    return ReservationRead.from_db(reservation=result)


@router.put("/reservations/{reservation_id}", response_model=ReservationRead)
async def update_reservation(
    payload: ReservationUpdate,
    reservation_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_current_user),
) -> ReservationRead:
    res_repo = SqlAlchemyReservationRepository(session)
    try:
        async with session.begin():
            result = await reservation_usecase.update_reservation(
                res_repo,
                reservation_id=reservation_id,
                requester=requester,
                slot_start=payload.slot_start,
                slot_end=payload.slot_end,
                company=payload.company,
                round=payload.round,
            )
            if isinstance(result, Rejection):
                raise rejection_to_http(result)
    except SQLAlchemyError as exc:
        raise rejection_to_http(store_unavailable()) from exc

    try:
        emit_audit_log(
            action="reservation.updated",
            initiator="student",
            actor_id=requester.id,
            reservation_id=result.id,
            student_id=result.student_id,
            slot_start=result.slot_start,
            slot_end=result.slot_end,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
    return ReservationRead.from_db(reservation=result)


@router.delete("/reservations/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_current_user),
) -> Response:
    res_repo = SqlAlchemyReservationRepository(session)
    try:
        async with session.begin():
            result = await reservation_usecase.delete_reservation(
                res_repo,
                reservation_id=reservation_id,
                requester=requester,
            )
            if isinstance(result, Rejection):
                raise rejection_to_http(result)
    except SQLAlchemyError as exc:
        raise rejection_to_http(store_unavailable()) from exc

    try:
        emit_audit_log(
            action="reservation.deleted",
            initiator=_initiator(requester),
            actor_id=requester.id,
            reservation_id=result.id,
            student_id=result.student_id,
            slot_start=result.slot_start,
            slot_end=result.slot_end,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me/reservations", response_model=List[ReservationRead])
async def list_my_reservations(
    session: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_current_user),
) -> list[ReservationRead]:
    res_repo = SqlAlchemyReservationRepository(session)
    rows = await reservation_usecase.list_student_reservations(res_repo, requester=requester)
    if isinstance(rows, Rejection):
        raise rejection_to_http(rows)
    return [ReservationRead.from_db(reservation=res) for res in rows]
