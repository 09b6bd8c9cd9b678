from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_current_user, get_session
from ..domain.errors import Rejection
from ..domain.services import Requester
from ..infrastructure.repositories import SqlAlchemyReservationRepository
from ..schemas import WindowSummaryRead
from ..usecases import slots as slot_usecase
from .rejections import rejection_to_http

router = APIRouter(prefix="", tags=["slots"], dependencies=[Depends(get_current_user)])


@router.get("/slots", response_model=List[WindowSummaryRead])
async def list_day_view(
    day: date = Query(..., alias="date", description="Local calendar day (YYYY-MM-DD)"),
    session: AsyncSession = Depends(get_session),
    requester: Requester = Depends(get_current_user),
) -> list[WindowSummaryRead]:
    res_repo = SqlAlchemyReservationRepository(session)
    summaries = await slot_usecase.list_day_view(res_repo, requester=requester, day=day)
    if isinstance(summaries, Rejection):
        raise rejection_to_http(summaries)
    return [WindowSummaryRead.from_domain(summary) for summary in summaries]
