from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from ..domain.day_view import WindowSummary, build_day_view
from ..domain.errors import Rejection, RejectionKind, store_unavailable
from ..domain.repositories import ReservationRepository
from ..domain.services import Requester
from ..domain.windows import day_bounds


async def list_day_view(
    res_repo: ReservationRepository,
    *,
    requester: Requester,
    day: date,
) -> list[WindowSummary] | Rejection:
    if not requester.is_admin and not requester.is_approved_student:
        return Rejection(RejectionKind.NOT_APPROVED, "account not approved")
    day_start, day_end = day_bounds(day)
    try:
        reservations = await res_repo.find_by_overlap(day_start, day_end)
    except SQLAlchemyError:
        return store_unavailable()
    return build_day_view(day, reservations)
