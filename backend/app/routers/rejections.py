import logging
from typing import Any

from fastapi import HTTPException, status

from ..domain.errors import Rejection, RejectionKind
from ..utils.time import format_local

logger = logging.getLogger(__name__)

_STATUS_BY_KIND: dict[RejectionKind, int] = {
    RejectionKind.INVALID_RANGE: status.HTTP_400_BAD_REQUEST,
    RejectionKind.MISALIGNED: status.HTTP_400_BAD_REQUEST,
    RejectionKind.OUT_OF_HOURS: status.HTTP_400_BAD_REQUEST,
    RejectionKind.FIELD_TOO_LONG: status.HTTP_400_BAD_REQUEST,
    RejectionKind.DAILY_QUOTA_EXCEEDED: status.HTTP_400_BAD_REQUEST,
    RejectionKind.WINDOW_FULL: status.HTTP_409_CONFLICT,
    RejectionKind.NOT_OWNER: status.HTTP_403_FORBIDDEN,
    RejectionKind.NOT_APPROVED: status.HTTP_403_FORBIDDEN,
    RejectionKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    RejectionKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RejectionKind.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def rejection_to_http(rejection: Rejection) -> HTTPException:
    if rejection.kind == RejectionKind.STORE_UNAVAILABLE:
        logger.warning("reservation store unavailable")
    detail: dict[str, Any] = {"code": rejection.kind.value, "message": rejection.message}
    if rejection.window is not None:
        detail["window"] = format_local(rejection.window)
    return HTTPException(status_code=_STATUS_BY_KIND[rejection.kind], detail=detail)
