from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Optional


class RejectionKind(StrEnum):
    INVALID_RANGE = "invalid_range"
    MISALIGNED = "misaligned"
    OUT_OF_HOURS = "out_of_hours"
    FIELD_TOO_LONG = "field_too_long"
    DAILY_QUOTA_EXCEEDED = "daily_quota_exceeded"
    WINDOW_FULL = "window_full"
    NOT_OWNER = "not_owner"
    NOT_FOUND = "not_found"
    NOT_APPROVED = "not_approved"
    FORBIDDEN = "forbidden"
    STORE_UNAVAILABLE = "store_unavailable"


@dataclass(frozen=True)
class Rejection:
    """
    A refused operation, returned as a value rather than raised.
    `window` is set only for WINDOW_FULL and names the first full window start.
    """

    kind: RejectionKind
    message: str
    window: Optional[datetime] = None


def window_full(window_start: datetime) -> Rejection:
    return Rejection(
        RejectionKind.WINDOW_FULL,
        f"window full: {window_start:%H:%M}",
        window=window_start,
    )


def store_unavailable() -> Rejection:
    return Rejection(RejectionKind.STORE_UNAVAILABLE, "reservation store unavailable")
