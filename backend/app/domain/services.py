from dataclasses import dataclass
from datetime import datetime, timedelta

from ..models import UserRole, UserStatus
from .errors import Rejection, RejectionKind
from .windows import DAILY_QUOTA, in_working_hours, on_boundary

MAX_FIELD_LENGTH = 25


@dataclass(frozen=True)
class Requester:
    """Identity of the caller, passed explicitly into every operation."""

    id: int
    role: UserRole
    status: UserStatus

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_approved_student(self) -> bool:
        return self.role == UserRole.STUDENT and self.status == UserStatus.APPROVED


@dataclass(frozen=True)
class ReservationCandidate:
    student_id: int
    slot_start: datetime
    slot_end: datetime
    company: str
    round: str


def validate_reservation(candidate: ReservationCandidate, *, same_day_count: int) -> Rejection | None:
    """
    Pure validation of a proposed reservation.
    `same_day_count` is the student's other reservations starting on the same day
    (the reservation being edited must already be excluded).
    Returns None if OK, otherwise the first rule that fails.
    """
    start, end = candidate.slot_start, candidate.slot_end
    if end <= start:
        return Rejection(RejectionKind.INVALID_RANGE, "end must be after start")
    if not on_boundary(start) or not on_boundary(end):
        return Rejection(RejectionKind.MISALIGNED, "times must align to :00 or :30")

    last_instant = end - timedelta(microseconds=1)
    if (
        not in_working_hours(start)
        or not in_working_hours(last_instant)
        or last_instant.date() != start.date()
    ):
        return Rejection(RejectionKind.OUT_OF_HOURS, "out of allowed hours (09:00 - 21:00)")

    if len(candidate.company) > MAX_FIELD_LENGTH or len(candidate.round) > MAX_FIELD_LENGTH:
        return Rejection(
            RejectionKind.FIELD_TOO_LONG,
            f"company and round must be at most {MAX_FIELD_LENGTH} characters",
        )

    if same_day_count >= DAILY_QUOTA:
        return Rejection(RejectionKind.DAILY_QUOTA_EXCEEDED, f"daily limit reached ({DAILY_QUOTA})")
    return None
