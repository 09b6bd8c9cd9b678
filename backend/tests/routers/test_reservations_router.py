from datetime import datetime, timezone
from typing import Any, cast

import pytest
from app.domain.errors import Rejection, RejectionKind, window_full
from app.domain.services import Requester
from app.models import Reservation, UserRole, UserStatus
from app.routers import reservations as router
from app.schemas import ReservationCreate, ReservationRead, ReservationUpdate
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession


class DummySession:
    """Minimal async session stub that supports `async with session.begin()`."""

    async def __aenter__(self) -> "DummySession":
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> bool:
        return False

    def begin(self) -> "DummySession":
        return self


class UnreachableSession(DummySession):
    async def __aenter__(self) -> "DummySession":
        raise OperationalError("BEGIN", None, Exception("connection refused"))


STUDENT = Requester(id=200, role=UserRole.STUDENT, status=UserStatus.APPROVED)
ADMIN = Requester(id=1, role=UserRole.ADMIN, status=UserStatus.APPROVED)


def _reservation() -> Reservation:
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return Reservation(
        id=100,
        student_id=STUDENT.id,
        slot_start=datetime(2025, 11, 24, 10, 0),
        slot_end=datetime(2025, 11, 24, 11, 0),
        company="MNC",
        round="L1",
        created_at=now,
        updated_at=now,
    )


def _payload() -> ReservationCreate:
    return ReservationCreate(slot_start="2025-11-24T10:00", slot_end="2025-11-24T11:00", company="MNC", round="L1")


@pytest.fixture(autouse=True)
def _stub_repo(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(router, "SqlAlchemyReservationRepository", lambda s: s)  # type: ignore[assignment]


@pytest.mark.asyncio
async def test_create_returns_reservation_and_emits_audit(monkeypatch: pytest.MonkeyPatch) -> None:
    reservation = _reservation()
    seen: dict[str, Any] = {}

    async def fake_create(res_repo: object, **kwargs: Any) -> Reservation:
        seen.update(kwargs)
        return reservation

    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(router.reservation_usecase, "create_reservation", fake_create)
    monkeypatch.setattr(router, "emit_audit_log", lambda **kwargs: calls.append(kwargs))

    result: ReservationRead = await router.create_reservation(
        payload=_payload(),
        session=cast(AsyncSession, DummySession()),
        requester=STUDENT,
    )

    assert result.reservation_id == reservation.id
    assert seen["requester"] is STUDENT
    assert seen["slot_start"] == datetime(2025, 11, 24, 10, 0)
    assert result.model_dump(mode="json")["slot_start"] == "2025-11-24T10:00"
    assert len(calls) == 1
    assert calls[0]["action"] == "reservation.created"
    assert calls[0]["reservation_id"] == reservation.id


@pytest.mark.asyncio
async def test_create_maps_window_full_to_409(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_create(*args: object, **kwargs: object) -> Rejection:
        return window_full(datetime(2025, 11, 24, 10, 30))

    monkeypatch.setattr(router.reservation_usecase, "create_reservation", fake_create)

    with pytest.raises(HTTPException) as excinfo:
        await router.create_reservation(
            payload=_payload(),
            session=cast(AsyncSession, DummySession()),
            requester=STUDENT,
        )
    assert excinfo.value.status_code == 409
    assert excinfo.value.detail["code"] == "window_full"
    assert excinfo.value.detail["window"] == "2025-11-24T10:30"


@pytest.mark.asyncio
async def test_create_maps_unreachable_store_to_503() -> None:
    with pytest.raises(HTTPException) as excinfo:
        await router.create_reservation(
            payload=_payload(),
            session=cast(AsyncSession, UnreachableSession()),
            requester=STUDENT,
        )
    assert excinfo.value.status_code == 503
    assert excinfo.value.detail["code"] == "store_unavailable"


@pytest.mark.asyncio
async def test_update_maps_not_owner_to_403(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_update(*args: object, **kwargs: object) -> Rejection:
        return Rejection(RejectionKind.NOT_OWNER, "not your reservation")

    monkeypatch.setattr(router.reservation_usecase, "update_reservation", fake_update)

    payload = ReservationUpdate(slot_start="2025-11-24T12:00", slot_end="2025-11-24T12:30", company="MNC", round="HR")
    with pytest.raises(HTTPException) as excinfo:
        await router.update_reservation(
            payload=payload,
            reservation_id=100,
            session=cast(AsyncSession, DummySession()),
            requester=STUDENT,
        )
    assert excinfo.value.status_code == 403
    assert excinfo.value.detail["code"] == "not_owner"


@pytest.mark.asyncio
async def test_admin_delete_returns_204_and_audits_as_admin(monkeypatch: pytest.MonkeyPatch) -> None:
    reservation = _reservation()

    async def fake_delete(*args: object, **kwargs: object) -> Reservation:
        return reservation

    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(router.reservation_usecase, "delete_reservation", fake_delete)
    monkeypatch.setattr(router, "emit_audit_log", lambda **kwargs: calls.append(kwargs))

    response = await router.delete_reservation(
        reservation_id=reservation.id,
        session=cast(AsyncSession, DummySession()),
        requester=ADMIN,
    )
    assert response.status_code == 204
    assert calls[0]["action"] == "reservation.deleted"
    assert calls[0]["initiator"] == "admin"
    assert calls[0]["student_id"] == STUDENT.id


@pytest.mark.asyncio
async def test_delete_missing_maps_to_404(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_delete(*args: object, **kwargs: object) -> Rejection:
        return Rejection(RejectionKind.NOT_FOUND, "reservation not found")

    monkeypatch.setattr(router.reservation_usecase, "delete_reservation", fake_delete)

    with pytest.raises(HTTPException) as excinfo:
        await router.delete_reservation(
            reservation_id=5,
            session=cast(AsyncSession, DummySession()),
            requester=STUDENT,
        )
    assert excinfo.value.status_code == 404


@pytest.mark.asyncio
async def test_audit_failure_returns_500(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_create(*args: object, **kwargs: object) -> Reservation:
        return _reservation()

    def fake_emit(**kwargs: Any) -> None:
        raise RuntimeError("fail log")

    monkeypatch.setattr(router.reservation_usecase, "create_reservation", fake_create)
    monkeypatch.setattr(router, "emit_audit_log", fake_emit)

    with pytest.raises(HTTPException) as excinfo:
        await router.create_reservation(
            payload=_payload(),
            session=cast(AsyncSession, DummySession()),
            requester=STUDENT,
        )
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_list_my_reservations(monkeypatch: pytest.MonkeyPatch) -> None:
    reservation = _reservation()

    async def fake_list(*args: object, **kwargs: object) -> list[Reservation]:
        return [reservation]

    monkeypatch.setattr(router.reservation_usecase, "list_student_reservations", fake_list)

    rows = await router.list_my_reservations(session=cast(AsyncSession, DummySession()), requester=STUDENT)
    assert [r.reservation_id for r in rows] == [reservation.id]
