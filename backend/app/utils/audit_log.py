from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from .request_id import get_request_id
from .time import format_local

AuditAction = Literal[
    "reservation.created",
    "reservation.updated",
    "reservation.deleted",
    "reservation.purged",
]
AuditInitiator = Literal["student", "admin"]

_audit_logger = logging.getLogger("audit")
_audit_logger.setLevel(logging.INFO)
if not _audit_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    _audit_logger.addHandler(handler)
_audit_logger.propagate = False


def _local_or_none(value: Optional[datetime]) -> Optional[str]:
    return format_local(value) if value is not None else None


def emit_audit_log(
    *,
    action: AuditAction,
    initiator: AuditInitiator,
    actor_id: int,
    reservation_id: Optional[int],
    student_id: Optional[int],
    slot_start: Optional[datetime] = None,
    slot_end: Optional[datetime] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """Emit structured JSON audit log. Raises RuntimeError if logging fails."""
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": "info",
        "action": action,
        "initiator": initiator,
        "actor_id": actor_id,
        "request_id": get_request_id(),
        "reservation_id": reservation_id,
        "student_id": student_id,
        "slot_start": _local_or_none(slot_start),
        "slot_end": _local_or_none(slot_end),
    }
    if extra:
        payload.update(extra)

    # Drop None values to keep the log compact.
    compact_payload = {k: v for k, v in payload.items() if v is not None}
    try:
        _audit_logger.info(json.dumps(compact_payload, ensure_ascii=True))
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("failed to emit audit log") from exc
