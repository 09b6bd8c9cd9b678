from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

import jwt
from jwt import InvalidTokenError

# Tokens come from the account service; older ones carry the user id as "id".
_SUBJECT_CLAIMS = ("sub", "id")


def create_access_token(
    *,
    user_id: int,
    secret: str,
    algorithm: str = "HS256",
    expires_delta: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=30))
    payload = {"sub": str(user_id), "iat": now, "exp": exp}
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_access_token(
    token: str,
    *,
    secret: str,
    algorithms: Sequence[str],
) -> int:
    """Return the user id carried by `token`. Raises ValueError for any unusable token."""
    try:
        payload: dict[str, Any] = jwt.decode(token, secret, algorithms=list(algorithms))
    except InvalidTokenError as exc:  # includes ExpiredSignatureError
        raise ValueError("invalid token") from exc

    subject = next((payload[claim] for claim in _SUBJECT_CLAIMS if payload.get(claim) is not None), None)
    if subject is None:
        raise ValueError("token missing subject")
    try:
        return int(subject)
    except (TypeError, ValueError) as exc:
        raise ValueError("token subject is not an integer") from exc
