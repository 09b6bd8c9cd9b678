from datetime import datetime, timezone

LOCAL_FORMAT = "%Y-%m-%dT%H:%M"


def parse_local(value: str) -> datetime:
    """Parse a `YYYY-MM-DDTHH:mm` wall-clock string into a naive datetime.
    Offsets and seconds are refused so no implicit UTC shift can happen."""
    try:
        return datetime.strptime(value, LOCAL_FORMAT)
    except ValueError as exc:
        raise ValueError(f"expected local time as YYYY-MM-DDTHH:mm, got {value!r}") from exc


def format_local(dt: datetime) -> str:
    if dt.tzinfo is not None:
        raise ValueError("datetime must be naive local time")
    return dt.strftime(LOCAL_FORMAT)



UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_utc(dt: datetime) -> str:
    """Format a bookkeeping stamp stored as naive UTC (or aware) with a `Z` suffix."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.strftime(UTC_FORMAT)
