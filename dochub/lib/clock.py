"""UTC time helpers shared by models and services."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from stores without tz support."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat_z(value: datetime) -> str:
    """ISO-8601 in UTC with a ``Z`` suffix, matching how response models render datetimes."""
    text = as_utc(value).isoformat()
    return text.removesuffix("+00:00") + "Z"


__all__ = ["utcnow", "as_utc", "isoformat_z"]
