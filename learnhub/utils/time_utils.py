from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (some stores drop the zone)."""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
