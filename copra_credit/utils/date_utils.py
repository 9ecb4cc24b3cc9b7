"""Date manipulation utilities"""

from datetime import datetime, timedelta, timezone


def add_days(from_date: datetime, days: int) -> datetime:
    """Add calendar days to a date"""
    return from_date + timedelta(days=days)


def as_utc(value: datetime) -> datetime:
    """Stores write UTC; a timestamp without an offset is taken as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp from the stores (accepts a trailing 'Z' or no offset)"""
    if not value:
        return None
    return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
