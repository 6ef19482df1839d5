"""Single source of the current time for expiration and future-date checks."""

from datetime import date, datetime


def now() -> datetime:
    return datetime.now()


def today() -> date:
    return now().date()


def to_naive(value: datetime) -> datetime:
    """Drop timezone info after converting aware datetimes to local time."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


__all__ = ["now", "to_naive", "today"]
