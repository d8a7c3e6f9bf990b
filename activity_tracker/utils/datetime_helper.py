"""Datetime helpers shared by the timer core"""
from datetime import datetime, timedelta, timezone

_ONE_MS = timedelta(milliseconds=1)


def utcnow() -> datetime:
    """Current instant as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def millis_between(start: datetime, end: datetime) -> int:
    """Whole milliseconds from start to end (negative if end is earlier)"""
    return (end - start) // _ONE_MS


def add_millis(dt: datetime, millis: int) -> datetime:
    return dt + timedelta(milliseconds=millis)
