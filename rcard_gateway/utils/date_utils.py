"""Date manipulation utilities"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo


def today_in(tz_name: str) -> date:
    """Current calendar date in the given IANA timezone"""
    return datetime.now(ZoneInfo(tz_name)).date()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def days_between(start: date, end: date) -> int:
    """Absolute number of calendar days between two dates"""
    return abs((end - start).days)


def add_days(from_date: date, days: int) -> date:
    return from_date + timedelta(days=days)
