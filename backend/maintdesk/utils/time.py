"""Time Utilities - UTC timestamps, coercion and calendar helpers"""
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional
from dateutil import parser as date_parser
from dateutil import tz as date_tz

from ..config.settings import settings


def utc_now() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 string to datetime
    
    Args:
        iso_string: ISO formatted datetime string
        
    Returns:
        Datetime object in UTC
    """
    dt = date_parser.isoparse(iso_string)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Coerce a stored timestamp into an aware datetime.
    
    Accepts datetimes (naive values are UTC, as pymongo returns them),
    objects exposing ``to_datetime()`` or ``toDate()``, Firestore-style
    ``{"seconds": .., "nanoseconds": ..}`` mappings, epoch milliseconds and
    ISO strings. Anything else yields None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    for method in ("to_datetime", "toDate"):
        converter = getattr(value, method, None)
        if callable(converter):
            return to_datetime(converter())
    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
            try:
                return datetime.fromtimestamp(seconds + nanos / 1e9, tz=timezone.utc)
            except (OverflowError, OSError, ValueError, TypeError):
                return None
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            return parse_iso(value.strip())
        except (ValueError, OverflowError):
            return None
    return None


def get_zone(name: Optional[str] = None) -> tzinfo:
    """Resolve the configured calendar timezone, falling back to the host zone"""
    zone = date_tz.gettz(name or settings.timezone)
    return zone if zone is not None else date_tz.tzlocal()


def start_of_day(day: date, zone: Optional[tzinfo] = None) -> datetime:
    """First instant of a calendar day"""
    return datetime.combine(day, time.min, tzinfo=zone or get_zone())


def end_of_day(day: date, zone: Optional[tzinfo] = None) -> datetime:
    """Last millisecond of a calendar day (23:59:59.999)"""
    return datetime.combine(day, time(23, 59, 59, 999000), tzinfo=zone or get_zone())


def days_between(earlier: datetime, later: datetime) -> float:
    """Fractional days from earlier to later"""
    return (later - earlier) / timedelta(days=1)
