"""Timestamp helpers shared by the domain entities and the reports.

Stored timestamps are ISO 8601 strings. In memory everything is a naive
local datetime; aware values (e.g. '...Z' exports) are converted to local
time first so that comparisons never mix naive and aware values.
"""
import calendar
from datetime import date, datetime, time
from typing import Optional, Union

EPOCH = datetime(1970, 1, 1)

DateLike = Union[date, datetime, str, None]


def _naive(dt: datetime) -> datetime:
    if dt.tzinfo is not None:
        return dt.astimezone().replace(tzinfo=None)
    return dt


def parse_timestamp(value: DateLike) -> datetime:
    """Parse a stored timestamp. Missing or unreadable values map to the epoch."""
    if isinstance(value, datetime):
        return _naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not value:
        return EPOCH
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return _naive(datetime.fromisoformat(text))
    except ValueError:
        return EPOCH


def parse_date(value: DateLike) -> Optional[date]:
    """Parse an optional calendar date (expiration dates). Empty -> None."""
    if isinstance(value, datetime):
        return _naive(value).date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def start_bound(value: DateLike) -> datetime:
    """Lower bound of a report window; a bare date starts at midnight."""
    if value is None or value == "":
        return EPOCH
    return parse_timestamp(value)


def end_bound(value: DateLike) -> datetime:
    """Upper bound of a report window; a bare date covers the whole day."""
    if value is None or value == "":
        return datetime.max
    if isinstance(value, datetime):
        return _naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.max)
    text = str(value).strip()
    if len(text) == 10:
        day = parse_date(text)
        if day is not None:
            return datetime.combine(day, time.max)
    return parse_timestamp(text)


def months_ago(now: datetime, months: int) -> datetime:
    """Same wall-clock time `months` calendar months earlier (day clamped to month length)."""
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)
