"""Helper functions for timestamp parsing and calendar arithmetic."""

from datetime import date, datetime, timedelta, tzinfo
from typing import List, Optional, Union

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

DateLike = Union[date, datetime, str]


def parse_timestamp(value: Union[datetime, str]) -> datetime:
    """
    Parse an ISO 8601 timestamp as stored by the data file.

    Accepts a datetime unchanged. Raises ValueError for anything else
    that can't be parsed.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not a timestamp: {value!r}")
    return isoparse(value.strip())


def local_datetime(value: Union[datetime, str], tz: Optional[tzinfo] = None) -> datetime:
    """
    Wall-clock time of a timestamp in the caller's reference frame.

    - Aware timestamps are converted to `tz` when one is given
    - Without `tz` the recorded wall-clock time is kept
    The result is always naive so mixed inputs can be compared.
    """
    dt = parse_timestamp(value)
    if dt.tzinfo is not None:
        if tz is not None:
            dt = dt.astimezone(tz)
        dt = dt.replace(tzinfo=None)
    return dt


def local_date(value: Union[datetime, str], tz: Optional[tzinfo] = None) -> date:
    """Calendar date of a timestamp in the caller's reference frame."""
    return local_datetime(value, tz).date()


def as_date(value: DateLike) -> date:
    """Coerce a date, datetime or 'YYYY-MM-DD' string to a plain date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_timestamp(value).date()


def start_of_month(day: DateLike) -> date:
    return as_date(day).replace(day=1)


def end_of_month(day: DateLike) -> date:
    """Last calendar day of the month containing `day`."""
    return start_of_month(day) + relativedelta(months=1, days=-1)


def add_months(day: DateLike, months: int) -> date:
    """Shift by whole months, clamping to the end of shorter months."""
    return as_date(day) + relativedelta(months=months)


def month_days(day: DateLike) -> List[date]:
    """Every day of the month containing `day`, in order."""
    first = start_of_month(day)
    last = end_of_month(day)
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]
