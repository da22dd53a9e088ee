"""
Unix-time conversion and business-day arithmetic.

Naive datetimes are taken as UTC. Weekdays follow Monday-Friday.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Union

import numpy as np

from featurize import config

DateLike = Union[date, datetime]


def _epoch() -> datetime:
    return config.get('dates.epoch', datetime(1970, 1, 1))


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def to_unix_time(value: datetime) -> int:
    """Whole seconds since 1970-01-01, truncated toward zero."""
    return int((_naive_utc(value) - _epoch()).total_seconds())


def from_unix_time(value: Union[int, str]) -> datetime:
    """
    Naive UTC datetime for a Unix timestamp in seconds.

    Strings are parsed as integers; an unparseable string returns the epoch.
    """
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return _epoch()
    return _epoch() + timedelta(seconds=int(value))


def add_business_days(value: DateLike, days: int) -> DateLike:
    """
    Move `value` forward by `days` business days.

    Starting on a weekend, the following Monday is the first business day.
    The time of day of a datetime is preserved.

    Raises:
        ValueError: If `days` is negative.
    """
    if days < 0:
        raise ValueError("Can only add a positive number of business days")
    if days == 0:
        return value

    start = value.date() if isinstance(value, datetime) else value
    # 'backward' rolls a weekend start to Friday, so +1 lands on Monday.
    target = np.busday_offset(np.datetime64(start, 'D'), days, roll='backward')
    result = target.item()
    if isinstance(value, datetime):
        return datetime.combine(result, value.timetz())
    return result


def _dow(value: DateLike) -> int:
    # Sunday = 0 ... Saturday = 6
    return value.isoweekday() % 7


def business_days(start: DateLike, end: DateLike) -> float:
    """
    Business days spanned from `start` to `end`, both ends inclusive.

    Fractional when the datetimes carry different times of day.
    """
    if isinstance(start, datetime) != isinstance(end, datetime):
        start = start if isinstance(start, datetime) else datetime.combine(start, time())
        end = end if isinstance(end, datetime) else datetime.combine(end, time())
    total_days = (end - start).total_seconds() / 86400.0

    days = 1 + (total_days * 5 - (_dow(start) - _dow(end)) * 2) / 7
    if _dow(end) == 6:
        days -= 1
    if _dow(start) == 0:
        days -= 1
    return days
