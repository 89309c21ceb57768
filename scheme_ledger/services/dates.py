"""
Calendar helpers shared by the schedule, due tracker and eligibility code.

All ledger comparisons happen on timezone-aware UTC datetimes. Naive values
coming from the database are UTC by convention.
"""

from datetime import date, datetime, time, timezone
from typing import Union

from dateutil.relativedelta import relativedelta

DateLike = Union[date, datetime]


def to_utc(value: DateLike) -> datetime:
    """Promote a date or datetime to an aware UTC datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def start_of_day(value: DateLike) -> datetime:
    """Midnight UTC of the calendar day `value` falls on (in UTC)."""
    moment = to_utc(value)
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def add_months(value: DateLike, months: int) -> datetime:
    """
    Advance by calendar months, clamping the day to the target month's length.

    Jan 31 + 1 month is Feb 28 (Feb 29 in leap years), never Mar 2/3.
    The result is normalized to midnight UTC.
    """
    return start_of_day(value) + relativedelta(months=months)


def month_label(value: DateLike) -> str:
    """Billing month label, e.g. 2024-02."""
    moment = to_utc(value)
    return f"{moment.year:04d}-{moment.month:02d}"


def whole_days_between(earlier: DateLike, later: DateLike) -> int:
    """floor((later - earlier) in days); negative when `later` precedes `earlier`."""
    delta = to_utc(later) - to_utc(earlier)
    return delta.days  # timedelta.days already floors
