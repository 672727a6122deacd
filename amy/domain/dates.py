"""
Calendar-date helpers.

Billing dates are plain calendar days stored as ``YYYY-MM-DD``. They are parsed by
splitting the string into integers and never go through a timestamp, so the
result does not depend on the server's UTC offset.
"""

import calendar
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

from amy.infrastructure.exceptions import ParseError


DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

DateLike = Union[str, date]


def parse_local_date(value: DateLike) -> date:
    """Parse a ``YYYY-MM-DD`` string into a ``date``.

    ``date`` instances pass through (``datetime`` is reduced to its date).

    Raises:
        ParseError: the value is not a valid calendar date string.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ParseError(value)

    match = DATE_PATTERN.match(value.strip())
    if not match:
        raise ParseError(value)

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise ParseError(value, original_error=e)


def format_date(value: date) -> str:
    """Format a date as ``YYYY-MM-DD``."""
    return value.strftime("%Y-%m-%d")


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_one_cycle(value: DateLike, cycle: str) -> str:
    """Advance a billing date by one monthly or yearly cycle.

    Jan 31 + 1 month lands on the last day of February, and Feb 29 + 1 year
    lands on Feb 28 when the target year is not a leap year.

    Args:
        value: Stored next-billing-date.
        cycle: ``"monthly"`` or ``"yearly"``.

    Returns:
        The next billing date as ``YYYY-MM-DD``.
    """
    current = parse_local_date(value)
    cycle_value = getattr(cycle, "value", cycle)

    if cycle_value == "monthly":
        return format_date(add_months(current, 1))
    if cycle_value == "yearly":
        return format_date(add_months(current, 12))
    raise ValueError(f"Unknown billing cycle: {cycle!r}")


def today_local(today: Optional[date] = None) -> date:
    """Return ``today`` or the server's current local date."""
    return today or date.today()


def local_midnight(day: date) -> datetime:
    """Local 00:00 of ``day`` as an aware datetime in UTC."""
    return datetime.combine(day, time.min).astimezone().astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive timestamps read back from the store as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def next_day(value: date) -> date:
    return value + timedelta(days=1)
