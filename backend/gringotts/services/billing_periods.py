"""Billing period calculation service.

Subscriptions recur monthly on an anchor day-of-month. When a month is too
short to contain the anchor day, the cycle falls on the last day of that
month instead: a subscription anchored on January 31 bills on February 28
(February 29 in a leap year), then March 31, April 30, and so on.
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from dateutil.relativedelta import relativedelta

END_OF_DAY = time(23, 59, 59, 999000)


class InvalidArgument(ValueError):
    """Raised when a billing date or anchor is not a valid calendar value."""


@dataclass(frozen=True)
class Period:
    """One billing cycle, from start-of-day to end-of-day inclusive."""

    start: datetime
    end: datetime


def _to_date(value: date, name: str = "date") -> date:
    if not isinstance(value, date):
        raise InvalidArgument(f"{name} must be a date or datetime, got {value!r}")
    if isinstance(value, datetime):
        return value.date()
    return value


def start_of_day(value: date) -> datetime:
    """Return 00:00:00.000 of the calendar day of ``value``."""
    return datetime.combine(_to_date(value), time.min)


def end_of_day(value: date) -> datetime:
    """Return 23:59:59.999 of the calendar day of ``value``."""
    return datetime.combine(_to_date(value), END_OF_DAY)


def resolve_anchor_day(anchor: date | int) -> int:
    """Get the anchor day-of-month from an anchor date or an explicit day."""
    # bool is an int subclass
    if isinstance(anchor, int) and not isinstance(anchor, bool):
        if not 1 <= anchor <= 31:
            raise InvalidArgument(f"anchor day must be between 1 and 31, got {anchor}")
        return anchor
    return _to_date(anchor, "anchor_date").day


def clamp_anchor_day(year: int, month: int, anchor_day: int) -> date:
    """Resolve the anchor day inside a month, clamped to the month's last day."""
    days_in_month = calendar.monthrange(year, month)[1]
    return date(year, month, min(anchor_day, days_in_month))


def _anchor_in_following_month(value: date, anchor_day: int) -> date:
    following = value.replace(day=1) + relativedelta(months=1)
    return clamp_anchor_day(following.year, following.month, anchor_day)


def get_period_from_anchor_date(reference_date: date, anchor_date: date | int) -> Period:
    """Calculate the billing period containing a reference date.

    Args:
        reference_date: The date to find the period for (time of day ignored)
        anchor_date: The subscription anchor date, or its day-of-month

    Returns:
        Period whose start is the clamped anchor day on or before
        ``reference_date`` and whose end is the day before the next one.
    """
    reference = _to_date(reference_date, "reference_date")
    anchor_day = resolve_anchor_day(anchor_date)

    start = clamp_anchor_day(reference.year, reference.month, anchor_day)
    if reference < start:
        previous = reference.replace(day=1) - relativedelta(months=1)
        start = clamp_anchor_day(previous.year, previous.month, anchor_day)

    end = _anchor_in_following_month(start, anchor_day) - timedelta(days=1)
    return Period(start=start_of_day(start), end=end_of_day(end))


def get_previous_period(next_payment_date: date, anchor_date: date | int) -> Period:
    """Get the period that elapsed right before a scheduled payment."""
    next_payment = _to_date(next_payment_date, "next_payment_date")
    return get_period_from_anchor_date(next_payment - timedelta(days=1), anchor_date)


def get_next_payment_date(current_payment_date: date, anchor_date: date | int) -> datetime:
    """Advance a payment date by one billing cycle.

    The result is the anchor day resolved in the month after
    ``current_payment_date``, so stepping repeatedly never drifts away from
    the anchor after passing through a short month.
    """
    current = _to_date(current_payment_date, "current_payment_date")
    anchor_day = resolve_anchor_day(anchor_date)
    return start_of_day(_anchor_in_following_month(current, anchor_day))


def get_active_until_date(old_active_until: date, anchor_date: date | int) -> datetime:
    """Extend a paid-through date by one billing cycle.

    The newly paid period is the one starting the day after
    ``old_active_until``; returns end-of-day of its last day.
    """
    old = _to_date(old_active_until, "old_active_until")
    return get_period_from_anchor_date(old + timedelta(days=1), anchor_date).end
