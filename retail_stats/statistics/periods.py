"""
Report Periods

Turns a period token ("day", "week", "lastmonth", ...) into a half-open
``[start, end)`` window. Two flavours exist and each report uses exactly one:

- ``resolve_window``: revenue reports. Day and week end at "now"; month and
  year run to the start of the next period; last month / last year are the
  full previous calendar period.
- ``resolve_open_window``: the order-status distribution. Only day, week,
  month and year are accepted and every window ends at "now".

Unknown tokens never raise: they resolve to "month" with a warning.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, Optional, Tuple, Union

import structlog

logger = structlog.get_logger(__name__)


class Period(str, Enum):
    """Supported period tokens"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    LAST_MONTH = "lastmonth"
    LAST_YEAR = "lastyear"


PERIOD_ALIASES = {
    "today": Period.DAY,
    "last_month": Period.LAST_MONTH,
    "last_year": Period.LAST_YEAR,
}

OPEN_WINDOW_PERIODS = (Period.DAY, Period.WEEK, Period.MONTH, Period.YEAR)

DEFAULT_PERIOD = Period.MONTH

PeriodLike = Union[Period, str, None]


@dataclass(frozen=True)
class DateWindow:
    """Half-open time interval ``[start, end)``"""
    start: datetime
    end: datetime

    def __contains__(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def parse_period(token: PeriodLike, allowed: Iterable[Period] = tuple(Period)) -> Period:
    """
    Normalise a caller supplied period token.

    Matching is case-insensitive and ignores surrounding whitespace. Tokens
    that are unknown, not strings, or known but not in ``allowed``, fall
    back to month.
    """
    if isinstance(token, Period):
        period = token
    elif token is not None and not isinstance(token, str):
        period = None
    else:
        key = (token or "").strip().lower()
        period = PERIOD_ALIASES.get(key)
        if period is None:
            try:
                period = Period(key)
            except ValueError:
                period = None

    if period is None or period not in tuple(allowed):
        logger.warning("Invalid period, defaulting to month", period=token)
        return DEFAULT_PERIOD
    return period


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def first_of_next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def first_of_previous_month(day: date) -> date:
    return first_of_month(first_of_month(day) - timedelta(days=1))


def start_of_week(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.isoweekday() - 1)


def month_bounds(day: date) -> Tuple[date, date]:
    """First day of the month containing ``day`` and first day of the next month."""
    return first_of_month(day), first_of_next_month(day)


def shift_years(moment: datetime, years: int) -> datetime:
    """Move ``moment`` by whole years, pinning Feb 29 to Feb 28 when needed."""
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, day=28)


def resolve_window(period: PeriodLike, now: Optional[datetime] = None) -> DateWindow:
    """Window used by the revenue reports."""
    now = now or datetime.now()
    today = now.date()
    resolved = parse_period(period)

    if resolved is Period.DAY:
        return DateWindow(start_of_day(today), now)
    if resolved is Period.WEEK:
        return DateWindow(start_of_day(start_of_week(today)), now)
    if resolved is Period.YEAR:
        return DateWindow(
            start_of_day(date(today.year, 1, 1)),
            start_of_day(date(today.year + 1, 1, 1)),
        )
    if resolved is Period.LAST_MONTH:
        return DateWindow(
            start_of_day(first_of_previous_month(today)),
            start_of_day(first_of_month(today)),
        )
    if resolved is Period.LAST_YEAR:
        return DateWindow(
            start_of_day(date(today.year - 1, 1, 1)),
            start_of_day(date(today.year, 1, 1)),
        )

    month_start, next_month_start = month_bounds(today)
    return DateWindow(start_of_day(month_start), start_of_day(next_month_start))


def resolve_open_window(period: PeriodLike, now: Optional[datetime] = None) -> DateWindow:
    """Window used by the order-status distribution; always ends at ``now``."""
    now = now or datetime.now()
    today = now.date()
    resolved = parse_period(period, allowed=OPEN_WINDOW_PERIODS)

    starts = {
        Period.DAY: today,
        Period.WEEK: start_of_week(today),
        Period.MONTH: first_of_month(today),
        Period.YEAR: date(today.year, 1, 1),
    }
    return DateWindow(start_of_day(starts[resolved]), now)
