"""
Period window resolution.

Maps a named filter (today / week / month / 3months / 6months / year / all)
to a half-open ``[start, end)`` range and derives the equal-length window
immediately before it for period-over-period comparison.

Every function takes the reference "now" as an argument; nothing here reads
the wall clock.
"""

import calendar
from datetime import datetime, timedelta

from .config import PERIOD_FILTERS, WEEK_START_DAY
from .models import PeriodWindow


def _midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def shift_months(moment: datetime, months: int) -> datetime:
    """
    Move a datetime by whole calendar months.

    The day is clamped to the length of the target month, so
    March 31 minus one month is the last day of February.

    Args:
        moment: Reference datetime
        months: Months to add (negative to go back)

    Returns:
        Shifted datetime with the same time of day
    """
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def week_start(now: datetime, first_weekday: int = WEEK_START_DAY) -> datetime:
    """Midnight of the most recent ``first_weekday`` (Python numbering, Monday=0)."""
    days_back = (now.weekday() - first_weekday) % 7
    return _midnight(now) - timedelta(days=days_back)


def resolve_window(
    period: str,
    now: datetime,
    first_weekday: int = WEEK_START_DAY,
) -> PeriodWindow:
    """
    Resolve a filter tag to a concrete window ending at ``now``.

    Args:
        period: One of PERIOD_FILTERS
        now: Reference moment (naive datetime)
        first_weekday: Day the week begins on (default Sunday)

    Returns:
        PeriodWindow; ``all`` yields an unbounded window

    Raises:
        ValueError: If the filter tag is unknown
    """
    if period == "today":
        return PeriodWindow(start=_midnight(now), end=now)
    if period == "week":
        return PeriodWindow(start=week_start(now, first_weekday), end=now)
    if period == "month":
        return PeriodWindow(start=_midnight(now.replace(day=1)), end=now)
    if period == "3months":
        return PeriodWindow(start=shift_months(now, -3), end=now)
    if period == "6months":
        return PeriodWindow(start=shift_months(now, -6), end=now)
    if period == "year":
        return PeriodWindow(start=shift_months(now, -12), end=now)
    if period == "all":
        return PeriodWindow.unbounded()
    raise ValueError(f"Unknown period filter: {period!r}. Must be one of {PERIOD_FILTERS}")


def previous_window(window: PeriodWindow) -> PeriodWindow:
    """
    Window of identical duration ending where ``window`` starts.

    An unbounded or empty window has no predecessor; an empty window is
    returned so callers can treat "no baseline" uniformly.
    """
    if window.empty or window.start is None:
        return PeriodWindow.make_empty()
    if window.end is None:
        # Open-ended on the right: everything before the start is the baseline
        return PeriodWindow(start=None, end=window.start)
    length = window.end - window.start
    return PeriodWindow(start=window.start - length, end=window.start)
