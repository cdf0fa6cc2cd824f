"""Calendar helpers shared by the recurrence engine.

Weekdays are numbered Sunday = 0 through Saturday = 6 throughout.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from event_manager.domain.errors import InvalidDate
from event_manager.domain.models import Weekday


def weekday_of(day: date) -> Weekday:
    return Weekday(day.isoweekday() % 7)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def first_of_next_month(day: date) -> date:
    return day + relativedelta(months=1, day=1)


def last_of_month(day: date) -> date:
    return day + relativedelta(day=31)


def make_date(year: int, month: int, day: int) -> date:
    """Build a date, rolling ``month`` over into neighbouring years.

    A negative ``day`` counts back from the end of the month (-1 is the last
    day). Raises ``InvalidDate`` if the day does not exist in that month.
    """
    extra_years, month_index = divmod(month - 1, 12)
    year, month = year + extra_years, month_index + 1
    if not 1 <= year <= 9999:
        raise InvalidDate(f"year {year} is out of range")
    length = days_in_month(year, month)
    resolved = length + day + 1 if day < 0 else day
    if not 1 <= resolved <= length:
        raise InvalidDate(f"{year:04d}-{month:02d} has no day {day}")
    return date(year, month, resolved)


def nth_weekday_in_month(year: int, month: int, offset: int, weekday: int) -> date:
    """Return the ``offset``-th ``weekday`` of the month.

    ``offset=2, weekday=Weekday.TUESDAY`` is the second Tuesday;
    ``offset=-1`` is the last one. An ordinal the month does not have (a
    fifth Friday in a four-Friday month) is clamped to the last occurrence
    for positive offsets and to the first for negative ones.
    """
    if offset == 0:
        raise ValueError("offset must be non-zero")

    if offset > 0:
        first = make_date(year, month, 1)
        wday_offset = (weekday - weekday_of(first)) % 7
        answer = first + timedelta(days=wday_offset + 7 * (offset - 1))
        if answer.month == month:
            return answer
        return nth_weekday_in_month(year, month, -1, weekday)

    last = last_of_month(make_date(year, month, 1))
    wday_offset = -((weekday_of(last) - weekday) % 7)
    answer = last + timedelta(days=wday_offset + 7 * (offset + 1))
    if answer.month == month:
        return answer
    return nth_weekday_in_month(year, month, 1, weekday)
