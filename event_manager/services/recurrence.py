"""Service for finding the occurrences of a recurrence rule.

Weekly rules are evaluated in groups: all the occurrences that fall in one
Sunday-to-Saturday week form a group, and ``interval`` decides which weeks
have a group at all. Monthly rules roll forward one month at a time and do
not apply ``interval``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import date, timedelta

from event_manager.domain.errors import RecurrenceError
from event_manager.domain.models import Frequency, Occurrence, RecurrenceRule
from event_manager.services.calendar_math import (
    days_in_month,
    first_of_next_month,
    make_date,
    nth_weekday_in_month,
    weekday_of,
)

logger = logging.getLogger(__name__)

# A validated by_month_day entry fits at least one month in any year.
_MONTH_SCAN_LIMIT = 12
# Weekly lookups settle after one group jump; the extra steps are slack.
_GROUP_STEP_LIMIT = 4


def next_event_after(
    rule: RecurrenceRule, after_date: date, start: date | None = None
) -> date:
    """Return the first occurrence on or after ``after_date``.

    ``start`` is the date the schedule goes into effect and defaults to the
    rule's ``anchor_start``. Raises ``InvalidRule`` for rules that cannot be
    queried.
    """
    rule.ensure_valid()
    start = rule.anchor_start if start is None else start
    first_occurrence = next_occurrence(rule, start, continue_=True)

    for _ in range(_GROUP_STEP_LIMIT):
        if after_date < first_occurrence:
            return first_occurrence

        if rule.frequency == Frequency.WEEKLY and not _in_active_group(
            rule, first_occurrence, after_date
        ):
            after_date = next_group(
                rule, first_group(rule, first_occurrence), after_date
            )
            logger.debug("Skipped inactive week, resuming at %s", after_date)
            continue

        found = next_occurrence(rule, after_date)
        if found is not None:
            return found

        if rule.frequency == Frequency.MONTHLY:
            return next_occurrence(rule, after_date, continue_=True)

        after_date = next_group(rule, first_group(rule, first_occurrence), after_date)
        logger.debug("No match left this week, resuming at %s", after_date)

    raise RecurrenceError(
        f"no {rule.frequency} occurrence found after {after_date} "
        f"in {_GROUP_STEP_LIMIT} steps"
    )


def events_between(
    rule: RecurrenceRule,
    date_start: date,
    date_end: date,
    start: date | None = None,
) -> Iterator[Occurrence]:
    """Yield every occurrence whose start date lies within both bounds."""
    current = date_start
    while current <= date_end:
        current = next_event_after(rule, current, start)
        if current <= date_end:
            yield Occurrence.spanning(current, rule.duration)
        current += timedelta(days=1)


def next_occurrence(
    rule: RecurrenceRule, start: date, continue_: bool = False
) -> date | None:
    """Return the next date on or after ``start`` that the rule selects.

    Only the period containing ``start`` is searched unless ``continue_`` is
    set, in which case the search rolls into the following periods.
    ``interval`` is not taken into account.
    """
    if rule.frequency == Frequency.WEEKLY:
        return _next_weekly(rule, start, continue_)
    if rule.frequency == Frequency.MONTHLY and rule.by_day:
        return _next_monthly(rule, start, continue_, _month_by_day)
    if rule.frequency == Frequency.MONTHLY and rule.by_month_day:
        return _next_monthly(rule, start, continue_, _month_by_month_day)
    return None


def first_day(rule: RecurrenceRule) -> int | None:
    """Index in ``by_day`` of the entry with the earliest weekday."""
    if not rule.by_day:
        return None
    if rule.frequency == Frequency.WEEKLY or rule.frequency == Frequency.MONTHLY:
        days = rule.by_day
        return min(range(len(days)), key=lambda index: days[index].weekday)
    return None


def first_group(rule: RecurrenceRule, event_start: date) -> date | None:
    """Return the date of the earliest scheduled weekday in ``event_start``'s week.

    This may be before ``event_start``: for a Mon/Wed/Fri rule and a Friday,
    it is the Monday of that week.
    """
    if rule.frequency != Frequency.WEEKLY:
        return None
    wday = rule.by_day[first_day(rule)].weekday
    return event_start + timedelta(days=wday - weekday_of(event_start))


def next_group(
    rule: RecurrenceRule, first_occurrence: date, after_date: date
) -> date | None:
    """Return the first group start on or after ``after_date``.

    Groups repeat every ``7 * interval`` days from ``first_occurrence``.
    """
    if rule.frequency != Frequency.WEEKLY:
        return None
    period = 7 * rule.interval
    diff = (after_date - first_occurrence).days
    periods = -(-diff // period)
    return first_occurrence + timedelta(days=periods * period)


def _in_active_group(rule: RecurrenceRule, first_occurrence: date, day: date) -> bool:
    if rule.interval == 1:
        return True
    group = first_group(rule, first_occurrence)
    week_of_group = group - timedelta(days=weekday_of(group))
    weeks = (day - week_of_group).days // 7
    return weeks % rule.interval == 0


def _next_weekly(rule: RecurrenceRule, start: date, continue_: bool) -> date | None:
    wday = weekday_of(start)
    later = [selector.weekday for selector in rule.by_day if wday <= selector.weekday]
    if later:
        day = min(later)
    elif continue_:
        day = rule.by_day[first_day(rule)].weekday
        start += timedelta(days=7)
    else:
        return None
    return start + timedelta(days=day - wday)


def _next_monthly(
    rule: RecurrenceRule,
    start: date,
    continue_: bool,
    candidates: Callable[[RecurrenceRule, date], list[date]],
) -> date | None:
    for _ in range(_MONTH_SCAN_LIMIT):
        matches = [day for day in candidates(rule, start) if day >= start]
        if matches:
            return min(matches)
        if not continue_:
            return None
        start = first_of_next_month(start)
    raise RecurrenceError(
        f"no monthly occurrence within {_MONTH_SCAN_LIMIT} months of {start}"
    )


def _month_by_day(rule: RecurrenceRule, start: date) -> list[date]:
    return [
        nth_weekday_in_month(start.year, start.month, selector.offset, selector.weekday)
        for selector in rule.by_day
    ]


def _month_by_month_day(rule: RecurrenceRule, start: date) -> list[date]:
    length = days_in_month(start.year, start.month)
    return [
        make_date(start.year, start.month, day)
        for day in sorted(rule.by_month_day)
        if abs(day) <= length
    ]
