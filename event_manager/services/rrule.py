"""Service for rendering a RecurrenceRule as an RFC 5545 RRULE value."""

from __future__ import annotations

from event_manager.domain.models import DaySelector, Frequency, RecurrenceRule, Weekday
from event_manager.services.day_tokens import DAYS

# Every weekday has at least four occurrences in any month.
_GUARANTEED_ORDINAL = 4


def compile_rrule(rule: RecurrenceRule) -> str:
    """Compile a rule into an RRULE string such as ``FREQ=WEEKLY;BYDAY=MO,WE``.

    The RRULE describes the dates the engine produces when expanded from the
    rule's first occurrence as DTSTART:

    - weekly rules always carry ``WKST=SU``, since weeks are grouped Sunday
      to Saturday;
    - monthly rules never carry ``INTERVAL``, since they advance one month at
      a time;
    - monthly ordinals beyond the fourth are written from the other end of
      the month (``5FR`` becomes ``-1FR``), matching how they are clamped.

    ``duration`` and ``anchor_start`` have no place in the RRULE itself; they
    belong to the event's DTSTART/DTEND. Raises ``InvalidRule`` if the rule is
    not valid.
    """
    rule.ensure_valid()

    parts = [f"FREQ={rule.frequency.upper()}"]
    if rule.frequency == Frequency.WEEKLY and rule.interval > 1:
        parts.append(f"INTERVAL={rule.interval}")
    if rule.by_day:
        parts.append("BYDAY=" + ",".join(_day_token(rule, s) for s in rule.by_day))
    elif rule.by_month_day:
        parts.append("BYMONTHDAY=" + ",".join(str(d) for d in rule.by_month_day))
    if rule.frequency == Frequency.WEEKLY:
        parts.append(f"WKST={_day_abbr(Weekday.SUNDAY)}")

    return ";".join(parts)


def _day_token(rule: RecurrenceRule, selector: DaySelector) -> str:
    # monthly BYDAY always carries its ordinal
    if rule.frequency == Frequency.WEEKLY:
        return _day_abbr(selector.weekday)
    return f"{_exportable_offset(selector.offset)}{_day_abbr(selector.weekday)}"


def _exportable_offset(offset: int) -> int:
    # the fifth (or later) weekday falls back to the last one, and vice versa
    if offset > _GUARANTEED_ORDINAL:
        return -1
    if offset < -_GUARANTEED_ORDINAL:
        return 1
    return offset


def _day_abbr(weekday: Weekday) -> str:
    return DAYS[weekday].upper()
