"""Compact text encoding for ``BYDAY`` and ``BYMONTHDAY`` lists.

``by_day`` is stored as comma-joined iCalendar day tokens, each optionally
prefixed with an offset: ``"mo,we,fr"``, ``"2tu"``, ``"-1fr"``.
``by_month_day`` is stored as comma-joined signed integers: ``"4,-2"``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from event_manager.domain.models import DaySelector, Weekday

logger = logging.getLogger(__name__)

DAYS = ("su", "mo", "tu", "we", "th", "fr", "sa")


def encode_by_day(days_of_week: Iterable[str], offset: str = "") -> str:
    """Encode two-letter day names, e.g. ``(["Mo", "We"], "2")`` -> ``"2mo,2we"``.

    Every day gets the same offset. Names that are not iCalendar days are
    dropped.
    """
    offset = str(offset).strip()
    selected: list[str] = []
    for day in days_of_week:
        token = str(day).strip().lower()
        if token in DAYS:
            selected.append(offset + token)
        else:
            logger.debug("Dropping unknown weekday %r", day)
    return ",".join(selected)


def encode_by_month_day(days_of_month: Iterable[int | str]) -> str:
    """Encode month days, dropping zeros and anything that is not a number."""
    selected: list[str] = []
    for day in days_of_month:
        value = _to_int(day)
        if value != 0:
            selected.append(str(value))
    return ",".join(selected)


def decode_by_day(encoded: str) -> list[DaySelector]:
    """Decode ``"mo,we,fr"`` into ``[(1, MONDAY), (1, WEDNESDAY), (1, FRIDAY)]``.

    A bare two-letter token has an implicit offset of 1.
    """
    selectors: list[DaySelector] = []
    for raw in encoded.split(","):
        token = raw.strip().lower()
        if not token:
            continue
        if len(token) == 2:
            offset, name = 1, token
        elif len(token) == 3:
            offset, name = int(token[0]), token[1:]
        else:
            offset, name = int(token[:-2]), token[-2:]
        if name not in DAYS:
            raise ValueError(f"unknown weekday in day token {raw!r}")
        selectors.append(DaySelector(offset, Weekday(DAYS.index(name))))
    return selectors


def decode_by_month_day(encoded: str) -> list[int]:
    return [int(token) for token in encoded.split(",") if token.strip()]


def _to_int(value: int | str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug("Dropping non-numeric month day %r", value)
        return 0
