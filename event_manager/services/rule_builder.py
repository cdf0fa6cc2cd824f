"""Service for building a RecurrenceRule from untyped form parameters."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

import dateparser

from event_manager.domain.models import Frequency, RecurrenceRule
from event_manager.services.day_tokens import encode_by_day, encode_by_month_day

logger = logging.getLogger(__name__)


def build_rule(params: Mapping[str, Any], today: date | None = None) -> RecurrenceRule:
    """Build a rule from form values.

    Recognised keys: ``freq``, ``interval``, ``days_of_week``,
    ``days_of_week_offset``, ``days_of_month``, ``duration``, ``event_start``
    and ``timezone``. A ``freq`` that is not a supported frequency leaves the
    rule without one, so it fails validation later rather than here.
    ``event_start`` defaults to ``today``.
    """
    fields: dict[str, Any] = {}

    freq = str(params.get("freq") or "").strip().lower()
    if freq in {f.value for f in Frequency}:
        fields["frequency"] = freq
    elif freq:
        logger.info("Unsupported frequency %r; rule left without one", freq)

    if params.get("interval"):
        fields["interval"] = int(params["interval"])

    days_of_week = _as_list(params.get("days_of_week"))
    if days_of_week:
        offset = params.get("days_of_week_offset") or ""
        fields["by_day"] = encode_by_day(days_of_week, str(offset))

    days_of_month = _as_list(params.get("days_of_month"))
    if days_of_month:
        fields["by_month_day"] = encode_by_month_day(days_of_month)

    if params.get("duration") is not None:
        fields["duration"] = int(params["duration"])

    fields["anchor_start"] = _parse_start(params.get("event_start"), today)
    fields["timezone"] = params.get("timezone") or None

    return RecurrenceRule(**fields)


def _parse_start(raw: Any, today: date | None) -> date:
    """Coerce ``event_start`` into a date, parsing strings with dateparser."""
    if raw is None or raw == "":
        return today or date.today()
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    settings = {"PREFER_DATES_FROM": "future", "RETURN_AS_TIMEZONE_AWARE": False}
    if today is not None:
        settings["RELATIVE_BASE"] = datetime.combine(today, datetime.min.time())
    result = dateparser.parse(str(raw), settings=settings)
    if result is None:
        raise ValueError(f"Could not parse event_start {raw!r}")
    return result.date()


def _as_list(raw: Any) -> list[Any]:
    if not raw:
        return []
    if isinstance(raw, str):
        return raw.split(",")
    return list(raw)
