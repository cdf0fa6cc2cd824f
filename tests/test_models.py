"""Tests for RecurrenceRule validation."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from event_manager.domain.errors import InvalidRule
from event_manager.domain.models import (
    DaySelector,
    Frequency,
    Occurrence,
    RecurrenceRule,
    Weekday,
)

_ANCHOR = date(2013, 1, 7)


def _weekly(**overrides) -> RecurrenceRule:
    fields = dict(frequency="weekly", by_day="mo,we,fr", anchor_start=_ANCHOR)
    fields.update(overrides)
    return RecurrenceRule(**fields)


def test_tokens_are_decoded_on_construction():
    rule = _weekly(frequency="Weekly")
    assert rule.frequency == Frequency.WEEKLY
    assert rule.by_day == (
        DaySelector(1, Weekday.MONDAY),
        DaySelector(1, Weekday.WEDNESDAY),
        DaySelector(1, Weekday.FRIDAY),
    )
    assert rule.interval == 1
    assert rule.duration == 0
    assert rule.week_start == Weekday.MONDAY


def test_month_days_accept_token_string():
    rule = RecurrenceRule(frequency="monthly", by_month_day="4,-2", anchor_start=_ANCHOR)
    assert rule.by_month_day == (4, -2)


def test_empty_selectors_become_none():
    rule = RecurrenceRule(frequency="monthly", by_day="", anchor_start=_ANCHOR)
    assert rule.by_day is None


def test_rule_without_frequency_is_invalid():
    rule = RecurrenceRule(by_day="mo", anchor_start=_ANCHOR)
    assert not rule.is_valid()
    with pytest.raises(InvalidRule, match="frequency is required"):
        rule.ensure_valid()


def test_weekly_duration_is_bounded_by_interval():
    assert _weekly(duration=7).is_valid()
    assert not _weekly(duration=8).is_valid()
    assert _weekly(interval=2, duration=14).is_valid()


def test_monthly_duration_is_bounded_by_29_days():
    rule = RecurrenceRule(frequency="monthly", by_month_day=[1], anchor_start=_ANCHOR)
    assert rule.model_copy(update={"duration": 29}).is_valid()
    assert not rule.model_copy(update={"duration": 30}).is_valid()


def test_rules_need_day_selectors():
    assert "weekly rules need by_day" in _weekly(by_day=None).problems()
    monthly = RecurrenceRule(frequency="monthly", anchor_start=_ANCHOR)
    assert monthly.problems() == ["monthly rules need by_day or by_month_day"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"interval": 0},
        {"duration": -1},
        {"by_day": "0mo"},
        {"by_day": "mo,zz"},
        {"by_month_day": [0]},
        {"by_month_day": [32]},
        {"frequency": "daily"},
    ],
)
def test_field_errors_are_rejected_on_construction(overrides):
    with pytest.raises(ValidationError):
        _weekly(**overrides)


def test_rule_is_frozen():
    rule = _weekly()
    with pytest.raises(ValidationError):
        rule.interval = 3


def test_occurrence_spans_duration():
    occurrence = Occurrence.spanning(date(2013, 1, 30), 3)
    assert occurrence.end_date == date(2013, 2, 2)
