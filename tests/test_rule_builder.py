"""Tests for building rules from untyped form parameters."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from event_manager.domain.models import DaySelector, Frequency, Weekday
from event_manager.services.rule_builder import build_rule

_TODAY = date(2013, 1, 1)


def test_build_weekly_rule_from_form_strings():
    rule = build_rule(
        {
            "freq": "weekly",
            "interval": "2",
            "days_of_week": ["Mo", "We", "Fr"],
            "duration": "1",
            "event_start": "2013-01-07",
        }
    )
    assert rule.frequency == Frequency.WEEKLY
    assert rule.interval == 2
    assert rule.duration == 1
    assert rule.anchor_start == date(2013, 1, 7)
    assert [s.weekday for s in rule.by_day] == [
        Weekday.MONDAY,
        Weekday.WEDNESDAY,
        Weekday.FRIDAY,
    ]
    assert rule.is_valid()


def test_build_monthly_rule_with_shared_offset():
    rule = build_rule(
        {
            "freq": "Monthly",
            "days_of_week": ["Tu"],
            "days_of_week_offset": "2",
            "event_start": date(2013, 1, 1),
        }
    )
    assert rule.frequency == Frequency.MONTHLY
    assert rule.by_day == (DaySelector(2, Weekday.TUESDAY),)


def test_build_drops_unknown_days_and_zero_month_days():
    rule = build_rule(
        {
            "freq": "monthly",
            "days_of_week": "Mo,Funday",
            "days_of_month": ["-1", "0"],
        },
        today=_TODAY,
    )
    assert rule.by_day == (DaySelector(1, Weekday.MONDAY),)
    assert rule.by_month_day == (-1,)


def test_daily_frequency_is_unsupported():
    rule = build_rule({"freq": "daily", "days_of_week": ["Mo"]}, today=_TODAY)
    assert rule.frequency is None
    assert not rule.is_valid()


def test_event_start_defaults_to_today():
    rule = build_rule({"freq": "weekly", "days_of_week": ["Mo"]}, today=_TODAY)
    assert rule.anchor_start == _TODAY


def test_event_start_accepts_datetimes_and_prose():
    from_datetime = build_rule(
        {"freq": "weekly", "days_of_week": ["Mo"], "event_start": datetime(2013, 1, 7, 9)}
    )
    from_prose = build_rule(
        {"freq": "weekly", "days_of_week": ["Mo"], "event_start": "January 7, 2013"}
    )
    assert from_datetime.anchor_start == date(2013, 1, 7)
    assert from_prose.anchor_start == date(2013, 1, 7)


def test_unparseable_event_start_raises():
    with pytest.raises(ValueError, match="Could not parse event_start"):
        build_rule({"freq": "weekly", "days_of_week": ["Mo"], "event_start": "xyzzy"})


def test_timezone_is_carried_through():
    rule = build_rule(
        {"freq": "weekly", "days_of_week": ["Mo"], "timezone": "America/Chicago"},
        today=_TODAY,
    )
    assert rule.timezone == "America/Chicago"
