"""Domain models for recurring schedules."""

from __future__ import annotations

from datetime import date, timedelta
from enum import IntEnum, StrEnum
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from event_manager.domain.errors import InvalidRule


class Frequency(StrEnum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Weekday(IntEnum):
    """Day of the week, numbered the iCalendar way (Sunday is 0)."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


class DaySelector(NamedTuple):
    """One ``BYDAY`` entry, e.g. ``DaySelector(2, Weekday.TUESDAY)`` for "2TU".

    A positive offset counts from the start of the month, a negative one from
    the end. Weekly rules always use an offset of 1.
    """

    offset: int
    weekday: Weekday


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class RecurrenceRule(BaseModel):
    """A recurrence rule loosely following RFC 2445 section 4.3.10.

    ``duration`` breaks from iCalendar: rather than an explicit end time it is
    the number of days an occurrence spans after the day it is due.
    ``timezone`` is carried along untouched; all date math is done on plain
    calendar dates.
    """

    model_config = ConfigDict(frozen=True)

    frequency: Frequency | None = None
    interval: int = Field(default=1, ge=1)
    by_day: tuple[DaySelector, ...] | None = None
    by_month_day: tuple[int, ...] | None = None
    week_start: Weekday = Weekday.MONDAY
    duration: int = Field(default=0, ge=0)
    anchor_start: date
    timezone: str | None = None

    @field_validator("frequency", mode="before")
    @classmethod
    def _lower_frequency(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or None
        return value

    @field_validator("by_day", mode="before")
    @classmethod
    def _decode_by_day(cls, value: Any) -> Any:
        if isinstance(value, str):
            from event_manager.services.day_tokens import decode_by_day

            return decode_by_day(value)
        return value

    @field_validator("by_month_day", mode="before")
    @classmethod
    def _decode_by_month_day(cls, value: Any) -> Any:
        if isinstance(value, str):
            from event_manager.services.day_tokens import decode_by_month_day

            return decode_by_month_day(value)
        return value

    @field_validator("by_day")
    @classmethod
    def _check_offsets(
        cls, value: tuple[DaySelector, ...] | None
    ) -> tuple[DaySelector, ...] | None:
        if not value:
            return None
        for selector in value:
            if selector.offset == 0:
                raise ValueError("by_day offset must not be 0")
        return value

    @field_validator("by_month_day")
    @classmethod
    def _check_month_days(cls, value: tuple[int, ...] | None) -> tuple[int, ...] | None:
        if not value:
            return None
        for day in value:
            if day == 0 or not -31 <= day <= 31:
                raise ValueError(f"by_month_day entry {day} is not a day of month")
        return value

    def frequency_length(self) -> int | None:
        """Nominal length of one period in days.

        Monthly uses 29 days, which is short for most months but good enough
        to bound the duration.
        """
        if self.frequency == Frequency.WEEKLY:
            return 7 * self.interval
        if self.frequency == Frequency.MONTHLY:
            return 29 * self.interval
        return None

    def problems(self) -> list[str]:
        """Return the reasons this rule cannot be queried (empty when valid)."""
        if self.frequency is None:
            return ["frequency is required"]
        found: list[str] = []
        length = self.frequency_length()
        if length is not None and self.duration > length:
            found.append(
                f"duration of {self.duration} days exceeds the {length}-day "
                f"{self.frequency} period"
            )
        if self.frequency == Frequency.WEEKLY and not self.by_day:
            found.append("weekly rules need by_day")
        if self.frequency == Frequency.MONTHLY and not (
            self.by_day or self.by_month_day
        ):
            found.append("monthly rules need by_day or by_month_day")
        return found

    def is_valid(self) -> bool:
        return not self.problems()

    def ensure_valid(self) -> None:
        found = self.problems()
        if found:
            raise InvalidRule("; ".join(found))


class Occurrence(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date

    @classmethod
    def spanning(cls, start_date: date, duration: int) -> Occurrence:
        return cls(start_date=start_date, end_date=start_date + timedelta(days=duration))

    @model_validator(mode="after")
    def _end_not_before_start(self) -> Occurrence:
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class BuildRuleResponse(BaseModel):
    rule: RecurrenceRule
    rrule: str | None = None
    valid: bool
    problems: list[str] = Field(default_factory=list)


class NextEventRequest(BaseModel):
    rule: RecurrenceRule
    after: date
    start: date | None = None


class NextEventResponse(BaseModel):
    next_date: date
    rrule: str
    timezone: str | None = None


class EventsBetweenRequest(BaseModel):
    rule: RecurrenceRule
    start: date
    end: date
    search_start: date | None = None
