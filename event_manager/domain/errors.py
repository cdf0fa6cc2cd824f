"""Errors raised by the recurrence engine."""

from __future__ import annotations


class RecurrenceError(Exception):
    """Base class for schedule errors."""


class InvalidRule(RecurrenceError):
    """Raised when a query is attempted against a rule that is not valid."""


class InvalidDate(RecurrenceError, ValueError):
    """Raised when a calendar date cannot be constructed."""
