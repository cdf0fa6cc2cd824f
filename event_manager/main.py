"""FastAPI application — stateless query surface for recurrence rules."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException

from event_manager.config import Settings
from event_manager.domain.errors import RecurrenceError
from event_manager.domain.models import (
    BuildRuleResponse,
    EventsBetweenRequest,
    NextEventRequest,
    NextEventResponse,
    Occurrence,
)
from event_manager.services.recurrence import events_between, next_event_after
from event_manager.services.rrule import compile_rrule
from event_manager.services.rule_builder import build_rule

settings = Settings.from_env()
logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

# queries the engine cannot answer, including dates past date.max
_UNANSWERABLE = (RecurrenceError, OverflowError, ValueError)

app = FastAPI(title="Event Manager Schedule Service")


# ── Routes ────────────────────────────────────────────────────────────


@app.post("/rules", response_model=BuildRuleResponse)
def create_rule(params: dict[str, Any]) -> BuildRuleResponse:
    """Build a rule from untyped form parameters and check that it is usable."""
    try:
        rule = build_rule(params)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    problems = rule.problems()
    if problems:
        return BuildRuleResponse(rule=rule, valid=False, problems=problems)
    return BuildRuleResponse(rule=rule, rrule=compile_rrule(rule), valid=True)


@app.post("/next-event", response_model=NextEventResponse)
def next_event(payload: NextEventRequest) -> NextEventResponse:
    """Return the first occurrence on or after ``payload.after``."""
    rule = payload.rule
    try:
        found = next_event_after(rule, payload.after, payload.start)
    except _UNANSWERABLE as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return NextEventResponse(
        next_date=found, rrule=compile_rrule(rule), timezone=rule.timezone
    )


@app.post("/events", response_model=list[Occurrence])
def list_events(payload: EventsBetweenRequest) -> list[Occurrence]:
    """Return every occurrence starting within ``[start, end]``."""
    window = (payload.end - payload.start).days
    if window > settings.max_window_days:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Window of {window} days exceeds the limit of "
                f"{settings.max_window_days}"
            ),
        )
    try:
        occurrences = list(
            events_between(
                payload.rule, payload.start, payload.end, payload.search_start
            )
        )
    except _UNANSWERABLE as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    logger.info(
        "Expanded %s over %s..%s into %d occurrences",
        compile_rrule(payload.rule),
        payload.start,
        payload.end,
        len(occurrences),
    )
    return occurrences
