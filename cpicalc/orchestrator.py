"""Validation, sequencing and state for one CPI rate calculation.

Pipeline per calculation:
    1. Validate the month pair (no HTTP on failure)
    2. ``source.prepare`` (ONS version, BLS year range)
    3. Start observation, then end observation, awaited in order
    4. Rate computation
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

import httpx

from cpicalc import calculator
from cpicalc.errors import CPIError, ValidationError
from cpicalc.models import FetchState, MonthKey, RateResult, Status, normalize
from cpicalc.sources import CPISource

logger = logging.getLogger(__name__)

MISSING_DATES = "Please select both a start date and an end date."
REVERSED_DATES = "Start date must be before end date."
MONTHS_NOT_FOUND = "CPI data not found for the selected months."
FETCH_FAILED = "Failed to fetch CPI data: {message}"

# Failures reported as a failed calculation rather than raised
FETCH_ERRORS = (CPIError, httpx.HTTPError, ValueError)


def validate_period(
    start: MonthKey | None, end: MonthKey | None
) -> tuple[MonthKey, MonthKey]:
    if start is None or end is None:
        raise ValidationError(MISSING_DATES)
    if start > end:
        raise ValidationError(REVERSED_DATES)
    return start, end


async def fetch_rate(
    client: httpx.AsyncClient,
    source: CPISource,
    start: MonthKey,
    end: MonthKey,
) -> RateResult:
    """Run the source lookups in order and compute the cumulative change.

    Raises CPIError (or an httpx transport error) on any failure.
    """
    context = await source.prepare(client, start, end)
    cpi_start = await source.fetch_observation(client, start, context)
    cpi_end = await source.fetch_observation(client, end, context)
    logger.debug("%s CPI %s=%s %s=%s", source.country, start, cpi_start, end, cpi_end)

    if cpi_start is None or cpi_end is None:
        raise CPIError(MONTHS_NOT_FOUND)
    return calculator.compute_rate(cpi_start, cpi_end)


def _failure_message(exc: Exception) -> str:
    message = str(exc) or type(exc).__name__
    return FETCH_FAILED.format(message=message)


async def calculate_rate(
    client: httpx.AsyncClient,
    source: CPISource,
    start_date: date | MonthKey | None,
    end_date: date | MonthKey | None,
) -> FetchState:
    """Compute the rate for a picked date pair; returns a terminal state."""
    try:
        start, end = normalize(start_date), normalize(end_date)
    except ValueError as exc:
        return FetchState.failed(str(exc))
    try:
        validate_period(start, end)
    except ValidationError as exc:
        return FetchState.failed(str(exc), start, end)
    assert start is not None and end is not None

    try:
        result = await fetch_rate(client, source, start, end)
    except FETCH_ERRORS as exc:
        logger.warning("%s calculation %s..%s failed: %s", source.country, start, end, exc)
        return FetchState.failed(_failure_message(exc), start, end)
    return FetchState.success(start, end, result)


class RateCalculator:
    """Per-country calculator session.

    Holds the picked months and the current FetchState. Each ``calculate``
    call supersedes any earlier one still in flight: the earlier outcome is
    discarded when it arrives.
    """

    def __init__(
        self,
        source: CPISource,
        client: httpx.AsyncClient,
        on_change: Callable[[FetchState], None] | None = None,
    ) -> None:
        self.source = source
        self.client = client
        self.on_change = on_change
        self.start: MonthKey | None = None
        self.end: MonthKey | None = None
        self.state = FetchState()
        self._generation = 0

    def select_start(self, value: date | MonthKey | None) -> None:
        self.start = normalize(value)

    def select_end(self, value: date | MonthKey | None) -> None:
        self.end = normalize(value)

    def _set_state(self, state: FetchState) -> None:
        self.state = state
        if self.on_change is not None:
            self.on_change(state)

    async def calculate(self) -> FetchState:
        self._generation += 1
        generation = self._generation
        start, end = self.start, self.end

        try:
            validate_period(start, end)
        except ValidationError as exc:
            self._set_state(FetchState.failed(str(exc), start, end))
            return self.state

        self._set_state(FetchState(Status.LOADING, start, end))
        outcome: FetchState | None = None
        try:
            outcome = await calculate_rate(self.client, self.source, start, end)
        finally:
            if generation == self._generation:
                if outcome is None:
                    # cancelled before an outcome arrived
                    outcome_state = FetchState(Status.IDLE, start, end)
                else:
                    outcome_state = outcome
                self._set_state(outcome_state)
            else:
                logger.debug("Discarding superseded calculation %d", generation)
        assert outcome is not None
        return outcome
