"""Pure rate computation for CPI observations."""

from __future__ import annotations

import math

from cpicalc.errors import InvalidIndexError
from cpicalc.models import RateResult


def cumulative_change(cpi_start: float, cpi_end: float) -> float:
    """Cumulative change in percent (3.6 = 3.6%)."""
    return (cpi_end / cpi_start - 1) * 100


def compute_rate(cpi_start: float, cpi_end: float) -> RateResult:
    """Build the result shown for a start/end pair of index levels.

    A zero, negative or non-finite start level cannot anchor a percentage
    change and raises InvalidIndexError.
    """
    if not math.isfinite(cpi_start) or cpi_start <= 0:
        raise InvalidIndexError(f"Invalid start index level: {cpi_start}")
    return RateResult(
        cpi_start=cpi_start,
        cpi_end=cpi_end,
        rate=cumulative_change(cpi_start, cpi_end),
    )
