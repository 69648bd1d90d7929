"""Data models for months, rate results and calculator state."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

# Fixed English abbreviations; the statistics APIs do not follow the locale.
MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})(?:-(\d{1,2}))?$")


@dataclass(frozen=True, slots=True, order=True)
class MonthKey:
    """First day of a calendar month."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month must be in 1..12, got {self.month}")
        if not 1000 <= self.year <= 9999:
            raise ValueError(f"Year must have four digits, got {self.year}")

    @classmethod
    def parse(cls, text: str) -> MonthKey:
        """Parse ``YYYY-MM`` or ``YYYY-MM-DD``; the day is discarded."""
        match = _MONTH_RE.match(text.strip())
        if match is None:
            raise ValueError(f"Invalid month: {text!r}. Use YYYY-MM or YYYY-MM-DD.")
        if match.group(3) is not None:
            # Reject impossible days such as 2023-02-30
            return cls.from_date(date.fromisoformat(
                f"{match.group(1)}-{int(match.group(2)):02d}-{int(match.group(3)):02d}"
            ))
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def from_date(cls, value: date) -> MonthKey:
        return cls(value.year, value.month)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def abbr(self) -> str:
        return MONTH_ABBR[self.month - 1]

    @property
    def name(self) -> str:
        return MONTH_NAMES[self.month - 1]

    @property
    def period(self) -> str:
        """``YYYY-MM`` period string."""
        return f"{self.year}-{self.month:02d}"

    def __str__(self) -> str:
        return self.period


def normalize(value: date | MonthKey | None) -> MonthKey | None:
    """Truncate a picked date to its month. ``None`` means unset."""
    if value is None:
        return None
    if isinstance(value, MonthKey):
        return value
    return MonthKey.from_date(value)


def _fmt(value: float) -> str:
    return f"{value:.2f}"


@dataclass(frozen=True, slots=True)
class RateResult:
    cpi_start: float
    cpi_end: float
    rate: float  # percent, 3.6 = 3.6%

    @property
    def cpi_start_display(self) -> str:
        return _fmt(self.cpi_start)

    @property
    def cpi_end_display(self) -> str:
        return _fmt(self.cpi_end)

    @property
    def rate_display(self) -> str:
        return _fmt(self.rate)


class Status(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class FetchState:
    """Snapshot of one calculator's display state."""

    status: Status = Status.IDLE
    start: MonthKey | None = None
    end: MonthKey | None = None
    result: RateResult | None = None
    error: str | None = None

    @property
    def loading(self) -> bool:
        return self.status is Status.LOADING

    @classmethod
    def success(cls, start: MonthKey, end: MonthKey, result: RateResult) -> FetchState:
        return cls(Status.SUCCESS, start, end, result, None)

    @classmethod
    def failed(
        cls, error: str, start: MonthKey | None = None, end: MonthKey | None = None
    ) -> FetchState:
        return cls(Status.FAILED, start, end, None, error)


@dataclass(slots=True)
class CountryInfo:
    code: str
    name: str
    index_name: str
    description: str

    @property
    def title(self) -> str:
        return f"Cumulative CPI Rate Calculator {self.code.upper()}"


# --- Country registry ---

def _build_country_map() -> dict[str, CountryInfo]:
    entries = [
        CountryInfo(
            "eu",
            "Euro area",
            "HICP",
            "Data is obtained from the European Central Bank (ECB) using the "
            "Harmonised Index of Consumer Prices (HICP).",
        ),
        CountryInfo(
            "uk",
            "United Kingdom",
            "CPIH",
            "Data is obtained from the Office for National Statistics (ONS) "
            "Consumer Prices Index including owner occupiers' housing costs (CPIH).",
        ),
        CountryInfo(
            "us",
            "United States",
            "CPI-U",
            "Data sourced from the Bureau of Labor Statistics (BLS) Consumer "
            "Price Index (CPI-U, CUSR0000SA0).",
        ),
    ]
    return {e.code: e for e in entries}


COUNTRIES = _build_country_map()
SUPPORTED_COUNTRIES = list(COUNTRIES.keys())
