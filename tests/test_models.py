"""Tests for month normalisation and state models."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from cpicalc.models import (
    COUNTRIES,
    SUPPORTED_COUNTRIES,
    FetchState,
    MonthKey,
    RateResult,
    Status,
    normalize,
)


class TestNormalize:
    def test_none_stays_unset(self) -> None:
        assert normalize(None) is None

    def test_truncates_to_month(self) -> None:
        key = normalize(date(2023, 3, 17))
        assert key == MonthKey(2023, 3)
        assert key is not None
        assert key.first_day == date(2023, 3, 1)

    def test_discards_time(self) -> None:
        assert normalize(datetime(2024, 12, 31, 23, 59)) == MonthKey(2024, 12)

    @pytest.mark.parametrize(
        "value", [date(2023, 1, 1), date(2023, 1, 31), datetime(2020, 2, 29, 12)]
    )
    def test_idempotent(self, value: date) -> None:
        once = normalize(value)
        assert normalize(once) == once
        assert normalize(once.first_day) == once  # type: ignore[union-attr]


class TestMonthKey:
    def test_parse_month(self) -> None:
        assert MonthKey.parse("2023-03") == MonthKey(2023, 3)

    def test_parse_date(self) -> None:
        assert MonthKey.parse("2024-03-15") == MonthKey(2024, 3)

    def test_parse_rejects_garbage(self) -> None:
        with pytest.raises(ValueError, match="Invalid month"):
            MonthKey.parse("March 2023")

    def test_parse_rejects_impossible_day(self) -> None:
        with pytest.raises(ValueError):
            MonthKey.parse("2023-02-30")

    def test_month_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="1..12"):
            MonthKey(2023, 13)

    def test_year_must_have_four_digits(self) -> None:
        with pytest.raises(ValueError, match="four digits"):
            MonthKey(23, 3)

    def test_ordering(self) -> None:
        assert MonthKey(2023, 12) < MonthKey(2024, 1)
        assert MonthKey(2024, 2) > MonthKey(2024, 1)

    def test_labels(self) -> None:
        key = MonthKey(2023, 9)
        assert key.abbr == "Sep"
        assert key.name == "September"
        assert key.period == "2023-09"
        assert str(key) == "2023-09"


class TestRateResult:
    def test_display_rounding(self) -> None:
        r = RateResult(cpi_start=130.5, cpi_end=135.2, rate=3.6015325670498)
        assert r.cpi_start_display == "130.50"
        assert r.cpi_end_display == "135.20"
        assert r.rate_display == "3.60"


class TestFetchState:
    def test_default_is_idle(self) -> None:
        state = FetchState()
        assert state.status is Status.IDLE
        assert not state.loading
        assert state.result is None
        assert state.error is None

    def test_loading_flag(self) -> None:
        assert FetchState(Status.LOADING).loading

    def test_failed_has_no_result(self) -> None:
        state = FetchState.failed("boom", MonthKey(2023, 1), MonthKey(2023, 2))
        assert state.status is Status.FAILED
        assert state.error == "boom"
        assert state.result is None

    def test_success_has_no_error(self) -> None:
        result = RateResult(100.0, 105.0, 5.0)
        state = FetchState.success(MonthKey(2023, 1), MonthKey(2024, 1), result)
        assert state.status is Status.SUCCESS
        assert state.result is result
        assert state.error is None


class TestCountries:
    def test_supported(self) -> None:
        assert SUPPORTED_COUNTRIES == ["eu", "uk", "us"]

    def test_titles(self) -> None:
        assert COUNTRIES["uk"].title == "Cumulative CPI Rate Calculator UK"
        assert "ECB" in COUNTRIES["eu"].description
        assert "CUSR0000SA0" in COUNTRIES["us"].description
