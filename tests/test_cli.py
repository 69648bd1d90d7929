"""Tests for CLI entry point."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from cpicalc.cli import main
from cpicalc.models import FetchState, MonthKey, RateResult


def _mock_state() -> FetchState:
    return FetchState.success(
        MonthKey(2023, 3),
        MonthKey(2024, 3),
        RateResult(cpi_start=130.5, cpi_end=135.2, rate=3.6015325670498),
    )


UK_ARGS = ["--country", "uk", "--start", "2023-03", "--end", "2024-03"]


class TestCliSelection:
    def test_no_country(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, [])
        assert result.exit_code == 0
        assert "Select a country" in result.output

    def test_list_countries(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--list-countries"])
        assert result.exit_code == 0
        assert "CPIH" in result.output
        assert "HICP" in result.output
        assert "CPI-U" in result.output

    def test_unknown_country(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--country", "jp"])
        assert result.exit_code != 0

    def test_help(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Cumulative CPI Rate Calculator" in result.output


class TestCliValidation:
    def test_missing_end(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["--country", "uk", "--start", "2023-03"])
        assert result.exit_code == 1
        assert "Please select both a start date and an end date." in result.output

    def test_end_before_start(self) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main, ["--country", "us", "--start", "2024-06", "--end", "2023-01"]
        )
        assert result.exit_code == 1
        assert "Start date must be before end date." in result.output

    def test_invalid_month(self) -> None:
        runner = CliRunner()
        result = runner.invoke(
            main, ["--country", "eu", "--start", "June 2023", "--end", "2024-01"]
        )
        assert result.exit_code != 0
        assert "Invalid month" in result.output

    def test_invalid_config(self, tmp_path) -> None:  # type: ignore[no-untyped-def]
        path = tmp_path / "cpicalc.toml"
        path.write_text("[http\n")
        runner = CliRunner()
        result = runner.invoke(main, [*UK_ARGS, "--config", str(path)])
        assert result.exit_code == 1
        assert "Invalid TOML" in result.output


class TestCliOutput:
    @patch("cpicalc.cli._run_calculation", new_callable=AsyncMock)
    def test_table_output(self, mock_calc: AsyncMock) -> None:
        mock_calc.return_value = _mock_state()
        runner = CliRunner()
        result = runner.invoke(main, UK_ARGS)
        assert result.exit_code == 0
        assert "Cumulative CPI Rate Calculator UK" in result.output
        assert "3.60%" in result.output

        country, start, end, _config = mock_calc.call_args.args
        assert country == "uk"
        assert start == MonthKey(2023, 3)
        assert end == MonthKey(2024, 3)

    @patch("cpicalc.cli._run_calculation", new_callable=AsyncMock)
    def test_country_case_insensitive(self, mock_calc: AsyncMock) -> None:
        mock_calc.return_value = _mock_state()
        runner = CliRunner()
        result = runner.invoke(
            main, ["--country", "UK", "--start", "2023-03-15", "--end", "2024-03-31"]
        )
        assert result.exit_code == 0
        assert mock_calc.call_args.args[0] == "uk"

    @patch("cpicalc.cli._run_calculation", new_callable=AsyncMock)
    def test_json_output(self, mock_calc: AsyncMock) -> None:
        mock_calc.return_value = _mock_state()
        runner = CliRunner()
        result = runner.invoke(main, [*UK_ARGS, "--output", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["cumulative_change_pct"] == 3.6

    @patch("cpicalc.cli._run_calculation", new_callable=AsyncMock)
    def test_csv_output(self, mock_calc: AsyncMock) -> None:
        mock_calc.return_value = _mock_state()
        runner = CliRunner()
        result = runner.invoke(main, [*UK_ARGS, "--output", "csv"])
        assert result.exit_code == 0
        assert "country,start_month" in result.output

    @patch("cpicalc.cli._run_calculation", new_callable=AsyncMock)
    def test_failed_calculation(self, mock_calc: AsyncMock) -> None:
        mock_calc.return_value = FetchState.failed(
            "Failed to fetch CPI data: HTTP error! Status: 500"
        )
        runner = CliRunner()
        result = runner.invoke(main, UK_ARGS)
        assert result.exit_code == 1
        assert "Error: Failed to fetch CPI data: HTTP error! Status: 500" in result.output
