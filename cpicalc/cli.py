"""CLI entry point for cpicalc."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
import httpx
from rich.console import Console

from cpicalc import formatters
from cpicalc.config import Config, ConfigError, load_config
from cpicalc.models import COUNTRIES, SUPPORTED_COUNTRIES, FetchState, MonthKey, Status
from cpicalc.orchestrator import RateCalculator
from cpicalc.sources import build_source


def _parse_month(value: str | None) -> MonthKey | None:
    if not value:
        return None
    try:
        return MonthKey.parse(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


async def _run_calculation(
    country: str,
    start: MonthKey | None,
    end: MonthKey | None,
    config: Config,
) -> FetchState:
    source = build_source(country, config)
    async with httpx.AsyncClient(
        timeout=config.http.timeout,
        headers={"User-Agent": config.http.user_agent},
    ) as client:
        calc = RateCalculator(source, client)
        calc.select_start(start)
        calc.select_end(end)
        return await calc.calculate()


@click.command()
@click.option(
    "--country",
    type=click.Choice(SUPPORTED_COUNTRIES, case_sensitive=False),
    help="Index to use: eu (ECB HICP), uk (ONS CPIH) or us (BLS CPI-U)",
)
@click.option("--start", "start_month", help="Start month (YYYY-MM or YYYY-MM-DD)")
@click.option("--end", "end_month", help="End month (YYYY-MM or YYYY-MM-DD)")
@click.option(
    "--output",
    "output_format",
    default="table",
    type=click.Choice(["table", "json", "csv"]),
    help="Output format",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to cpicalc.toml",
)
@click.option("--list-countries", is_flag=True, help="List supported indices and exit")
@click.option("-v", "--verbose", is_flag=True, help="Log HTTP requests and results")
def main(
    country: str | None,
    start_month: str | None,
    end_month: str | None,
    output_format: str,
    config_path: Path | None,
    list_countries: bool,
    verbose: bool,
) -> None:
    """Cumulative CPI Rate Calculator.

    Computes the cumulative change in a national consumer price index between
    two months, using the ONS (UK), ECB (EU) or BLS (US) public APIs.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if list_countries:
        for info in COUNTRIES.values():
            click.echo(f"{info.code}  {info.index_name:5s}  {info.name}")
        return

    if not country:
        click.echo("Select a country to view the corresponding CPI calculator.\n")
        click.echo(click.get_current_context().get_help())
        return

    country = country.lower()
    start = _parse_month(start_month)
    end = _parse_month(end_month)

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    status_console = Console(stderr=True)
    with status_console.status("Fetching CPI data..."):
        state = asyncio.run(_run_calculation(country, start, end, config))

    if state.status is not Status.SUCCESS:
        click.echo(f"Error: {state.error}", err=True)
        sys.exit(1)

    if output_format == "json":
        click.echo(formatters.format_json(country, state))
    elif output_format == "csv":
        click.echo(formatters.format_csv(country, state), nl=False)
    else:
        click.echo(formatters.format_table(country, state), nl=False)


if __name__ == "__main__":
    main()
