"""Output formatters for table, JSON, and CSV."""

from __future__ import annotations

import csv
import io
import json
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table

from cpicalc.models import COUNTRIES, FetchState, MonthKey


def month_label(month: MonthKey | None) -> str:
    """``1 March 2023`` style label, em dash when unset."""
    if month is None:
        return "—"
    return f"1 {month.name} {month.year}"


def format_table(country: str, state: FetchState) -> str:
    """Format a successful calculation as a Rich table rendered to string."""
    assert state.result is not None
    info = COUNTRIES[country]
    buf = io.StringIO()
    rich_console = Console(file=buf, width=100, no_color=True)

    rich_console.print(f"{info.title}\n{info.description}\n", end="")

    table = Table(box=box.SIMPLE_HEAD, pad_edge=False, show_header=False)
    table.add_column("Label")
    table.add_column("Value", justify="right")
    table.add_row(f"CPI at {month_label(state.start)}", state.result.cpi_start_display)
    table.add_row(f"CPI at {month_label(state.end)}", state.result.cpi_end_display)
    table.add_row("Cumulative Change", f"{state.result.rate_display}%")
    rich_console.print(table)

    return buf.getvalue()


def format_json(country: str, state: FetchState) -> str:
    """Format a successful calculation as JSON."""
    assert state.result is not None
    info = COUNTRIES[country]
    data: dict[str, Any] = {
        "country": info.code,
        "index": info.index_name,
        "start_month": state.start.period if state.start else None,
        "end_month": state.end.period if state.end else None,
        "cpi_start": round(state.result.cpi_start, 2),
        "cpi_end": round(state.result.cpi_end, 2),
        "cumulative_change_pct": round(state.result.rate, 2),
        "data_source": info.description,
    }
    return json.dumps(data, indent=2)


def format_csv(country: str, state: FetchState) -> str:
    """Format a successful calculation as CSV."""
    assert state.result is not None
    buf = io.StringIO()
    fields = [
        "country",
        "start_month",
        "end_month",
        "cpi_start",
        "cpi_end",
        "cumulative_change_pct",
    ]
    writer = csv.DictWriter(buf, fieldnames=fields)
    writer.writeheader()
    writer.writerow(
        {
            "country": country,
            "start_month": state.start.period if state.start else "",
            "end_month": state.end.period if state.end else "",
            "cpi_start": state.result.cpi_start_display,
            "cpi_end": state.result.cpi_end_display,
            "cumulative_change_pct": state.result.rate_display,
        }
    )
    return buf.getvalue()
