"""Async CPI lookups against the ONS (UK), ECB (EU) and BLS (US) APIs.

Every source follows the same two-step shape:
    1. ``prepare`` fetches whatever both lookups depend on (the ONS dataset
       version, the BLS year range) once per calculation
    2. ``fetch_observation`` returns the index level for one month, or None
       when the provider has no entry for it
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from cpicalc.config import Config
from cpicalc.errors import (
    DataUnavailable,
    HttpError,
    NoDataFound,
    NoVersionFound,
    ObservationNotFound,
)
from cpicalc.models import MONTH_ABBR, MonthKey

logger = logging.getLogger(__name__)


def _check_status(resp: httpx.Response) -> None:
    if not resp.is_success:
        logger.warning(
            "%s %s -> %d", resp.request.method, resp.request.url, resp.status_code
        )
        raise HttpError(resp.status_code)


def _json_object(resp: httpx.Response) -> dict[str, Any]:
    data = resp.json()
    return data if isinstance(data, dict) else {}


def _first_object(value: object) -> dict[str, Any]:
    """First element of a JSON array when it is an object, else empty."""
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return {}


def _parse_level(value: object) -> float | None:
    """Index level as float; None when absent or not numeric."""
    if value is None or isinstance(value, (bool, list, dict)):
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


# --- ONS (UK CPIH) ---

ONS_BASE = (
    "https://api.beta.ons.gov.uk/v1/datasets/cpih01/editions/time-series/versions"
)
ONS_GEOGRAPHY = "K02000001"
ONS_AGGREGATE = "CP00"


def ons_time_param(year: int, month: int) -> str:
    """ONS time dimension label, e.g. ``Mar-24``."""
    return f"{MONTH_ABBR[month - 1]}-{str(year)[-2:]}"


async def fetch_latest_version(client: httpx.AsyncClient) -> str:
    """Return the newest version id of the CPIH time series."""
    resp = await client.get(ONS_BASE)
    _check_status(resp)
    data = _json_object(resp)

    version = _first_object(data.get("items")).get("version")
    if not version or isinstance(version, (list, dict)):
        raise NoVersionFound()
    logger.debug("ONS latest CPIH version: %s", version)
    return str(version)


async def fetch_ons_observation(
    client: httpx.AsyncClient,
    year: int,
    month: int,
    version: str,
) -> float:
    """Fetch the UK CPIH level for one month of a dataset version."""
    resp = await client.get(
        f"{ONS_BASE}/{version}/observations",
        params={
            "time": ons_time_param(year, month),
            "geography": ONS_GEOGRAPHY,
            "aggregate": ONS_AGGREGATE,
        },
    )
    _check_status(resp)
    data = _json_object(resp)

    value = _parse_level(_first_object(data.get("observations")).get("observation"))
    if value is None:
        raise ObservationNotFound()
    return value


# --- ECB (euro area HICP) ---

ECB_BASE = "https://data-api.ecb.europa.eu/service/data/ICP/M.U2.N.000000.4.INX"


def _decode_ecb_payload(resp: httpx.Response) -> Any:
    # The ECB answers 200 with an empty body for months not yet published
    if not resp.content.strip():
        raise DataUnavailable()
    try:
        return resp.json()
    except json.JSONDecodeError as exc:
        raise DataUnavailable() from exc


async def fetch_ecb_observation(
    client: httpx.AsyncClient,
    year: int,
    month: int,
) -> float:
    """Fetch the euro area HICP level for one month."""
    period = f"{year}-{month:02d}"
    resp = await client.get(
        ECB_BASE,
        params={"startPeriod": period, "endPeriod": period, "format": "jsondata"},
    )
    _check_status(resp)
    data = _decode_ecb_payload(resp)

    try:
        series = next(iter(data["dataSets"][0]["series"].values()))
        value = series["observations"]["0"][0]
    except (KeyError, IndexError, TypeError, AttributeError, StopIteration) as exc:
        raise ObservationNotFound() from exc
    level = _parse_level(value)
    if level is None:
        raise ObservationNotFound()
    return level


# --- BLS (US CPI-U) ---

BLS_URL = "https://api.bls.gov/publicAPI/v2/timeseries/data/"
BLS_SERIES = "CUSR0000SA0"

_BLS_MONTHS = {abbr: f"{i:02d}" for i, abbr in enumerate(MONTH_ABBR, start=1)}


async def fetch_bls_series(
    client: httpx.AsyncClient,
    start_year: int,
    end_year: int,
    registration_key: str | None = None,
) -> list[dict[str, Any]]:
    """Fetch all monthly CPI-U entries for a range of years.

    Returns the provider's ``{year, period, value}`` entries unchanged.
    """
    payload: dict[str, Any] = {
        "seriesid": [BLS_SERIES],
        "startyear": str(start_year),
        "endyear": str(end_year),
    }
    if registration_key:
        payload["registrationkey"] = registration_key
    else:
        logger.info("No BLS registration key configured; using anonymous access")

    logger.debug("BLS request: %s-%s", start_year, end_year)
    resp = await client.post(BLS_URL, json=payload)
    _check_status(resp)
    data = _json_object(resp)

    results = data.get("Results")
    series = results.get("series") if isinstance(results, dict) else None
    entries = _first_object(series).get("data")
    if not isinstance(entries, list):
        raise NoDataFound()
    entries = [entry for entry in entries if isinstance(entry, dict)]
    if not entries:
        raise NoDataFound()
    return entries


def bls_period_token(month_abbr: str) -> str:
    """``Mar`` -> ``M03``. Unknown abbreviations fall back to ``M01``."""
    return f"M{_BLS_MONTHS.get(month_abbr, '01')}"


def find_bls_value(
    series: list[dict[str, Any]],
    year: int,
    month_abbr: str,
) -> float | None:
    """Return the index level for a month, or None if the series lacks it.

    An entry without a numeric value counts as missing.
    """
    target = bls_period_token(month_abbr)
    for entry in series:
        if entry.get("year") == str(year) and entry.get("period") == target:
            value = _parse_level(entry.get("value"))
            if value is None:
                logger.warning("BLS entry %s %s has no usable value", year, target)
            return value
    logger.debug("BLS series has no entry for %s %s", year, target)
    return None


# --- Source variants ---


class CPISource(ABC):
    """One statistics provider behind the rate pipeline."""

    country: str = ""

    async def prepare(
        self, client: httpx.AsyncClient, start: MonthKey, end: MonthKey
    ) -> Any:
        """Fetch data both month lookups depend on. Default: nothing."""
        return None

    @abstractmethod
    async def fetch_observation(
        self, client: httpx.AsyncClient, month: MonthKey, context: Any
    ) -> float | None:
        """Index level for one month, or None when the provider lacks it."""


class ONSSource(CPISource):
    country = "uk"

    async def prepare(
        self, client: httpx.AsyncClient, start: MonthKey, end: MonthKey
    ) -> str:
        return await fetch_latest_version(client)

    async def fetch_observation(
        self, client: httpx.AsyncClient, month: MonthKey, context: str
    ) -> float:
        return await fetch_ons_observation(client, month.year, month.month, context)


class ECBSource(CPISource):
    country = "eu"

    async def fetch_observation(
        self, client: httpx.AsyncClient, month: MonthKey, context: None
    ) -> float:
        return await fetch_ecb_observation(client, month.year, month.month)


class BLSSource(CPISource):
    country = "us"

    def __init__(self, registration_key: str | None = None) -> None:
        self.registration_key = registration_key

    async def prepare(
        self, client: httpx.AsyncClient, start: MonthKey, end: MonthKey
    ) -> list[dict[str, Any]]:
        return await fetch_bls_series(
            client, start.year, end.year, self.registration_key
        )

    async def fetch_observation(
        self, client: httpx.AsyncClient, month: MonthKey, context: list[dict[str, Any]]
    ) -> float | None:
        return find_bls_value(context, month.year, month.abbr)


def build_source(country: str, config: Config | None = None) -> CPISource:
    """Create the source for a country code (``eu``, ``uk`` or ``us``)."""
    config = config or Config()
    if country == "uk":
        return ONSSource()
    if country == "eu":
        return ECBSource()
    if country == "us":
        return BLSSource(config.bls.registration_key)
    raise ValueError(f"Unsupported country: {country!r}")
