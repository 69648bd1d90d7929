"""Configuration loader for cpicalc.

Loads from cpicalc.toml with defaults when the file is absent. The BLS
registration key may also come from the ``BLS_API_KEY`` environment variable,
which takes precedence over the file.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "cpicalc/0.1 (+https://pypi.org/project/cpicalc/)"


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""


@dataclass(frozen=True)
class HttpConfig:
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class BLSConfig:
    registration_key: str | None = None


@dataclass(frozen=True)
class Config:
    http: HttpConfig = field(default_factory=HttpConfig)
    bls: BLSConfig = field(default_factory=BLSConfig)
    path: Path | None = None


def _parse_timeout(value: object, path: Path) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"[http] timeout must be a number in {path}")
    if value <= 0:
        raise ConfigError(f"[http] timeout must be positive in {path}")
    return float(value)


def _env_key() -> str | None:
    return os.environ.get("BLS_API_KEY", "").strip() or None


def load_config(path: Path | None = None) -> Config:
    """Load configuration from a TOML file.

    If path is None, searches for cpicalc.toml in the current directory then
    ~/.cpicalc/. Returns the default config if no file is found.
    """
    if path is None:
        candidates = [
            Path.cwd() / "cpicalc.toml",
            Path.home() / ".cpicalc" / "cpicalc.toml",
        ]
        for candidate in candidates:
            if candidate.exists():
                path = candidate
                break

    if path is None or not path.exists():
        return Config(bls=BLSConfig(registration_key=_env_key()))

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    http_data = raw.get("http", {})
    http = HttpConfig(
        timeout=_parse_timeout(
            http_data.get("timeout", DEFAULT_TIMEOUT_SECONDS), path
        ),
        user_agent=str(http_data.get("user_agent", DEFAULT_USER_AGENT)),
    )

    bls_data = raw.get("bls", {})
    bls = BLSConfig(
        registration_key=_env_key() or (bls_data.get("registration_key") or None),
    )

    return Config(http=http, bls=bls, path=path)
