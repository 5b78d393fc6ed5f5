"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from standards.profiles import StandardsProfileRegistry, load_profile_registry
from standards.units import ConcentrationUnit

_PROJECT_ROOT = Path(__file__).resolve().parents[1]


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = _PROJECT_ROOT / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_optional_int_env(name: str) -> int | None:
    """
    Read an optional integer; unset, blank or invalid values yield None.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return None
    try:
        return int(raw_value)
    except ValueError:
        return None


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class CSVIngestionSettings:
    """
    Runtime settings for CSV table parsing.
    """

    max_cell_issues: int = 500
    log_cell_issues: bool = True
    strict_cells: bool = False


@dataclass(frozen=True)
class ReportSettings:
    """
    Defaults applied when a report request leaves a choice open.
    """

    default_input_unit: str = ConcentrationUnit.UG_PER_L.value
    default_profile: str | None = None
    top_districts_limit: int = 20
    top_exceedances_limit: int = 8
    export_decimals: int | None = None


@dataclass(frozen=True)
class StandardsSettings:
    """
    Location of the named standards profile configuration.
    """

    profiles_path: str | None = None


@lru_cache(maxsize=1)
def get_csv_ingestion_settings() -> CSVIngestionSettings:
    """
    Return cached CSV parsing settings from environment variables.
    """

    return CSVIngestionSettings(
        max_cell_issues=max(1, _get_int_env("HMPI_CSV_MAX_CELL_ISSUES", 500)),
        log_cell_issues=_get_bool_env("HMPI_CSV_LOG_CELL_ISSUES", True),
        strict_cells=_get_bool_env("HMPI_CSV_STRICT_CELLS", False),
    )


@lru_cache(maxsize=1)
def get_report_settings() -> ReportSettings:
    """
    Return cached report defaults from environment variables.
    """

    decimals = _get_optional_int_env("HMPI_EXPORT_DECIMALS")
    return ReportSettings(
        default_input_unit=_get_str_env("HMPI_DEFAULT_INPUT_UNIT", ConcentrationUnit.UG_PER_L.value),
        default_profile=_get_optional_str_env("HMPI_DEFAULT_PROFILE"),
        top_districts_limit=max(1, _get_int_env("HMPI_TOP_DISTRICTS_LIMIT", 20)),
        top_exceedances_limit=max(1, _get_int_env("HMPI_TOP_EXCEEDANCES_LIMIT", 8)),
        export_decimals=max(0, decimals) if decimals is not None else None,
    )


@lru_cache(maxsize=1)
def get_standards_settings() -> StandardsSettings:
    """
    Return cached standards configuration settings.
    """

    return StandardsSettings(profiles_path=_get_optional_str_env("HMPI_STANDARDS_PROFILES_PATH"))


@lru_cache(maxsize=1)
def get_profile_registry() -> StandardsProfileRegistry:
    """
    Build and cache the named standards profile registry.
    """

    return load_profile_registry(get_standards_settings().profiles_path)
