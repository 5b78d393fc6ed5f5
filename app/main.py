from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import FastAPI

from app.schemas.health import HealthResponse

_INT_SETTINGS = (
    "HMPI_CSV_MAX_CELL_ISSUES",
    "HMPI_TOP_DISTRICTS_LIMIT",
    "HMPI_TOP_EXCEEDANCES_LIMIT",
    "HMPI_EXPORT_DECIMALS",
)


def _validate_env() -> None:
    """
    Validate report configuration at startup.

    Raises RuntimeError listing every invalid variable so the operator can
    fix all problems in one restart cycle.

    Rules:
    - HMPI_DEFAULT_INPUT_UNIT, when set, must be a known unit label.
    - HMPI_STANDARDS_PROFILES_PATH, when set, must point to a readable file.
    - The profile rules must load and HMPI_DEFAULT_PROFILE must resolve.
    - Integer settings, when set, must parse as integers.
    """

    from app.config import load_env_files
    from standards.profiles import UnknownStandardsProfile, load_profile_registry
    from standards.registry import InvalidStandard
    from standards.units import parse_unit

    load_env_files()

    errors: list[str] = []

    # --- Input unit -----------------------------------------------------
    unit = os.getenv("HMPI_DEFAULT_INPUT_UNIT", "").strip()
    if unit:
        try:
            parse_unit(unit)
        except ValueError as exc:
            errors.append(f"HMPI_DEFAULT_INPUT_UNIT is not valid: {exc}")

    # --- Standards profiles ---------------------------------------------
    profiles_path = os.getenv("HMPI_STANDARDS_PROFILES_PATH", "").strip()
    if profiles_path and not Path(profiles_path).is_file():
        errors.append(f"HMPI_STANDARDS_PROFILES_PATH='{profiles_path}' does not exist or is not a file.")
    else:
        try:
            registry = load_profile_registry(profiles_path or None)
        except (InvalidStandard, UnknownStandardsProfile) as exc:
            errors.append(f"Standards profiles could not be loaded: {exc}")
        else:
            default_profile = os.getenv("HMPI_DEFAULT_PROFILE", "").strip()
            if default_profile:
                try:
                    registry.get(default_profile)
                except UnknownStandardsProfile as exc:
                    errors.append(f"HMPI_DEFAULT_PROFILE is not valid: {exc}")

    # --- Integer settings -----------------------------------------------
    for name in _INT_SETTINGS:
        raw_value = os.getenv(name, "").strip()
        if not raw_value:
            continue
        try:
            int(raw_value)
        except ValueError:
            errors.append(f"{name}='{raw_value}' is not an integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Load the standards profiles once on boot."""
    from app.config import get_profile_registry

    registry = get_profile_registry()
    logging.getLogger(__name__).info(
        "Standards profiles loaded: %s (default=%s)",
        ", ".join(registry.names()),
        registry.default().key,
    )
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="HMPI Water Quality API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import indices_router, reports_router, standards_router
    from app.config import get_profile_registry

    application.include_router(standards_router)
    application.include_router(indices_router)
    application.include_router(reports_router)

    @application.get("/health")
    def healthcheck() -> HealthResponse:
        registry = get_profile_registry()
        return HealthResponse(profiles=len(registry), default_profile=registry.default().key)

    return application


app = create_app()
