from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path
from typing import Literal, Optional

from . import config
from .errors import ConfigurationError
from .logging_utils import _scraper_event
from .models import CrawlOptions
from .utils import log_line

Entrypoint = Literal["cli", "healthcheck", "tests"]

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _raise_config_error(message: str, *, entrypoint: str, error: str) -> None:
    _scraper_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ConfigurationError(message)


def validate_runtime_config(entrypoint: Entrypoint = "cli") -> None:
    """Validate module-level configuration for the given entrypoint.

    Raises ``ConfigurationError`` when a blocking misconfiguration is
    detected. Non-fatal adjustments are logged but do not raise.
    """

    if config.MAX_JOB_RETRIES < 0:
        _scraper_event(
            "state",
            phase="config",
            context="runtime_validation",
            kind="config_adjustment",
            field="MAX_JOB_RETRIES",
            value=config.MAX_JOB_RETRIES,
            adjusted=0,
            entrypoint=entrypoint,
        )
        log_line("[CONFIG] MAX_JOB_RETRIES < 0; clamping to 0.")
        config.MAX_JOB_RETRIES = 0

    if config.MAX_PAGES < 0:
        _raise_config_error(
            "MAX_PAGES must be zero (unlimited) or positive.",
            entrypoint=entrypoint,
            error="max_pages_invalid",
        )

    if config.MAX_REQUESTS_PER_CRAWL < 1:
        _raise_config_error(
            "MAX_REQUESTS_PER_CRAWL must be at least 1.",
            entrypoint=entrypoint,
            error="max_requests_invalid",
        )

    timeout_fields = [
        ("NAV_TIMEOUT_SECONDS", config.NAV_TIMEOUT_SECONDS),
        ("HANDLER_TIMEOUT_SECONDS", config.HANDLER_TIMEOUT_SECONDS),
        ("SEARCH_FORM_TIMEOUT_SECONDS", config.SEARCH_FORM_TIMEOUT_SECONDS),
        ("SUBMIT_TIMEOUT_SECONDS", config.SUBMIT_TIMEOUT_SECONDS),
        ("DETAIL_IDLE_TIMEOUT_SECONDS", config.DETAIL_IDLE_TIMEOUT_SECONDS),
        ("DETAIL_SECTION_TIMEOUT_SECONDS", config.DETAIL_SECTION_TIMEOUT_SECONDS),
    ]

    for field_name, value in timeout_fields:
        if value <= 0:
            _raise_config_error(
                f"{field_name} must be greater than zero.",
                entrypoint=entrypoint,
                error="invalid_timeout",
            )


def parse_iso_date(value: Optional[str], *, field: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date."""

    candidate = (value or "").strip()
    if not candidate:
        raise ConfigurationError(f"{field} is required.")
    if not ISO_DATE_PATTERN.match(candidate):
        raise ConfigurationError(f"Invalid {field} {candidate!r}. Use YYYY-MM-DD.")
    try:
        return datetime.strptime(candidate, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ConfigurationError(f"Invalid {field} {candidate!r}: {exc}") from exc


def build_crawl_options(
    start_date: Optional[str],
    end_date: Optional[str],
    output_file: Optional[str] = None,
    *,
    excel_file: Optional[str] = None,
    max_pages: Optional[int] = None,
    headless: Optional[bool] = None,
    base_url: Optional[str] = None,
) -> CrawlOptions:
    """Validate raw run input and return immutable ``CrawlOptions``."""

    start = parse_iso_date(start_date, field="start date")
    end = parse_iso_date(end_date, field="end date")
    if start > end:
        raise ConfigurationError(
            f"Start date must be before or equal to end date ({start} > {end})."
        )

    if max_pages is None and config.MAX_PAGES > 0:
        max_pages = config.MAX_PAGES
    if max_pages is not None and max_pages < 1:
        raise ConfigurationError("max pages must be a positive number.")

    output = Path(output_file or config.DEFAULT_OUTPUT_FILE).resolve()
    return CrawlOptions(
        start_date=start,
        end_date=end,
        output_file=output,
        excel_file=Path(excel_file).resolve() if excel_file else None,
        max_pages=max_pages,
        headless=config.HEADLESS if headless is None else bool(headless),
        base_url=(base_url or "").strip() or None,
    )


__all__ = [
    "validate_runtime_config",
    "parse_iso_date",
    "build_crawl_options",
    "Entrypoint",
    "ISO_DATE_PATTERN",
]
