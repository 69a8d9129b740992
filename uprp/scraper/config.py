"""Configuration constants for the UPRP trademark crawler."""
from __future__ import annotations

import os
from pathlib import Path

DATA_DIR: Path = Path(os.getenv("UPRP_DATA_DIR", "data"))
LOG_DIR: Path = DATA_DIR / "logs"
LOG_FILE: Path = LOG_DIR / "latest.log"
RUNS_DIR: Path = DATA_DIR / "runs"

BASE_URL: str = os.getenv(
    "UPRP_BASE_URL",
    "https://ewyszukiwarka.pue.uprp.gov.pl/search/advanced-search",
)
ADVANCED_SEARCH_PATH: str = "/search/advanced-search"
DEFAULT_OUTPUT_FILE: str = "output.json"


def _env_flag(env_var: str, default: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off", ""}


def _parse_timeout_seconds(env_var: str, default: int, *, minimum: int = 1) -> int:
    """Parse a timeout value in seconds from the environment with bounds."""

    try:
        value = int(os.getenv(env_var, str(default)))
    except ValueError:
        return default
    return max(minimum, value)


HEADLESS: bool = _env_flag("UPRP_HEADLESS", False)
LOG_LEVEL: str = os.getenv("UPRP_LOG_LEVEL", "INFO").strip().upper()

# Playwright timeouts (seconds)
# Navigation timeout for every queued job (page.goto).
NAV_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_NAV_TIMEOUT_SECONDS", 60)
# Overall budget of one job handler; bounds the wait for search results.
HANDLER_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_HANDLER_TIMEOUT_SECONDS", 180)
# The advanced search form container must render within this window.
SEARCH_FORM_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_SEARCH_FORM_TIMEOUT_SECONDS", 20)
# Submit click + navigation.
SUBMIT_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_SUBMIT_TIMEOUT_SECONDS", 15)
# Detail page readiness.
DETAIL_IDLE_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_DETAIL_IDLE_TIMEOUT_SECONDS", 20)
DETAIL_SECTION_TIMEOUT_SECONDS: int = _parse_timeout_seconds(
    "UPRP_DETAIL_SECTION_TIMEOUT_SECONDS", 15
)

# Settle pauses (seconds) and keystroke pacing (milliseconds, as Playwright expects)
CHECKBOX_SETTLE_SECONDS: float = float(os.getenv("UPRP_CHECKBOX_SETTLE_SECONDS", "0.1"))
DATE_SETTLE_SECONDS: float = float(os.getenv("UPRP_DATE_SETTLE_SECONDS", "0.3"))
PAGINATION_SETTLE_SECONDS: float = float(os.getenv("UPRP_PAGINATION_SETTLE_SECONDS", "1.5"))
DETAIL_SETTLE_SECONDS: float = float(os.getenv("UPRP_DETAIL_SETTLE_SECONDS", "1.0"))
DATE_KEYSTROKE_DELAY_MS: int = int(os.getenv("UPRP_DATE_KEYSTROKE_DELAY_MS", "100"))
SUBMIT_CLICK_DELAY_MS: int = int(os.getenv("UPRP_SUBMIT_CLICK_DELAY_MS", "100"))

# Run bounds
MAX_REQUESTS_PER_CRAWL: int = int(os.getenv("UPRP_MAX_REQUESTS_PER_CRAWL", "1000"))
MAX_JOB_RETRIES: int = int(os.getenv("UPRP_MAX_JOB_RETRIES", "3"))
# 0 means no page ceiling; MAX_REQUESTS_PER_CRAWL still applies.
MAX_PAGES: int = int(os.getenv("UPRP_MAX_PAGES", "0"))

# The portal's "date from" input receives the end date and "date to" the start date.
SWAP_DATE_INPUTS: bool = _env_flag("UPRP_SWAP_DATE_INPUTS", True)
DEDUPE_DETAIL_URLS: bool = _env_flag("UPRP_DEDUPE_DETAIL_URLS", True)

# Search form checkboxes that must end up checked; every other one is cleared.
TARGET_CHECKBOX_IDS: tuple[str, ...] = (
    "pwp_criteria_0",
    "collections_criteria_advanced_7",
    "collections_criteria_advanced_7_child_attrs_0",
)

USER_AGENT: str = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

COMMON_HEADERS: dict[str, str] = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9,pl;q=0.8",
    "Connection": "keep-alive",
}

HEALTHCHECK_TIMEOUT_SECONDS: int = _parse_timeout_seconds("UPRP_HEALTHCHECK_TIMEOUT_SECONDS", 15)
