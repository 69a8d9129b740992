"""Submits the advanced search and classifies the portal's answer."""
from __future__ import annotations

from typing import Optional

from playwright.sync_api import Page, TimeoutError as PWTimeout

from . import config
from .browser import wait_for_any_selector, wait_for_load_state_bounded, wait_for_selector_bounded
from .errors import NonRetryableSearchError, StepTimeoutError
from .form import fill_search_form
from .logging_utils import _scraper_event
from .models import CrawlOptions, SearchOutcome
from .selectors import PORTAL_SELECTORS, PortalSelectors
from .utils import log_line

NO_RESULTS_MARKER = "no results found"
TOO_MANY_RESULTS_MARKER = "too many results found"

OUTCOME_MESSAGES = {
    SearchOutcome.NO_RESULTS: "No results found for the given criteria",
    SearchOutcome.TOO_MANY_RESULTS: "Too many results found. Please narrow your search criteria",
}


def normalize_message(text: Optional[str]) -> str:
    return (text or "").lower().strip()


def classify_info_message(text: Optional[str]) -> SearchOutcome:
    """Map the portal's informational message to a ``SearchOutcome``.

    No message, or a message that is neither of the two known refusals,
    counts as success: the results table is assumed to be present.
    """

    normalized = normalize_message(text)
    if NO_RESULTS_MARKER in normalized:
        return SearchOutcome.NO_RESULTS
    if TOO_MANY_RESULTS_MARKER in normalized:
        return SearchOutcome.TOO_MANY_RESULTS
    return SearchOutcome.SUCCESS


def read_info_message(page: Page, *, selectors: PortalSelectors = PORTAL_SELECTORS) -> Optional[str]:
    element = page.query_selector(selectors.info_message)
    if element is None:
        return None
    return element.text_content()


def submit_search(page: Page, *, selectors: PortalSelectors = PORTAL_SELECTORS) -> None:
    """Click submit and wait for the resulting navigation, both bounded."""

    timeout_ms = config.SUBMIT_TIMEOUT_SECONDS * 1000
    try:
        with page.expect_navigation(timeout=timeout_ms, wait_until="domcontentloaded"):
            page.click(selectors.submit, delay=config.SUBMIT_CLICK_DELAY_MS, timeout=timeout_ms)
    except PWTimeout as exc:
        raise StepTimeoutError("submit_search", timeout_ms) from exc


def execute_search(
    page: Page,
    options: CrawlOptions,
    *,
    selectors: PortalSelectors = PORTAL_SELECTORS,
) -> SearchOutcome:
    """Fill and submit the search form; leaves the page on the first result page.

    Raises ``NonRetryableSearchError`` for the portal's "no results" and
    "too many results" answers and ``StepTimeoutError`` when neither the
    result table nor a message shows up within the handler budget.
    """

    log_line(
        f"Performing search for date range: {options.start_date.isoformat()} "
        f"to {options.end_date.isoformat()}"
    )

    wait_for_load_state_bounded(
        page, "networkidle", timeout_seconds=config.NAV_TIMEOUT_SECONDS, step="search_page_idle"
    )
    wait_for_selector_bounded(
        page,
        selectors.search_container,
        timeout_seconds=config.SEARCH_FORM_TIMEOUT_SECONDS,
        step="search_form",
    )

    fill_search_form(page, options, selectors=selectors)
    submit_search(page, selectors=selectors)

    matched = wait_for_any_selector(
        page,
        [selectors.results_table, selectors.info_message],
        timeout_seconds=config.HANDLER_TIMEOUT_SECONDS,
    )
    if matched is None:
        _scraper_event("search", outcome=SearchOutcome.UNRECOGNIZED.value)
        raise StepTimeoutError(
            "search_results",
            config.HANDLER_TIMEOUT_SECONDS * 1000,
            detail="neither results table nor info message appeared",
            outcome=SearchOutcome.UNRECOGNIZED,
        )

    portal_message = read_info_message(page, selectors=selectors)
    outcome = classify_info_message(portal_message)
    _scraper_event(
        "search",
        outcome=outcome.value,
        matched=matched,
        portal_message=normalize_message(portal_message) or None,
    )

    if outcome in OUTCOME_MESSAGES:
        raise NonRetryableSearchError(
            outcome,
            OUTCOME_MESSAGES[outcome],
            portal_message=(portal_message or "").strip() or None,
        )
    return outcome


__all__ = [
    "classify_info_message",
    "normalize_message",
    "read_info_message",
    "submit_search",
    "execute_search",
    "OUTCOME_MESSAGES",
]
