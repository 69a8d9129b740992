"""Playwright session management and bounded wait primitives.

Every wait in the crawl goes through one of the helpers below so that it
carries an explicit upper bound. A bound that elapses raises
``StepTimeoutError`` (or, for ``wait_for_any_selector``, returns ``None``)
instead of surfacing Playwright's own timeout type to the crawl steps.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from playwright.sync_api import (
    Error as PWError,
    Page,
    TimeoutError as PWTimeout,
    sync_playwright,
)

from . import config
from .errors import NavigationError, StepTimeoutError
from .logging_utils import _scraper_event
from .utils import log_line

_ANY_SELECTOR_PRESENT_JS = "(sels) => sels.some((s) => document.querySelector(s) !== null)"


@contextmanager
def open_browser_session(*, headless: bool) -> Iterator[Page]:
    """Launch Chromium and yield a single page; closes everything on exit."""

    with sync_playwright() as pw:
        browser = pw.chromium.launch(headless=headless)
        context = browser.new_context(user_agent=config.USER_AGENT, locale="en-US")
        page = context.new_page()
        page.set_default_navigation_timeout(config.NAV_TIMEOUT_SECONDS * 1000)
        log_line(f"[BROWSER] Chromium launched (headless={headless})")
        try:
            yield page
        finally:
            try:
                context.close()
            finally:
                browser.close()


def wait_seconds(page: Optional[Page], seconds: float) -> None:
    """Settle pause of ``seconds``, only while *page* remains open."""

    if page is None:
        return

    if seconds is None or seconds <= 0:
        return

    if not page.is_closed():
        page.wait_for_timeout(int(seconds * 1000))


def navigate(page: Page, url: str, *, label: str, wait_until: str = "load") -> None:
    """Navigate to ``url`` within ``NAV_TIMEOUT_SECONDS``."""

    timeout_ms = config.NAV_TIMEOUT_SECONDS * 1000
    _scraper_event("nav", step="goto", job_label=label, url=url)
    try:
        page.goto(url, wait_until=wait_until, timeout=timeout_ms)
    except PWTimeout as exc:
        log_line(f"[SCRAPER][ERROR][NAV] goto({url!r}) timed out: {exc}")
        raise StepTimeoutError("goto", timeout_ms, detail=url) from exc
    except PWError as exc:
        log_line(f"[SCRAPER][ERROR][NAV] goto({url!r}) failed: {exc}")
        raise NavigationError(url, str(exc)) from exc


def wait_for_load_state_bounded(
    page: Page, state: str, *, timeout_seconds: float, step: str
) -> None:
    timeout_ms = int(timeout_seconds * 1000)
    try:
        page.wait_for_load_state(state, timeout=timeout_ms)
    except PWTimeout as exc:
        raise StepTimeoutError(step, timeout_ms, detail=f"load state {state!r}") from exc


def wait_for_selector_bounded(
    page: Page, selector: str, *, timeout_seconds: float, step: str
) -> None:
    timeout_ms = int(timeout_seconds * 1000)
    try:
        page.wait_for_selector(selector, timeout=timeout_ms)
    except PWTimeout as exc:
        raise StepTimeoutError(step, timeout_ms, detail=f"selector {selector!r}") from exc


def wait_for_any_selector(
    page: Page, selectors: Sequence[str], *, timeout_seconds: float
) -> Optional[str]:
    """Wait until one of ``selectors`` is in the DOM.

    Returns the first selector (in the given order) that matches, or ``None``
    when the bound elapsed without any of them appearing.
    """

    try:
        page.wait_for_function(
            _ANY_SELECTOR_PRESENT_JS,
            arg=list(selectors),
            timeout=int(timeout_seconds * 1000),
        )
    except PWTimeout:
        return None

    for selector in selectors:
        if page.query_selector(selector) is not None:
            return selector
    return None


__all__ = [
    "open_browser_session",
    "wait_seconds",
    "navigate",
    "wait_for_load_state_bounded",
    "wait_for_selector_bounded",
    "wait_for_any_selector",
]
