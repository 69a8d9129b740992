"""Walks the result listing page by page, queueing every detail link."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional
from urllib.parse import urljoin, urlparse

from playwright.sync_api import Page

from . import config
from .browser import wait_seconds
from .logging_utils import _scraper_event
from .models import CrawlJob
from .selectors import PORTAL_SELECTORS, PortalSelectors
from .utils import log_line, log_warning

EnqueueFn = Callable[[CrawlJob], bool]


@dataclass
class PaginationSummary:
    pages_visited: int = 0
    links_found: int = 0
    links_enqueued: int = 0
    stop_reason: str = ""


def _same_host(url: str, base_url: str) -> bool:
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"}:
        return False
    return parsed.hostname == urlparse(base_url).hostname


def collect_result_links(page: Page, *, selectors: PortalSelectors = PORTAL_SELECTORS) -> List[str]:
    """Absolute hrefs of every result-row anchor on the current page.

    Relative links are resolved against the page URL; links pointing to a
    different host are dropped.
    """

    base_url = page.url
    links: List[str] = []
    for anchor in page.query_selector_all(selectors.result_links):
        href = (anchor.get_attribute("href") or "").strip()
        if not href or href.startswith("#"):
            continue
        absolute = urljoin(base_url, href)
        if not _same_host(absolute, base_url):
            continue
        links.append(absolute)
    return links


def walk_result_pages(
    page: Page,
    enqueue: EnqueueFn,
    *,
    max_pages: Optional[int] = None,
    page_budget: Optional[int] = None,
    deadline: Optional[float] = None,
    settle_seconds: Optional[float] = None,
    selectors: PortalSelectors = PORTAL_SELECTORS,
) -> PaginationSummary:
    """Queue detail jobs for each result page until there is no enabled "next".

    Page N's rows are always queued before page N+1 is requested. The walker
    does not deduplicate; ``enqueue`` decides what it accepts.

    The walk also stops after ``page_budget`` pages (what the run's job
    ceiling still allows) and once ``deadline``, a ``time.monotonic()``
    timestamp, has passed.
    """

    pause = config.PAGINATION_SETTLE_SECONDS if settle_seconds is None else settle_seconds
    summary = PaginationSummary()

    while True:
        summary.pages_visited += 1
        links = collect_result_links(page, selectors=selectors)
        summary.links_found += len(links)
        accepted = sum(1 for url in links if enqueue(CrawlJob.detail(url)))
        summary.links_enqueued += accepted
        _scraper_event(
            "pagination",
            page_number=summary.pages_visited,
            links=len(links),
            enqueued=accepted,
        )

        if max_pages is not None and summary.pages_visited >= max_pages:
            summary.stop_reason = "max_pages"
            log_line(f"Reached page ceiling ({max_pages}); stopping pagination.")
            break

        if page_budget is not None and summary.pages_visited >= page_budget:
            summary.stop_reason = "request_limit"
            log_warning(f"Job limit allows no more than {page_budget} result pages; stopping pagination.")
            break

        if deadline is not None and time.monotonic() >= deadline:
            summary.stop_reason = "handler_timeout"
            log_warning(
                f"Pagination exceeded the handler budget after {summary.pages_visited} pages; stopping."
            )
            break

        next_button = page.query_selector(selectors.next_page)
        if next_button is None:
            summary.stop_reason = "last_page"
            log_line("No more pages to paginate.")
            break

        log_line("Navigating to next page...")
        next_button.click()
        wait_seconds(page, pause)

    return summary


__all__ = ["PaginationSummary", "collect_result_links", "walk_result_pages"]
