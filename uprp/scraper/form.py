"""Brings the advanced search form into the state the crawl expects."""
from __future__ import annotations

from typing import Dict, Iterable

from playwright.sync_api import Page

from . import config
from .browser import wait_seconds
from .logging_utils import _scraper_event
from .models import CrawlOptions
from .selectors import PORTAL_SELECTORS, PortalSelectors
from .utils import log_line

_CHECKBOX_PROXY_JS = (
    "(el, sel) => { const widget = el.closest(sel.widget);"
    " return widget ? widget.querySelector(sel.box) : null; }"
)


def configure_checkboxes(
    page: Page,
    target_ids: Iterable[str] = config.TARGET_CHECKBOX_IDS,
    *,
    selectors: PortalSelectors = PORTAL_SELECTORS,
) -> Dict[str, int]:
    """Check every checkbox in ``target_ids`` and clear all others.

    Returns counts of toggled, unchanged and skipped checkboxes. A checkbox
    whose clickable widget box cannot be found is skipped.
    """

    wanted = set(target_ids)
    counts = {"toggled": 0, "unchanged": 0, "skipped": 0}

    for checkbox in page.query_selector_all(selectors.checkbox):
        checkbox_id = checkbox.get_attribute("id")
        if not checkbox_id:
            continue

        should_be_checked = checkbox_id in wanted
        if checkbox.is_checked() == should_be_checked:
            counts["unchanged"] += 1
            continue

        handle = checkbox.evaluate_handle(
            _CHECKBOX_PROXY_JS,
            {"widget": selectors.checkbox_widget, "box": selectors.checkbox_box},
        )
        box = handle.as_element()
        if box is None:
            counts["skipped"] += 1
            _scraper_event(
                "form",
                step="checkbox_proxy_missing",
                checkbox_id=checkbox_id,
                target=should_be_checked,
            )
            continue

        box.click()
        wait_seconds(page, config.CHECKBOX_SETTLE_SECONDS)
        counts["toggled"] += 1

    _scraper_event("form", step="checkboxes", **counts)
    return counts


def input_date_value(page: Page, selector: str, value: str) -> None:
    """Replace the content of a masked date input one keystroke at a time."""

    page.click(selector)
    page.keyboard.press("Control+A")
    page.keyboard.press("Backspace")
    page.type(selector, value, delay=config.DATE_KEYSTROKE_DELAY_MS)
    wait_seconds(page, config.DATE_SETTLE_SECONDS)


def fill_search_form(
    page: Page,
    options: CrawlOptions,
    *,
    selectors: PortalSelectors = PORTAL_SELECTORS,
) -> Dict[str, str]:
    """Configure checkboxes and both date inputs; returns ``{selector: value}``.

    With ``SWAP_DATE_INPUTS`` on (the default) the end date is typed into
    the "date from" input and the start date into "date to".
    """

    configure_checkboxes(page, selectors=selectors)

    start = options.start_date.isoformat()
    end = options.end_date.isoformat()
    if config.SWAP_DATE_INPUTS:
        typed = {selectors.date_from: end, selectors.date_to: start}
    else:
        typed = {selectors.date_from: start, selectors.date_to: end}

    _scraper_event(
        "form",
        step="dates",
        swapped=config.SWAP_DATE_INPUTS,
        date_from=typed[selectors.date_from],
        date_to=typed[selectors.date_to],
    )
    if config.SWAP_DATE_INPUTS:
        log_line(
            f"[FORM] Date inputs swapped: 'date from'={end} (end date), "
            f"'date to'={start} (start date)"
        )

    for selector, value in typed.items():
        input_date_value(page, selector, value)
    return typed


__all__ = ["configure_checkboxes", "input_date_value", "fill_search_form"]
