"""HTML parsing for trademark detail pages."""
from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag
from playwright.sync_api import Page

from .errors import ExtractionEmptyWarning
from .models import TrademarkRecord
from .selectors import PORTAL_SELECTORS, PortalSelectors

# Order matters: a label containing several phrases maps to the first one listed.
FIELD_LABELS: Tuple[Tuple[str, str], ...] = (
    ("Name/Title", "nameTitle"),
    ("Status", "status"),
    ("Application date", "applicationDate"),
    ("Revelation date", "revelationDate"),
    ("Application number", "applicationNumber"),
    ("Category of rights", "categoryOfRights"),
    ("Registration number", "registrationNumber"),
    ("Trademark type", "trademarkType"),
)

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: Optional[str]) -> str:
    return _WHITESPACE.sub(" ", (text or "").strip())


def match_label(label_text: str) -> Optional[str]:
    for phrase, field_name in FIELD_LABELS:
        if phrase in label_text:
            return field_name
    return None


def _cell_value(cell: Tag, selectors: PortalSelectors) -> Optional[str]:
    highlight = cell.select_one(selectors.highlight)
    value = highlight.get_text().strip() if highlight is not None else ""
    if not value:
        value = collapse_whitespace(cell.get_text())
    return value or None


def extract_fields(html: str, *, selectors: PortalSelectors = PORTAL_SELECTORS) -> TrademarkRecord:
    """Build a record from the ``label | value`` cell pairs of the details table.

    Cells of each row are read two at a time. A pair is used only when the
    first cell carries the label class and a value cell follows it.
    """

    soup = BeautifulSoup(html, "html5lib")
    values: Dict[str, Optional[str]] = {}

    for row in soup.select(selectors.detail_rows):
        cells = row.find_all("td")
        for index in range(0, len(cells), 2):
            label_cell = cells[index]
            value_cell = cells[index + 1] if index + 1 < len(cells) else None
            if value_cell is None:
                continue
            if selectors.detail_label_class not in (label_cell.get("class") or []):
                continue

            field_name = match_label(collapse_whitespace(label_cell.get_text()))
            if field_name is None:
                continue
            values[field_name] = _cell_value(value_cell, selectors)

    return TrademarkRecord(values=values)


def extract_detail_record(
    page: Page, *, selectors: PortalSelectors = PORTAL_SELECTORS
) -> TrademarkRecord:
    """Extract the rendered detail page; raises when no known label was found."""

    record = extract_fields(page.content(), selectors=selectors)
    if record.is_empty():
        raise ExtractionEmptyWarning(f"No data extracted from: {page.url}")
    return record


__all__ = [
    "FIELD_LABELS",
    "collapse_whitespace",
    "match_label",
    "extract_fields",
    "extract_detail_record",
]
