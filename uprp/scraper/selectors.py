"""Selectors for the UPRP e-search portal (PrimeFaces/PrimeNG widgets)."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PortalSelectors:
    """CSS selectors for the advanced search form, result list and detail view.

    Checkboxes are rendered as hidden ``<input>`` elements wrapped by a
    ``.ui-chkbox`` widget; clicking the input does nothing, so the visible
    ``.ui-chkbox-box`` inside the same widget is clicked instead.
    """

    search_container: str = ".search-attr-container"
    checkbox: str = 'input[type="checkbox"]'
    checkbox_widget: str = ".ui-chkbox"
    checkbox_box: str = ".ui-chkbox-box"
    date_from: str = "#attribute_date_from"
    date_to: str = "#attribute_date_to"
    submit: str = ".ui-button-secondary .ui-clickable"

    results_table: str = ".search-table"
    info_message: str = ".tabs-info-message"
    result_links: str = "table tbody tr td a"
    next_page: str = "a.ui-paginator-next:not(.ui-state-disabled)"

    detail_section: str = "section.panel"
    detail_rows: str = "table.details-list tr"
    detail_label_class: str = "detail-title"
    highlight: str = ".highlight"


PORTAL_SELECTORS = PortalSelectors()

__all__ = ["PortalSelectors", "PORTAL_SELECTORS"]
