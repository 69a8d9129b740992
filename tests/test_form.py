from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from uprp.scraper import config, form
from uprp.scraper.models import CrawlOptions
from tests.fake_portal import SEARCH_URL, FakePortalPage


def _options() -> CrawlOptions:
    return CrawlOptions(
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
        output_file=Path("output.json"),
    )


def _form_page(**kwargs) -> FakePortalPage:
    page = FakePortalPage(**kwargs)
    page.goto(SEARCH_URL)
    return page


def test_checkboxes_end_in_target_state() -> None:
    page = _form_page()

    counts = form.configure_checkboxes(page)

    state = page.checkbox_state()
    for checkbox_id in config.TARGET_CHECKBOX_IDS:
        assert state[checkbox_id] is True
    assert state["pwp_criteria_1"] is False
    assert state["collections_criteria_advanced_1"] is False
    # checkboxes without an id are left alone
    assert state[None] is True
    assert counts == {"toggled": 5, "unchanged": 0, "skipped": 0}
    assert page.waits_ms.count(int(config.CHECKBOX_SETTLE_SECONDS * 1000)) == 5


def test_checkbox_already_in_target_state_is_not_clicked() -> None:
    page = _form_page(checkboxes={"pwp_criteria_0": True, "other": False})

    counts = form.configure_checkboxes(page)

    assert counts == {"toggled": 0, "unchanged": 2, "skipped": 0}
    assert all(box.box.clicks == 0 for box in page.checkboxes)


def test_checkbox_without_proxy_is_skipped() -> None:
    page = _form_page(
        checkboxes={"pwp_criteria_0": False, "other": True},
        missing_proxy=["pwp_criteria_0"],
    )

    counts = form.configure_checkboxes(page)

    assert counts == {"toggled": 1, "unchanged": 0, "skipped": 1}
    assert page.checkbox_state() == {"pwp_criteria_0": False, "other": False}


def test_date_input_is_cleared_then_typed_with_delay() -> None:
    page = _form_page()

    form.input_date_value(page, "#attribute_date_from", "2024-05-06")

    assert page.inputs["#attribute_date_from"] == "2024-05-06"
    assert page.keyboard.pressed == ["Control+A", "Backspace"]
    assert page.typed == [("#attribute_date_from", "2024-05-06", config.DATE_KEYSTROKE_DELAY_MS)]
    assert page.waits_ms[-1] == int(config.DATE_SETTLE_SECONDS * 1000)


def test_fill_search_form_swaps_start_and_end_dates() -> None:
    page = _form_page()

    typed = form.fill_search_form(page, _options())

    # The portal takes the end date in "date from" and the start date in "date to".
    assert page.inputs["#attribute_date_from"] == "2024-01-31"
    assert page.inputs["#attribute_date_to"] == "2024-01-01"
    assert list(typed) == ["#attribute_date_from", "#attribute_date_to"]


def test_fill_search_form_without_swap(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "SWAP_DATE_INPUTS", False)
    page = _form_page()

    form.fill_search_form(page, _options())

    assert page.inputs["#attribute_date_from"] == "2024-01-01"
    assert page.inputs["#attribute_date_to"] == "2024-01-31"
