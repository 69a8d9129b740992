from __future__ import annotations

import dataclasses

import pytest

from uprp.scraper import error_codes, selectors
from uprp.scraper.selectors import PORTAL_SELECTORS


@pytest.mark.parametrize("module", [selectors, error_codes])
def test_module_docstring_is_set(module) -> None:
    assert module.__doc__
    assert module.__doc__.strip()


def test_portal_selectors_are_frozen() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        PORTAL_SELECTORS.next_page = "a.next"  # type: ignore[misc]
