from __future__ import annotations

import pytest

from uprp.scraper.error_codes import ErrorCode
from uprp.scraper.errors import (
    ConfigurationError,
    CrawlError,
    ExtractionEmptyWarning,
    NavigationError,
    NonRetryableSearchError,
    StepTimeoutError,
    UnhandledStepError,
)
from uprp.scraper.models import SearchOutcome


@pytest.mark.parametrize(
    "error, code",
    [
        (ConfigurationError("bad"), ErrorCode.CONFIGURATION),
        (StepTimeoutError("search_form", 20000), ErrorCode.STEP_TIMEOUT),
        (NavigationError("https://portal.test", "reset"), ErrorCode.NAVIGATION),
        (ExtractionEmptyWarning("nothing"), ErrorCode.EXTRACTION_EMPTY),
        (NonRetryableSearchError(SearchOutcome.NO_RESULTS, "none"), ErrorCode.NO_RESULTS),
        (NonRetryableSearchError(SearchOutcome.TOO_MANY_RESULTS, "many"), ErrorCode.TOO_MANY_RESULTS),
        (NonRetryableSearchError(SearchOutcome.UNRECOGNIZED, "?"), ErrorCode.UNRECOGNIZED_RESPONSE),
        (UnhandledStepError("https://portal.test", KeyError("x")), ErrorCode.INTERNAL),
    ],
)
def test_every_error_carries_a_code(error: CrawlError, code: str) -> None:
    assert isinstance(error, CrawlError)
    assert error.error_code == code


def test_configuration_error_is_a_value_error() -> None:
    assert isinstance(ConfigurationError("x"), ValueError)


def test_step_timeout_message() -> None:
    error = StepTimeoutError("goto", 60000, detail="https://portal.test/d/1")

    assert str(error) == "Step 'goto' timed out after 60000 ms: https://portal.test/d/1"
    assert error.outcome is None


def test_unhandled_step_error_chains_the_cause() -> None:
    cause = KeyError("x")
    error = UnhandledStepError("https://portal.test/d/1", cause)

    assert error.__cause__ is cause
    assert str(error).startswith("KeyError")


def test_every_error_code_is_raised_or_logged() -> None:
    declared = {
        value for name, value in vars(ErrorCode).items() if not name.startswith("_")
    }
    carried = {
        ConfigurationError("x").error_code,
        StepTimeoutError("goto").error_code,
        NavigationError("https://portal.test", "reset").error_code,
        ExtractionEmptyWarning("x").error_code,
        UnhandledStepError("https://portal.test", KeyError("x")).error_code,
        *(NonRetryableSearchError(outcome, "x").error_code for outcome in SearchOutcome),
    }

    # The job ceiling is reported through structured log events, not an exception.
    assert declared == carried | {ErrorCode.REQUEST_LIMIT}
