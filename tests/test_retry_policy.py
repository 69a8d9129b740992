from __future__ import annotations

import pytest

from uprp.scraper import retry_policy
from uprp.scraper.error_codes import ErrorCode
from uprp.scraper.errors import NavigationError, NonRetryableSearchError, StepTimeoutError
from uprp.scraper.models import SearchOutcome


@pytest.fixture
def event_recorder(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, dict]]:
    events: list[tuple[str, dict]] = []

    def _record(event_phase: str, **fields: object) -> None:
        events.append((event_phase, fields))

    monkeypatch.setattr(retry_policy, "_scraper_event", _record)
    return events


@pytest.mark.parametrize(
    "attempt, expected, kind",
    [
        (1, True, "retryable"),
        (3, True, "retryable"),
        (4, False, "capped"),
        (7, False, "capped"),
    ],
)
def test_step_timeout_retry_limits(
    attempt: int, expected: bool, kind: str, event_recorder: list[tuple[str, dict]]
) -> None:
    result = retry_policy.decide_retry(attempt, 4, StepTimeoutError("goto", 60000))
    assert result is expected
    assert len(event_recorder) == 1
    phase, fields = event_recorder[0]
    assert phase == "state"
    assert fields["phase"] == "retry_decision"
    assert fields["error_code"] == ErrorCode.STEP_TIMEOUT
    assert fields["attempt"] == attempt
    assert fields["max_attempts"] == 4
    assert fields["will_retry"] is expected
    assert fields["kind"] == kind


def test_navigation_error_is_retryable(event_recorder: list[tuple[str, dict]]) -> None:
    error = NavigationError("https://portal.test/x", "net::ERR_CONNECTION_RESET")

    assert retry_policy.decide_retry(1, 2, error) is True
    assert event_recorder[0][1]["error_code"] == ErrorCode.NAVIGATION


@pytest.mark.parametrize(
    "error_code",
    [
        ErrorCode.NO_RESULTS,
        ErrorCode.TOO_MANY_RESULTS,
        ErrorCode.CONFIGURATION,
        ErrorCode.EXTRACTION_EMPTY,
    ],
)
def test_non_retryable_error_codes(error_code: str, event_recorder: list[tuple[str, dict]]) -> None:
    assert error_code in retry_policy.NON_RETRYABLE_ERROR_CODES
    assert retry_policy.decide_retry(1, 4, error_code=error_code) is False
    _, fields = event_recorder[0]
    assert fields["kind"] == "non_retryable"
    assert fields["will_retry"] is False


def test_error_code_is_read_from_the_exception(event_recorder: list[tuple[str, dict]]) -> None:
    error = NonRetryableSearchError(SearchOutcome.NO_RESULTS, "nothing")

    assert retry_policy.decide_retry(1, 4, error) is False
    assert event_recorder[0][1]["error_code"] == ErrorCode.NO_RESULTS


@pytest.mark.parametrize(
    "attempt, max_attempts, expected",
    [
        (1, 4, True),
        (3, 4, False),
        (1, 1, False),
    ],
)
def test_unknown_errors_get_one_fallback_retry(
    attempt: int, max_attempts: int, expected: bool, event_recorder: list[tuple[str, dict]]
) -> None:
    assert retry_policy.decide_retry(attempt, max_attempts, RuntimeError("boom")) is expected
    _, fields = event_recorder[0]
    if attempt < max_attempts:
        assert fields["kind"] == "missing_error_code"
        assert "RuntimeError" in fields["error_repr"]


def test_unlisted_code_is_reported_as_unknown(event_recorder: list[tuple[str, dict]]) -> None:
    retry_policy.decide_retry(1, 4, error_code="weird")

    assert event_recorder[0][1]["kind"] == "unknown"
