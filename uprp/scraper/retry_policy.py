from __future__ import annotations

from typing import Optional, Tuple

from .error_codes import ErrorCode
from .logging_utils import _scraper_event

RETRYABLE_ERROR_CODES = {
    ErrorCode.STEP_TIMEOUT,
    ErrorCode.NAVIGATION,
}

NON_RETRYABLE_ERROR_CODES = {
    ErrorCode.CONFIGURATION,
    ErrorCode.NO_RESULTS,
    ErrorCode.TOO_MANY_RESULTS,
    ErrorCode.EXTRACTION_EMPTY,
    ErrorCode.REQUEST_LIMIT,
}


def _classify(code: str, attempt_index: int, max_attempts: int) -> Tuple[str, bool]:
    if attempt_index >= max_attempts:
        return "capped", False
    if code in NON_RETRYABLE_ERROR_CODES:
        return "non_retryable", False
    if code in RETRYABLE_ERROR_CODES:
        return "retryable", True
    # Unknown failures get one extra attempt, and only while another remains after it.
    return ("unknown" if code else "missing_error_code"), attempt_index < max_attempts - 1


def decide_retry(
    attempt_index: int,
    max_attempts: int,
    error: BaseException | None = None,
    *,
    error_code: Optional[str] = None,
) -> bool:
    """Decide whether a failed job attempt (1-based) should be re-queued.

    The error code is taken from ``error_code`` or, failing that, from the
    ``error_code`` attribute of ``error``.
    """

    code = (error_code or getattr(error, "error_code", None) or "").strip()
    kind, will_retry = _classify(code, attempt_index, max_attempts)

    fields = {
        "kind": kind,
        "error_code": code or None,
        "attempt": attempt_index,
        "max_attempts": max_attempts,
        "will_retry": will_retry,
    }
    if kind in {"unknown", "missing_error_code"}:
        fields["error_repr"] = repr(error) if error is not None else None

    _scraper_event("state", phase="retry_decision", **fields)
    return will_retry


__all__ = ["decide_retry", "RETRYABLE_ERROR_CODES", "NON_RETRYABLE_ERROR_CODES"]
