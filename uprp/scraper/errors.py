"""Exception hierarchy raised by the crawl steps."""
from __future__ import annotations

from typing import Optional

from .error_codes import ErrorCode
from .models import SearchOutcome


class CrawlError(Exception):
    error_code: str = ErrorCode.INTERNAL

    def __init__(self, message: str, *, error_code: Optional[str] = None) -> None:
        super().__init__(message)
        if error_code is not None:
            self.error_code = error_code


class ConfigurationError(CrawlError, ValueError):
    """Invalid or missing run configuration; raised before any browser work."""

    error_code = ErrorCode.CONFIGURATION


class NonRetryableSearchError(CrawlError):
    """The portal answered the search in a way that makes the run pointless."""

    def __init__(
        self,
        outcome: SearchOutcome,
        message: str,
        *,
        portal_message: Optional[str] = None,
    ) -> None:
        code = {
            SearchOutcome.NO_RESULTS: ErrorCode.NO_RESULTS,
            SearchOutcome.TOO_MANY_RESULTS: ErrorCode.TOO_MANY_RESULTS,
        }.get(outcome, ErrorCode.UNRECOGNIZED_RESPONSE)
        super().__init__(message, error_code=code)
        self.outcome = outcome
        self.portal_message = portal_message


class StepTimeoutError(CrawlError):
    error_code = ErrorCode.STEP_TIMEOUT

    def __init__(
        self,
        step: str,
        timeout_ms: Optional[int] = None,
        *,
        detail: str = "",
        outcome: Optional[SearchOutcome] = None,
    ) -> None:
        bound = f" after {timeout_ms} ms" if timeout_ms is not None else ""
        suffix = f": {detail}" if detail else ""
        super().__init__(f"Step '{step}' timed out{bound}{suffix}")
        self.step = step
        self.timeout_ms = timeout_ms
        self.outcome = outcome


class NavigationError(CrawlError):
    error_code = ErrorCode.NAVIGATION

    def __init__(self, url: str, detail: str) -> None:
        super().__init__(f"Navigation to {url} failed: {detail}")
        self.url = url


class ExtractionEmptyWarning(CrawlError):
    """A detail page rendered but none of the known labels were found."""

    error_code = ErrorCode.EXTRACTION_EMPTY


class UnhandledStepError(CrawlError):
    """Wraps any other failure raised while handling a single detail job."""

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"{type(cause).__name__}: {cause}", error_code=ErrorCode.INTERNAL)
        self.url = url
        self.__cause__ = cause


__all__ = [
    "CrawlError",
    "ConfigurationError",
    "NonRetryableSearchError",
    "StepTimeoutError",
    "NavigationError",
    "ExtractionEmptyWarning",
    "UnhandledStepError",
]
