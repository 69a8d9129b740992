"""Centralised error code taxonomy for crawl failures.

These codes are attached to every ``CrawlError``, included in structured logs
and written into the per-run telemetry so that a run explains why a job
failed. The taxonomy is internal-only but should stay stable for reporting.
"""
from __future__ import annotations


class ErrorCode:
    CONFIGURATION = "configuration_error"
    NO_RESULTS = "no_results"
    TOO_MANY_RESULTS = "too_many_results"
    UNRECOGNIZED_RESPONSE = "unrecognized_response"
    STEP_TIMEOUT = "step_timeout"
    NAVIGATION = "navigation_error"
    EXTRACTION_EMPTY = "extraction_empty"
    REQUEST_LIMIT = "request_limit_reached"
    INTERNAL = "internal_error"


__all__ = ["ErrorCode"]
