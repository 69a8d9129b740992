"""Job queue and the crawl state machine.

One run owns one ``CrawlOrchestrator``. The entry job fills and submits the
search form once, then walks the result pages, which feed detail jobs back
into the queue. Each detail job extracts one record. Records are only ever
appended; they are read back once the queue is exhausted.
"""

from __future__ import annotations

import time
from collections import deque
from threading import Lock
from typing import Deque, List, Optional, Set

from playwright.sync_api import Page

from . import config
from .browser import navigate, wait_for_load_state_bounded, wait_for_selector_bounded, wait_seconds
from .error_codes import ErrorCode
from .errors import (
    CrawlError,
    ExtractionEmptyWarning,
    NonRetryableSearchError,
    UnhandledStepError,
)
from .extractor import extract_detail_record
from .logging_utils import _job_event, _scraper_event
from .models import CrawlJob, CrawlOptions, JobKind, SearchOutcome, TrademarkRecord
from .pagination import PaginationSummary, walk_result_pages
from .retry_policy import decide_retry
from .search import execute_search
from .selectors import PORTAL_SELECTORS, PortalSelectors
from .telemetry import (
    STATUS_ABORTED,
    STATUS_EMPTY,
    STATUS_EXTRACTED,
    STATUS_FAILED,
    STATUS_RETRIED,
    STATUS_SEARCHED,
    RunTelemetry,
)
from .utils import log_error, log_line, log_warning


class JobQueue:
    """FIFO of pending jobs with a ceiling on how many may be handled.

    New jobs are deduplicated by URL when ``dedupe`` is set; re-queued
    attempts of a failed job always go back in.
    """

    def __init__(self, *, max_requests: int, dedupe: bool = True) -> None:
        self.max_requests = max(1, max_requests)
        self.dedupe = dedupe
        self.handled = 0
        self._pending: Deque[CrawlJob] = deque()
        self._seen: Set[str] = set()
        self._lock = Lock()

    def add(self, job: CrawlJob) -> bool:
        with self._lock:
            if self.dedupe and job.unique_key in self._seen:
                return False
            self._seen.add(job.unique_key)
            self._pending.append(job)
            return True

    def reclaim(self, job: CrawlJob) -> None:
        with self._lock:
            self._pending.append(job)

    def fetch_next(self) -> Optional[CrawlJob]:
        with self._lock:
            if not self._pending or self.handled >= self.max_requests:
                return None
            self.handled += 1
            return self._pending.popleft()

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def limit_reached(self) -> bool:
        return self.handled >= self.max_requests


class CrawlOrchestrator:
    def __init__(
        self,
        options: CrawlOptions,
        *,
        selectors: PortalSelectors = PORTAL_SELECTORS,
        telemetry: Optional[RunTelemetry] = None,
        max_requests: Optional[int] = None,
        max_retries: Optional[int] = None,
        dedupe: Optional[bool] = None,
    ) -> None:
        self.options = options
        self.selectors = selectors
        self.base_url = options.base_url or config.BASE_URL
        self.telemetry = telemetry or RunTelemetry()
        self.queue = JobQueue(
            max_requests=config.MAX_REQUESTS_PER_CRAWL if max_requests is None else max_requests,
            dedupe=config.DEDUPE_DETAIL_URLS if dedupe is None else dedupe,
        )
        retries = config.MAX_JOB_RETRIES if max_retries is None else max_retries
        self.max_attempts = 1 + max(0, retries)

        self.form_filled = False
        self.search_outcome: Optional[SearchOutcome] = None
        self.pagination: Optional[PaginationSummary] = None
        self._records: List[TrademarkRecord] = []
        self._records_lock = Lock()

    @property
    def records(self) -> List[TrademarkRecord]:
        with self._records_lock:
            return list(self._records)

    def enqueue(self, job: CrawlJob) -> bool:
        return self.queue.add(job)

    def run(self, page: Page) -> List[TrademarkRecord]:
        """Process jobs until the queue is empty or the job ceiling is hit."""

        log_line("Starting crawler...")
        self.enqueue(CrawlJob.entry(self.base_url))

        while True:
            job = self.queue.fetch_next()
            if job is None:
                break
            self._process(page, job)

        if self.queue.pending_count:
            log_warning(
                f"Job limit of {self.queue.max_requests} reached; "
                f"{self.queue.pending_count} queued jobs were not processed."
            )
            _scraper_event(
                "state",
                phase="queue",
                kind=ErrorCode.REQUEST_LIMIT,
                handled=self.queue.handled,
                pending=self.queue.pending_count,
            )

        records = self.records
        log_line(f"Crawling completed. Found {len(records)} records.")
        return records

    def dispatch(self, page: Page, job: CrawlJob) -> None:
        if job.kind is JobKind.ENTRY:
            self._handle_entry(page, job)
        elif job.kind is JobKind.DETAIL:
            self._handle_detail(page, job)
        else:  # pragma: no cover - enum is closed
            raise ValueError(f"Unknown job kind: {job.kind!r}")

    def _process(self, page: Page, job: CrawlJob) -> None:
        try:
            navigate(page, job.url, label=job.label or job.kind.value)
            self.dispatch(page, job)
        except NonRetryableSearchError as exc:
            _job_event(
                "error",
                job,
                error_code=exc.error_code,
                outcome=exc.outcome.value,
                portal_message=exc.portal_message,
            )
            self.telemetry.add(STATUS_ABORTED, exc.error_code, {"url": job.url, "error": str(exc)})
            raise
        except Exception as exc:  # noqa: BLE001
            self._handle_job_failure(job, exc)

    def _handle_job_failure(self, job: CrawlJob, exc: Exception) -> None:
        error_code = getattr(exc, "error_code", None) or ErrorCode.INTERNAL
        attempt = job.retry_count + 1
        _job_event("error", job, error_code=error_code, error=str(exc))

        if decide_retry(attempt, self.max_attempts, exc, error_code=error_code):
            self.telemetry.add(STATUS_RETRIED, error_code, {"url": job.url, "attempt": attempt})
            self.queue.reclaim(job.next_attempt())
            return

        if job.kind is JobKind.ENTRY:
            self.telemetry.add(STATUS_ABORTED, error_code, {"url": job.url, "error": str(exc)})
            raise exc

        log_error(f"Request {job.url} failed: {exc}")
        self.telemetry.add(STATUS_FAILED, error_code, {"url": job.url, "error": str(exc)})

    def _is_search_entry(self, url: str) -> bool:
        return config.ADVANCED_SEARCH_PATH in url

    def _handle_entry(self, page: Page, job: CrawlJob) -> None:
        deadline = time.monotonic() + config.HANDLER_TIMEOUT_SECONDS
        if self._is_search_entry(job.url) and not self.form_filled:
            log_line("Filling out search form...")
            self.search_outcome = execute_search(page, self.options, selectors=self.selectors)
            self.form_filled = True
            self.telemetry.add(
                STATUS_SEARCHED, self.search_outcome.value, {"url": job.url}
            )

        self.pagination = walk_result_pages(
            page,
            self.enqueue,
            max_pages=self.options.max_pages,
            page_budget=max(1, self.queue.max_requests - self.queue.handled),
            deadline=deadline,
            selectors=self.selectors,
        )
        if self.pagination.stop_reason in {"request_limit", "handler_timeout"}:
            _job_event(
                "state",
                job,
                kind=ErrorCode.REQUEST_LIMIT
                if self.pagination.stop_reason == "request_limit"
                else ErrorCode.STEP_TIMEOUT,
                stop_reason=self.pagination.stop_reason,
                pages=self.pagination.pages_visited,
            )
        _job_event(
            "pagination",
            job,
            pages=self.pagination.pages_visited,
            links=self.pagination.links_found,
            enqueued=self.pagination.links_enqueued,
            stop_reason=self.pagination.stop_reason,
        )

    def _handle_detail(self, page: Page, job: CrawlJob) -> Optional[TrademarkRecord]:
        log_line(f"Processing detail: {job.url}")
        try:
            wait_for_load_state_bounded(
                page,
                "networkidle",
                timeout_seconds=config.DETAIL_IDLE_TIMEOUT_SECONDS,
                step="detail_idle",
            )
            wait_for_selector_bounded(
                page,
                self.selectors.detail_section,
                timeout_seconds=config.DETAIL_SECTION_TIMEOUT_SECONDS,
                step="detail_section",
            )
            wait_seconds(page, config.DETAIL_SETTLE_SECONDS)
            record = extract_detail_record(page, selectors=self.selectors)
        except ExtractionEmptyWarning as exc:
            log_warning(str(exc))
            self.telemetry.add(STATUS_EMPTY, exc.error_code, {"url": job.url})
            return None
        except CrawlError as exc:
            log_error(f"Failed to process {job.url}: {exc}")
            self.telemetry.add(STATUS_FAILED, exc.error_code, {"url": job.url, "error": str(exc)})
            return None
        except Exception as exc:  # noqa: BLE001
            wrapped = UnhandledStepError(job.url, exc)
            log_error(f"Failed to process {job.url}: {wrapped}")
            self.telemetry.add(
                STATUS_FAILED, wrapped.error_code, {"url": job.url, "error": str(wrapped)}
            )
            return None

        with self._records_lock:
            self._records.append(record)
        log_line(f"Extracted data from {job.url}: {record.to_json()}")
        self.telemetry.add(
            STATUS_EXTRACTED,
            "ok",
            {"url": job.url, "fields": len(record.values), "populated": record.populated_count},
        )
        return record


__all__ = ["JobQueue", "CrawlOrchestrator"]
