"""Playwright crawler for the UPRP e-search portal (trademarks by date range).

Workflow:

- Open the advanced search form in Chromium.
- Tick the trademark collection checkboxes, clear all others, type the date
  range into the two masked date inputs and submit.
- Walk the result listing ("next" paginator link) and queue every row link.
- Visit each detail page and read the labelled fields of the details table.
- Write all records to one JSON file when the run ends, also when the run
  is aborted part way through.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from playwright.sync_api import Page

from . import config
from .browser import open_browser_session
from .error_codes import ErrorCode
from .export import export_records_to_excel, save_records
from .logging_utils import _scraper_event
from .models import CrawlOptions
from .orchestrator import CrawlOrchestrator
from .utils import ensure_dirs, log_line, log_warning, setup_run_logger


def _short_error_message(exc: BaseException, max_length: int = 200) -> str:
    message = f"{type(exc).__name__}: {exc}"
    if len(message) > max_length:
        return message[: max_length - 3] + "..."
    return message


def _finalize_run(
    orchestrator: CrawlOrchestrator,
    options: CrawlOptions,
    *,
    log_path: Path,
    error: Optional[BaseException] = None,
) -> Dict[str, Any]:
    records = orchestrator.records
    output_path = save_records(records, options.output_file)

    excel_path: Optional[Path] = None
    if options.excel_file is not None:
        excel_path = export_records_to_excel(
            records, options.excel_file, job_entries=orchestrator.telemetry.entries
        )

    summary: Dict[str, Any] = {
        "run_id": orchestrator.telemetry.run_id,
        "records": len(records),
        "output_file": str(output_path),
        "excel_file": str(excel_path) if excel_path else None,
        "log_file": str(log_path),
        "search_outcome": (
            orchestrator.search_outcome.value if orchestrator.search_outcome else None
        ),
        "pages_visited": orchestrator.pagination.pages_visited if orchestrator.pagination else 0,
        "jobs_handled": orchestrator.queue.handled,
        "jobs_pending": orchestrator.queue.pending_count,
        "failed": orchestrator.telemetry.count("failed"),
        "empty": orchestrator.telemetry.count("empty"),
        "aborted": error is not None,
        "error": _short_error_message(error) if error is not None else None,
        "error_code": getattr(error, "error_code", ErrorCode.INTERNAL) if error else None,
    }
    telemetry_path = orchestrator.telemetry.finalize(extra={"result": summary})
    summary["telemetry_file"] = str(telemetry_path)
    _scraper_event("run", phase="end", **summary)
    return summary


def run_crawl(options: CrawlOptions, *, page: Optional[Page] = None) -> Dict[str, Any]:
    """Run one crawl and flush its records; returns a run summary.

    When ``page`` is given it is used instead of launching a browser. A
    fatal error still flushes whatever was collected before re-raising.
    """

    ensure_dirs()
    log_path = setup_run_logger()
    orchestrator = CrawlOrchestrator(options)
    _scraper_event(
        "run",
        phase="start",
        run_id=orchestrator.telemetry.run_id,
        base_url=orchestrator.base_url,
        max_requests=config.MAX_REQUESTS_PER_CRAWL,
        **options.as_log_fields(),
    )

    try:
        if page is not None:
            orchestrator.run(page)
        else:
            with open_browser_session(headless=options.headless) as browser_page:
                orchestrator.run(browser_page)
    except Exception as exc:
        _scraper_event(
            "error",
            phase="run",
            run_id=orchestrator.telemetry.run_id,
            error_code=getattr(exc, "error_code", ErrorCode.INTERNAL),
            error=_short_error_message(exc),
        )
        try:
            _finalize_run(orchestrator, options, log_path=log_path, error=exc)
        except Exception as flush_exc:  # noqa: BLE001
            log_warning(f"[RUN][WARN] Unable to flush records after failure: {flush_exc}")
        raise

    summary = _finalize_run(orchestrator, options, log_path=log_path)
    log_line(f"[RUN] Crawl finished with {summary['records']} records.")
    return summary


__all__ = ["run_crawl"]
