from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .utils import log_line

if TYPE_CHECKING:  # pragma: no cover
    from .models import CrawlJob


def _scraper_event(label: str = "", *, phase: str | None = None, **fields: Any) -> None:
    """Emit a structured ``[SCRAPER][LABEL] key=value`` log line.

    When both ``label`` and ``phase`` are given, ``phase`` goes into the
    payload; when only ``phase`` is given it becomes the label.
    """

    try:
        phase_label = label or (phase or "")
        if phase and label:
            fields.setdefault("phase", phase)
        payload = ", ".join(f"{k}={repr(v)}" for k, v in sorted(fields.items()))
        log_line(f"[SCRAPER][{phase_label.upper()}] {payload}")
    except Exception:
        # Never let logging break the crawl.
        return


def _job_event(label: str, job: "CrawlJob", **fields: Any) -> None:
    """Structured event tagged with the job's kind, URL and attempt."""

    fields.setdefault("job_kind", job.kind.value)
    fields.setdefault("url", job.url)
    fields.setdefault("attempt", job.retry_count + 1)
    _scraper_event(label, **fields)


__all__ = ["_scraper_event", "_job_event"]
