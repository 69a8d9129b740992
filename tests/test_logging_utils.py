from uprp.scraper import logging_utils
from uprp.scraper.models import CrawlJob


def test_scraper_event_label_and_phase(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(logging_utils, "log_line", lambda msg: events.append(msg))

    logging_utils._scraper_event("state", phase="retry_decision", kind="capped")

    assert events
    line = events[-1]
    assert line.startswith("[SCRAPER][STATE]")
    assert "phase='retry_decision'" in line
    assert "kind='capped'" in line


def test_phase_alone_becomes_the_label(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(logging_utils, "log_line", lambda msg: events.append(msg))

    logging_utils._scraper_event(phase="health", ok=True)

    assert events[-1] == "[SCRAPER][HEALTH] ok=True"


def test_job_event_tags_kind_url_and_attempt(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(logging_utils, "log_line", lambda msg: events.append(msg))
    job = CrawlJob.detail("https://portal.test/d/1").next_attempt()

    logging_utils._job_event("error", job, error_code="step_timeout")

    line = events[-1]
    assert line.startswith("[SCRAPER][ERROR]")
    assert "job_kind='detail'" in line
    assert "url='https://portal.test/d/1'" in line
    assert "attempt=2" in line
