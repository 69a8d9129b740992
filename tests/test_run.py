from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd
import pytest

from uprp.scraper import config, run
from uprp.scraper.errors import NonRetryableSearchError
from uprp.scraper.models import CrawlOptions
from tests.fake_portal import SEARCH_URL, FakePortalPage, build_portal


def _options(tmp_path: Path, excel: Optional[Path] = None) -> CrawlOptions:
    return CrawlOptions(
        start_date=date(2024, 1, 1),
        end_date=date(2024, 3, 31),
        output_file=tmp_path / "out" / "output.json",
        excel_file=excel,
        base_url=SEARCH_URL,
    )


def _read(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


def test_run_crawl_writes_records_and_telemetry(tmp_path: Path) -> None:
    options = _options(tmp_path)

    summary = run.run_crawl(options, page=build_portal(pages=2, rows=2))

    payload = _read(options.output_file)
    assert len(payload) == 4
    assert payload[0]["nameTitle"] == "Mark 1-1"
    assert summary["records"] == 4
    assert summary["aborted"] is False
    assert summary["search_outcome"] == "success"
    assert summary["pages_visited"] == 2

    telemetry = _read(Path(summary["telemetry_file"]))
    assert Path(summary["telemetry_file"]).parent == config.RUNS_DIR
    assert telemetry["summary"]["count_extracted"] == 4
    assert telemetry["result"]["records"] == 4
    assert Path(summary["log_file"]).exists()


def test_run_crawl_output_is_utf8_and_indented(tmp_path: Path) -> None:
    url = "https://portal.test/search/details/1-1"
    page = build_portal(
        pages=1,
        rows=1,
        details={url: '<section class="panel"><table class="details-list">'
                      '<tr><td class="detail-title">Name/Title</td><td>Łódź</td></tr>'
                      "</table></section>"},
    )
    options = _options(tmp_path)

    run.run_crawl(options, page=page)

    text = options.output_file.read_text(encoding="utf-8")
    assert "Łódź" in text
    assert text.startswith("[\n  {")


def test_abort_still_flushes_empty_output(tmp_path: Path) -> None:
    options = _options(tmp_path)
    page = FakePortalPage(info_message="Too many results found, please narrow your criteria")

    with pytest.raises(NonRetryableSearchError):
        run.run_crawl(options, page=page)

    assert _read(options.output_file) == []
    run_files = list(config.RUNS_DIR.glob("run_*.json"))
    assert len(run_files) == 1
    result = _read(run_files[0])["result"]
    assert result["aborted"] is True
    assert result["error_code"] == "too_many_results"


def test_failure_after_extraction_flushes_partial_records(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    options = _options(tmp_path)

    @contextmanager
    def _crashing_session(*, headless: bool):
        yield build_portal(pages=1, rows=2)
        raise RuntimeError("browser closed unexpectedly")

    monkeypatch.setattr(run, "open_browser_session", _crashing_session)

    with pytest.raises(RuntimeError):
        run.run_crawl(options)

    assert len(_read(options.output_file)) == 2


def test_excel_export(tmp_path: Path) -> None:
    excel_path = tmp_path / "out" / "records.xlsx"
    options = _options(tmp_path, excel=excel_path)

    summary = run.run_crawl(options, page=build_portal(pages=1, rows=3))

    assert summary["excel_file"] == str(excel_path)
    records = pd.read_excel(excel_path, sheet_name="Records")
    assert len(records) == 3
    assert list(records.columns)[:3] == ["nameTitle", "status", "applicationDate"]
    jobs = pd.read_excel(excel_path, sheet_name="Jobs")
    assert set(jobs["status"]) == {"searched", "extracted"}
