from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import requests

from . import config
from .config_validation import validate_runtime_config
from .errors import ConfigurationError
from .logging_utils import _scraper_event
from .utils import ensure_dirs, log_line


@dataclass
class HealthResult:
    ok: bool
    checks: dict[str, dict[str, Any]]


def _check_portal(base_url: str, session: Optional[requests.Session] = None) -> dict[str, Any]:
    http = session or requests.Session()
    try:
        response = http.get(
            base_url,
            headers=config.COMMON_HEADERS,
            timeout=config.HEALTHCHECK_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        return {"ok": False, "url": base_url, "error": str(exc)}
    return {"ok": response.status_code < 500, "url": base_url, "status": response.status_code}


def run_health_checks(
    output_file: Optional[Path] = None,
    *,
    base_url: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> HealthResult:
    checks: dict[str, dict[str, Any]] = {}

    try:
        validate_runtime_config("healthcheck")
        checks["config"] = {"ok": True}
    except ConfigurationError as exc:
        checks["config"] = {"ok": False, "error": str(exc)}

    ensure_dirs()
    output_dir = Path(output_file or config.DEFAULT_OUTPUT_FILE).resolve().parent
    checks["output_dir"] = {
        "ok": output_dir.is_dir() and os.access(output_dir, os.W_OK),
        "path": str(output_dir),
    }

    checks["portal"] = _check_portal(base_url or config.BASE_URL, session=session)

    overall_ok = all(check.get("ok", False) for check in checks.values())

    _scraper_event(
        "state" if overall_ok else "error",
        phase="health",
        context="healthcheck",
        ok=overall_ok,
        checks=checks,
    )
    return HealthResult(ok=overall_ok, checks=checks)


def report_health(result: HealthResult) -> int:
    for name, info in result.checks.items():
        status = "OK" if info.get("ok") else "FAIL"
        log_line(f"[HEALTH] {name}: {status} {info}")
    return 0 if result.ok else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(report_health(run_health_checks()))
