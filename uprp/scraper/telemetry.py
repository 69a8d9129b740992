"""Per-run job telemetry, written to ``<DATA_DIR>/runs/run_<id>.json``."""

from __future__ import annotations

import time
import uuid
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config
from .utils import save_json_file

STATUS_EXTRACTED = "extracted"
STATUS_EMPTY = "empty"
STATUS_FAILED = "failed"
STATUS_RETRIED = "retried"
STATUS_SEARCHED = "searched"
STATUS_ABORTED = "aborted"


def _ts() -> str:
    return time.strftime("%Y%m%d_%H%M%S")


class RunTelemetry:
    """One entry per handled job outcome, plus per-status counters."""

    def __init__(self, mode: str = "date_range") -> None:
        self.run_id = f"{_ts()}_{uuid.uuid4().hex[:8]}"
        self.mode = mode
        self.started_at = time.time()
        self.entries: List[Dict[str, Any]] = []
        self._counts: Counter[str] = Counter()

    def add(self, status: str, reason: str, meta: Dict[str, Any]) -> None:
        self.entries.append(
            {
                "status": status,
                "reason": reason,
                "at": round(time.time() - self.started_at, 3),
                **meta,
            }
        )
        self._counts[status] += 1

    def count(self, status: str) -> int:
        return self._counts[status]

    @property
    def summary(self) -> Dict[str, int]:
        return {f"count_{status}": total for status, total in sorted(self._counts.items())}

    def finalize(self, extra: Optional[Dict[str, Any]] = None) -> Path:
        ended_at = time.time()
        payload = {
            "run_id": self.run_id,
            "mode": self.mode,
            "started_at": self.started_at,
            "ended_at": ended_at,
            "elapsed_seconds": round(ended_at - self.started_at, 3),
            "summary": self.summary,
            "entries": self.entries,
            **(extra or {}),
        }
        return save_json_file(Path(config.RUNS_DIR) / f"run_{self.run_id}.json", payload)


__all__ = [
    "RunTelemetry",
    "STATUS_EXTRACTED",
    "STATUS_EMPTY",
    "STATUS_FAILED",
    "STATUS_RETRIED",
    "STATUS_SEARCHED",
    "STATUS_ABORTED",
]
