from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List

from . import config

LOGGER = logging.getLogger("uprp")
_LOGGER_INITIALISED = False
_CURRENT_LOG_FILE: Path = config.LOG_FILE

_LOG_FORMAT = "[%(asctime)s] %(message)s"
_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _build_handlers(log_path: Path) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_LOG_DATEFMT)
    handlers: List[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_path, encoding="utf-8"),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _configure_logger(log_path: Path) -> None:
    """Point the ``uprp`` logger at stdout and ``log_path``, dropping old handlers."""

    global _LOGGER_INITIALISED, _CURRENT_LOG_FILE

    log_path.parent.mkdir(parents=True, exist_ok=True)

    for handler in list(LOGGER.handlers):
        LOGGER.removeHandler(handler)
        try:
            handler.close()
        except Exception:  # noqa: BLE001
            continue

    for handler in _build_handlers(log_path):
        LOGGER.addHandler(handler)
    LOGGER.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))
    LOGGER.propagate = False

    _CURRENT_LOG_FILE = log_path
    _LOGGER_INITIALISED = True


def _ensure_logger() -> None:
    if not _LOGGER_INITIALISED:
        _configure_logger(config.LOG_FILE)


def setup_run_logger() -> Path:
    """Switch logging to a fresh ``crawl_<UTC timestamp>.log`` for this run."""

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_path = config.LOG_DIR / f"crawl_{timestamp}.log"
    _configure_logger(log_path)
    LOGGER.info("Logging to %s", log_path)
    return log_path


def ensure_dirs() -> None:
    """Create the data, log and run-telemetry directories."""

    for directory in (config.DATA_DIR, config.LOG_DIR, config.RUNS_DIR):
        directory.mkdir(parents=True, exist_ok=True)


def log_line(message: str) -> None:
    """Write a timestamped log line to stdout and the active log file."""

    _ensure_logger()
    LOGGER.info(message)


def log_warning(message: str) -> None:
    _ensure_logger()
    LOGGER.warning(message)


def log_error(message: str) -> None:
    _ensure_logger()
    LOGGER.error(message)


def save_json_file(path: Path, payload: Any) -> Path:
    """Write ``payload`` as indented UTF-8 JSON, replacing ``path`` atomically."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")

    with tmp_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)

    tmp_path.replace(path)
    return path


__all__ = [
    "ensure_dirs",
    "setup_run_logger",
    "log_line",
    "log_warning",
    "log_error",
    "save_json_file",
]
