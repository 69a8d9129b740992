"""Writes the collected records to disk (JSON, optional Excel workbook)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .models import RECORD_FIELDS, TrademarkRecord
from .utils import log_line, save_json_file


def records_to_payload(records: Iterable[TrademarkRecord]) -> List[Dict[str, Optional[str]]]:
    return [record.to_dict() for record in records]


def save_records(records: Sequence[TrademarkRecord], output_path: Path) -> Path:
    """Write ``records`` as an indented JSON array to ``output_path``."""

    path = save_json_file(Path(output_path), records_to_payload(records))
    log_line(f"Results saved to: {path}")
    return path


def export_records_to_excel(
    records: Sequence[TrademarkRecord],
    dest_path: Path,
    *,
    job_entries: Optional[Sequence[Dict[str, Any]]] = None,
) -> Path:
    """Create a workbook with the records and, when given, the job log."""

    records_df = pd.DataFrame(records_to_payload(records), columns=list(RECORD_FIELDS))
    if records_df.empty:
        records_df = pd.DataFrame([{"info": "No records extracted in this run"}])

    jobs_df = pd.DataFrame(list(job_entries or []))
    summary_status = (
        jobs_df.groupby("status").size().reset_index(name="count").sort_values("count", ascending=False)
        if not jobs_df.empty and "status" in jobs_df.columns
        else pd.DataFrame()
    )

    dest_path = Path(dest_path)
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(dest_path, engine="openpyxl") as writer:
        records_df.to_excel(writer, index=False, sheet_name="Records")
        if not jobs_df.empty:
            jobs_df.to_excel(writer, index=False, sheet_name="Jobs")
        if not summary_status.empty:
            summary_status.to_excel(writer, index=False, sheet_name="Summary_Status")

    log_line(f"Excel export saved to: {dest_path}")
    return dest_path


__all__ = ["records_to_payload", "save_records", "export_records_to_excel"]
