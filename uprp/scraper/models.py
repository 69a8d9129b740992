"""Records, run options and job types shared by the crawl steps."""
from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

# Output keys in the order the portal usually lists them.
RECORD_FIELDS: tuple[str, ...] = (
    "nameTitle",
    "status",
    "applicationDate",
    "revelationDate",
    "applicationNumber",
    "categoryOfRights",
    "registrationNumber",
    "trademarkType",
)


@dataclass(frozen=True)
class TrademarkRecord:
    """One extracted detail page.

    ``values`` only holds labels that were found on the page. A found label
    with an empty value cell maps to ``None``; a missing label has no key.
    """

    values: Dict[str, Optional[str]] = field(default_factory=dict)

    def get(self, name: str) -> Optional[str]:
        return self.values.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def is_empty(self) -> bool:
        return not self.values

    @property
    def populated_count(self) -> int:
        return sum(1 for value in self.values.values() if value)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return dict(self.values)

    def to_json(self) -> str:
        return json.dumps(self.values, ensure_ascii=False)


@dataclass(frozen=True)
class CrawlOptions:
    start_date: date
    end_date: date
    output_file: Path
    excel_file: Optional[Path] = None
    max_pages: Optional[int] = None
    headless: bool = False
    base_url: Optional[str] = None

    def as_log_fields(self) -> Dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "output_file": str(self.output_file),
            "excel_file": str(self.excel_file) if self.excel_file else None,
            "max_pages": self.max_pages,
            "headless": self.headless,
        }


class SearchOutcome(str, Enum):
    SUCCESS = "success"
    NO_RESULTS = "no_results"
    TOO_MANY_RESULTS = "too_many_results"
    UNRECOGNIZED = "unrecognized"


class JobKind(str, Enum):
    ENTRY = "entry"
    DETAIL = "detail"


DETAIL_LABEL = "detail"


@dataclass(frozen=True)
class CrawlJob:
    kind: JobKind
    url: str
    label: Optional[str] = None
    retry_count: int = 0

    @classmethod
    def entry(cls, url: str) -> "CrawlJob":
        return cls(kind=JobKind.ENTRY, url=url)

    @classmethod
    def detail(cls, url: str) -> "CrawlJob":
        return cls(kind=JobKind.DETAIL, url=url, label=DETAIL_LABEL)

    @property
    def unique_key(self) -> str:
        return self.url

    def next_attempt(self) -> "CrawlJob":
        return replace(self, retry_count=self.retry_count + 1)


__all__ = [
    "RECORD_FIELDS",
    "TrademarkRecord",
    "CrawlOptions",
    "SearchOutcome",
    "JobKind",
    "DETAIL_LABEL",
    "CrawlJob",
]
