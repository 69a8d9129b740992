"""Command line entrypoint: ``uprp-crawl --start-date ... --end-date ...``."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Sequence, Tuple

from . import config
from .config_validation import ISO_DATE_PATTERN, build_crawl_options, validate_runtime_config
from .errors import ConfigurationError, CrawlError, NonRetryableSearchError
from .healthcheck import report_health, run_health_checks
from .run import run_crawl
from .utils import log_error, log_line

EXAMPLES = """\
Examples:
  uprp-crawl --start-date 2024-01-01 --end-date 2024-12-31
  uprp-crawl -s 2024-01-01 -e 2024-12-31 -o results.json
  uprp-crawl 2024-01-01 2024-12-31 --excel results.xlsx
"""


class _CrawlerArgumentParser(argparse.ArgumentParser):
    """Argument errors exit with status 1 like every other input error."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"Error: {message}\nUse --help for usage information.\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _CrawlerArgumentParser(
        prog="uprp-crawl",
        description="Crawl trademark records from the UPRP e-search portal for a date range.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "dates",
        nargs="*",
        metavar="DATE",
        help="Start and end date as bare arguments when the flags are not used.",
    )
    parser.add_argument("-s", "--start-date", help="Start date (YYYY-MM-DD format)")
    parser.add_argument("-e", "--end-date", help="End date (YYYY-MM-DD format)")
    parser.add_argument(
        "-o",
        "--output",
        default=config.DEFAULT_OUTPUT_FILE,
        help=f"Output JSON file (default: {config.DEFAULT_OUTPUT_FILE})",
    )
    parser.add_argument("--excel", default=None, help="Also write an Excel workbook to this path")
    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Stop paginating after this many result pages",
    )
    browser_mode = parser.add_mutually_exclusive_group()
    browser_mode.add_argument(
        "--headless", dest="headless", action="store_true", default=None, help="Run Chromium headless"
    )
    browser_mode.add_argument(
        "--headed", dest="headless", action="store_false", help="Show the browser window"
    )
    parser.add_argument("--base-url", default=None, help="Override the advanced search URL")
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Check configuration, output directory and portal reachability, then exit",
    )
    return parser


def resolve_dates(
    start_date: Optional[str], end_date: Optional[str], bare: Sequence[str]
) -> Tuple[Optional[str], Optional[str]]:
    """Fill missing flag values from bare arguments, start date first."""

    for value in bare:
        if not start_date:
            start_date = value
        elif not end_date:
            end_date = value
    return start_date, end_date


def main(argv: Optional[Sequence[str]] = None) -> int:
    raw: List[str] = list(argv) if argv is not None else sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_intermixed_args(raw)
    log_line(f"Raw arguments: {raw}")

    if args.health_check:
        return report_health(run_health_checks(args.output, base_url=args.base_url))

    start_date, end_date = resolve_dates(args.start_date, args.end_date, args.dates)
    if not start_date or not end_date:
        print("Error: Both start-date and end-date are required.", file=sys.stderr)
        print("Use --help for usage information.", file=sys.stderr)
        return 1

    if not ISO_DATE_PATTERN.match(start_date) or not ISO_DATE_PATTERN.match(end_date):
        print("Error: Dates must be in YYYY-MM-DD format.", file=sys.stderr)
        return 1

    try:
        validate_runtime_config("cli")
        options = build_crawl_options(
            start_date,
            end_date,
            args.output,
            excel_file=args.excel,
            max_pages=args.max_pages,
            headless=args.headless,
            base_url=args.base_url,
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    log_line(f"Starting crawl with options: {options.as_log_fields()}")
    try:
        run_crawl(options)
    except NonRetryableSearchError as exc:
        detail = f" (portal: {exc.portal_message})" if exc.portal_message else ""
        print(f"Crawler failed: {exc}{detail}", file=sys.stderr)
        return 1
    except CrawlError as exc:
        print(f"Crawler failed: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:  # noqa: BLE001
        log_error(f"Crawler failed with {type(exc).__name__}: {exc}")
        print(f"Crawler failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())


__all__ = ["main", "resolve_dates"]
