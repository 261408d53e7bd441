#!/usr/bin/env python3
"""
Worksite Reports
Main entry point for the application

Usage:
    python main.py --source ./data summary materials
    python main.py summary financials --project P-001 --from 2024-01-01
    python main.py export materials --scope low --format csv
    python main.py export users --filter status=Active --sort name --desc --format print
"""

import sys
import argparse
import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from config import APP_NAME, APP_VERSION, create_app_context, get_settings
from config.app_context import AppContext
from config.constants import EXPORT_FORMATS
from data import create_record_source
from domain.exceptions import ExportError, WorksiteBaseException
from domain.models import SortDirection, ViewSpec
from domain.rules import month_label, to_date
from domain.schemas import SCHEMAS, get_schema
from operations.aggregate_ops import AGGREGATORS, aggregate, build_cost_rows, build_financial_rows
from operations.report_ops import format_number
from operations.screen_ops import ScreenState, notification_for_error
from operations.view_ops import parse_filters
from services.export_service import create_export_service
from services.pdf_service import create_pdf_service

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    """
    Configure logging for the application.

    Sets up console output with pretty formatting.
    Suppresses noisy third-party loggers.
    """
    # Create formatter with timestamp, level, module name
    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Console handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(formatter)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.addHandler(console_handler)

    # Suppress noisy third-party loggers
    logging.getLogger('playwright').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)

    logging.info("=" * 60)
    logging.info(f"{APP_NAME} {APP_VERSION}")
    logging.info(f"Logging initialized - Level: {level.upper()}")
    logging.info("=" * 60)


def add_financial_arguments(parser: argparse.ArgumentParser):
    """Project and date selection for the financials kind."""
    parser.add_argument("--project", dest="projects", action="append", metavar="PCODE", help="Project code (repeatable, financials only)")
    parser.add_argument("--from", dest="date_from", metavar="YYYY-MM-DD", help="First timeline date (financials only)")
    parser.add_argument("--to", dest="date_to", metavar="YYYY-MM-DD", help="Last timeline date (financials only)")


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(prog="worksite-reports", description=f"{APP_NAME} - summaries and exports")
    parser.add_argument("--source", type=Path, help="Directory with record files (default: WORKSITE_DATA_DIR)")
    parser.add_argument("--as-of", dest="as_of", help="Reference date (YYYY-MM-DD) for overdue and depreciation rules")
    parser.add_argument("--log-level", dest="log_level", help="DEBUG, INFO, WARNING or ERROR")

    commands = parser.add_subparsers(dest="command", required=True)

    summary = commands.add_parser("summary", help="Print totals and grouped series")
    summary.add_argument("kind", choices=sorted(AGGREGATORS))
    add_financial_arguments(summary)

    export = commands.add_parser("export", help="Export the current view")
    export.add_argument("kind", choices=sorted(SCHEMAS))
    export.add_argument("--scope", default="all", help="all, low (materials), overdue (rentals, inspections) or failed (inspections)")
    export.add_argument("--format", dest="export_format", default="csv", choices=EXPORT_FORMATS)
    export.add_argument("--query", default="", help="Free-text search")
    export.add_argument("--filter", dest="filters", action="append", default=[], metavar="FIELD=VALUE")
    export.add_argument("--sort", dest="sort_field", help="Sort field")
    export.add_argument("--desc", action="store_true", help="Sort descending")
    export.add_argument("--output", type=Path, help="Output directory (default: WORKSITE_OUTPUT_DIR)")
    add_financial_arguments(export)

    return parser


# ==================== Commands ====================


def load_records(ctx: AppContext, kind: str, args: Optional[argparse.Namespace] = None) -> list:
    """
    Fetch a collection.

    cost_per_unit rows are derived from materials and suppliers, financials
    rows from projects and their timeline entries.
    """
    source = ctx.record_source
    if kind == "cost_per_unit":
        suppliers = source.fetch("suppliers") if source.has_collection("suppliers") else []
        return build_cost_rows(source.fetch("materials"), suppliers)

    if kind == "financials":
        timelines = source.fetch("timelines") if source.has_collection("timelines") else []
        return build_financial_rows(
            source.fetch("projects"),
            timelines,
            project_codes=getattr(args, "projects", None),
            date_from=getattr(args, "date_from", None),
            date_to=getattr(args, "date_to", None),
        )

    return source.fetch(kind)


def _display_label(label: str) -> str:
    if re.match(r"^\d{4}-\d{2}$", label):
        return month_label(label)
    return label


def run_summary(ctx: AppContext, kind: str, args: Optional[argparse.Namespace] = None) -> int:
    result = aggregate(
        load_records(ctx, kind, args),
        kind,
        as_of=ctx.as_of,
        trend_months=ctx.settings.trend_months,
    )

    print(f"\n{kind.replace('_', ' ').title()}")
    print("-" * 40)
    for name, value in result.totals.items():
        print(f"  {name:<24} {format_number(round(value, 2))}")

    for name, points in result.series.items():
        print(f"\n  {name}")
        for point in points:
            label = _display_label(point.label)
            line = f"    {label:<22} {format_number(point.value)}"
            if point.mean:
                line += f"  (avg {point.mean:.2f})"
            for extra_name, extra_value in point.extra.items():
                line += f"  {extra_name}={format_number(round(extra_value, 2))}"
            print(line)
    return 0


def run_export(ctx: AppContext, args: argparse.Namespace) -> int:
    schema = get_schema(args.kind)
    state = ScreenState(kind=args.kind)

    state, request_id = state.begin_fetch()
    try:
        state = state.receive_records(request_id, load_records(ctx, args.kind, args))
    except WorksiteBaseException as e:
        state = state.fetch_failed(request_id, e)
        for note in state.notifications:
            print(f"❌ {note}")
        return 1

    state = state.with_view_spec(ViewSpec(
        query=args.query,
        filters=parse_filters(args.filters),
        sort_field=args.sort_field,
        sort_direction=SortDirection.DESC if args.desc else SortDirection.ASC,
    ))
    rows = state.visible_records(schema)

    state = state.request_export(args.export_format)
    try:
        pdf_service = None
        if args.export_format == "pdf":
            pdf_service = create_pdf_service(ctx.settings.pdf_page_size, ctx.settings.browser_channel)
        service = create_export_service(ctx.settings.ensure_output_dir(), pdf_service)
        result = service.export(rows, args.kind, args.export_format, scope=args.scope, as_of=ctx.as_of)
    except EnvironmentError as e:
        # Playwright missing or output directory not writable
        state = state.export_failed(ExportError(str(e), details={"format": args.export_format}))
        for note in state.notifications:
            print(f"❌ {note}")
        return 1
    except (WorksiteBaseException, ValueError) as e:
        state = state.export_failed(e)
        for note in state.notifications:
            print(f"❌ {note}")
        return 1

    state = state.export_completed(result.row_count, result.path.name)
    for note in state.notifications:
        print(f"✓ {note}")
    print(f"  {result.path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    if args.source is not None:
        settings = replace(settings, data_dir=args.source)
    if getattr(args, "output", None) is not None:
        settings = replace(settings, output_dir=args.output)

    # Setup logging FIRST
    setup_logging(args.log_level or ("DEBUG" if settings.debug_mode else settings.log_level))

    as_of = None
    if args.as_of:
        as_of = to_date(args.as_of)
        if as_of is None:
            parser.error(f"Invalid --as-of date: {args.as_of}")
    for option, value in (("--from", getattr(args, "date_from", None)), ("--to", getattr(args, "date_to", None))):
        if value and to_date(value) is None:
            parser.error(f"Invalid {option} date: {value}")

    ctx = create_app_context(
        record_source=create_record_source("file", settings.data_dir),
        settings=settings,
        as_of=as_of,
    )

    try:
        if args.command == "summary":
            return run_summary(ctx, args.kind, args)
        return run_export(ctx, args)
    except ValueError as e:
        print(f"\n❌ {e}")
        return 2
    except WorksiteBaseException as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"\n❌ {notification_for_error(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
