#!/usr/bin/env python3
"""
Run the registration ETL: read a sheet export, transform it, and replace
the store contents with the result.

The configuration comes from get_active_config() (REGISTRAR_CONFIG picks
another YAML set; DATABASE_URL overrides the database URL).

Usage:
    python3 scripts/run_etl.py --file <path> [options]

Examples:
    # Full run: extract, transform, load
    python3 scripts/run_etl.py --file registrations.xlsx

    # Transform only; report what would be loaded
    python3 scripts/run_etl.py --file registrations.csv --dry-run

    # Probe source file (row count, columns, sample) without loading
    python3 scripts/run_etl.py --file registrations.csv --probe-only
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the registration ETL: extract -> transform -> load.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--file",
        required=True,
        type=Path,
        help="Path to source file (CSV or XLSX).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration YAML (default: REGISTRAR_CONFIG env or the bundled default set).",
    )
    parser.add_argument(
        "--db-url",
        default=None,
        help="Database URL (default: DATABASE_URL env or the config's database_url).",
    )
    parser.add_argument(
        "--sheet",
        default=None,
        help="XLSX sheet name (default: the config's source.sheet).",
    )
    parser.add_argument(
        "--report-dir",
        type=Path,
        default=None,
        help="Directory for the JSON run report (default: the config's report_dir).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Extract and transform only; do not touch the database.",
    )
    parser.add_argument(
        "--probe-only",
        action="store_true",
        help="Probe source file (row count, columns, sample rows) and exit.",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before loading.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Structured log level (default: INFO).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Lazy imports so we fail fast on args first
    from registrar_config import get_active_config
    from registrar_ingestion.adapters import adapter_for_path
    from registrar_ingestion.services import (
        EtlPipeline,
        FanOutEventSink,
        LoggingEventSink,
        RunReportSink,
    )
    from registrar_kernel.db.engine import (
        create_tables,
        get_session_factory,
        init_engine_from_url,
    )
    from registrar_kernel.exceptions import RunError
    from registrar_kernel.logging_config import configure_logging

    configure_logging(level=getattr(logging, args.log_level))

    source_path = args.file.resolve()
    if not source_path.is_file():
        print(f"ERROR: File not found: {source_path}", file=sys.stderr)
        return 1

    try:
        config = get_active_config(args.config)
    except (OSError, KeyError, ValueError) as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1

    if args.sheet:
        config = dataclasses.replace(
            config, source=dataclasses.replace(config.source, sheet=args.sheet)
        )

    try:
        adapter = adapter_for_path(source_path)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.probe_only:
        probe = adapter.probe(source_path, config.source.adapter_options())
        print(f"Rows: {probe.row_count}")
        print(f"Columns: {list(probe.columns)}")
        print("Sample (first 3):")
        for i, row in enumerate(probe.sample_rows[:3], 1):
            print(f"  {i}: {row}")
        return 0

    session_factory = None
    if not args.dry_run:
        db_url = args.db_url or config.database_url
        if not db_url:
            print("ERROR: No database URL configured.", file=sys.stderr)
            return 1
        engine = init_engine_from_url(db_url)
        if args.create_tables:
            create_tables(engine)
        session_factory = get_session_factory()

    report = RunReportSink()
    pipeline = EtlPipeline(
        config,
        session_factory=session_factory,
        sink=FanOutEventSink(LoggingEventSink(), report),
    )

    exit_code = 0
    try:
        summary = pipeline.run(source_path, adapter=adapter, dry_run=args.dry_run)
    except RunError as e:
        print(f"ERROR: {e.code}: {e}", file=sys.stderr)
        exit_code = 1
    else:
        for rejected in summary.rejected[:10]:
            print(f"  Row {rejected.row_id}: {', '.join(rejected.errors)}")
        if len(summary.rejected) > 10:
            print(f"  ... and {len(summary.rejected) - 10} more invalid rows.")
    finally:
        print(report.render_summary())
        report_dir = args.report_dir or config.report_dir
        if report_dir:
            path = report.write_report(report_dir)
            print(f"Report saved: {path}")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
