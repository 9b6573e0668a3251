#!/usr/bin/env python3
"""
Register a single student from a JSON payload.

The payload uses the sheet's column names (FirstName, LastName, Email,
DateOfBirth, Year, PhoneNumber, Department, and optionally Course,
Credits, EnrollmentDate, Grade).  The outcome is printed as JSON.

Exit codes:
    0  created
    2  already registered (the existing student id is printed)
    3  invalid payload (every error is printed)
    1  any other failure

Usage:
    python3 scripts/register_student.py --json '{"Email": "a@x.com", ...}'
    python3 scripts/register_student.py --json-file payload.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

EXIT_CODES = {
    "created": 0,
    "already_registered": 2,
    "invalid": 3,
}


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Register one student (and optional enrollment).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--json", help="Registration payload as a JSON object.")
    source.add_argument("--json-file", type=Path, help="File holding the JSON payload.")
    parser.add_argument("--config", type=Path, default=None, help="Configuration YAML.")
    parser.add_argument("--db-url", default=None, help="Database URL override.")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before registering.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    try:
        text = args.json if args.json is not None else args.json_file.read_text()
        payload = json.loads(text)
    except (OSError, json.JSONDecodeError) as e:
        print(f"ERROR: Unreadable payload: {e}", file=sys.stderr)
        return 1
    if not isinstance(payload, dict):
        print("ERROR: Payload must be a JSON object.", file=sys.stderr)
        return 1

    # Lazy imports so we fail fast on args first
    from registrar_config import get_active_config
    from registrar_ingestion.services import LoggingEventSink, RegistrationService
    from registrar_kernel.db.engine import (
        create_tables,
        get_session_factory,
        init_engine_from_url,
    )
    from registrar_kernel.exceptions import RegistrarError
    from registrar_kernel.logging_config import configure_logging

    configure_logging()

    try:
        config = get_active_config(args.config)
    except (OSError, KeyError, ValueError) as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1

    db_url = args.db_url or config.database_url
    if not db_url:
        print("ERROR: No database URL configured.", file=sys.stderr)
        return 1
    engine = init_engine_from_url(db_url)
    if args.create_tables:
        create_tables(engine)

    service = RegistrationService(config, get_session_factory(), sink=LoggingEventSink())
    try:
        outcome = service.register(payload)
    except RegistrarError as e:
        print(json.dumps({"status": "error", "code": e.code, "message": str(e)}))
        return 1

    print(json.dumps(outcome.to_dict(), indent=2))
    return EXIT_CODES[outcome.status.value]


if __name__ == "__main__":
    sys.exit(main())
