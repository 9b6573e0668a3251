#!/usr/bin/env python3
"""
Print what the last load left in the store: row counts per table, students
per department, and a few sample enrollments.

Usage:
    python3 scripts/verify_load.py [--db-url URL] [--limit N]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Verify the registrar store after a load.")
    parser.add_argument("--config", type=Path, default=None, help="Configuration YAML.")
    parser.add_argument("--db-url", default=None, help="Database URL override.")
    parser.add_argument("--limit", type=int, default=5, help="Sample enrollments to show.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    from registrar_config import get_active_config
    from registrar_ingestion.services import (
        sample_enrollments,
        students_per_department,
        table_counts,
    )
    from registrar_kernel.db.engine import init_engine_from_url, session_scope

    config = get_active_config(args.config)
    db_url = args.db_url or config.database_url
    if not db_url:
        print("ERROR: No database URL configured.", file=sys.stderr)
        return 1
    init_engine_from_url(db_url)

    with session_scope() as session:
        print("Record counts:")
        for table, count in table_counts(session).items():
            print(f"  {table:<12} {count}")

        print("\nStudents per department:")
        for name, count in students_per_department(session):
            print(f"  {name:<20} {count}")

        print(f"\nSample enrollments (first {args.limit}):")
        for row in sample_enrollments(session, args.limit):
            grade = row["grade"] or "-"
            print(
                f"  {row['student']:<24} {row['course']:<24} "
                f"{row['enrollment_date']}  {grade}"
            )

    return 0


if __name__ == "__main__":
    sys.exit(main())
