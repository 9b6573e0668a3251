"""
Source adapter protocol and DTOs.

Contract:
    SourceAdapter.read() yields one SourceRow per data row (streaming), in
    sheet order, skipping rows whose cells are all blank.
    SourceAdapter.probe() returns a quick snapshot: row count, columns, sample rows.

Architecture: registrar_ingestion/adapters. File I/O only, no DB or kernel imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable


@dataclass(frozen=True)
class SourceRow:
    """One data row: its 1-based row number in the sheet and its header -> cell map."""

    row_number: int
    values: dict[str, Any]


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading tabular source files into rows."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[SourceRow]:
        """Yield one SourceRow per data row. Streams; does not load entire file."""
        ...

    def probe(self, source_path: Path, options: dict[str, Any]) -> "SourceProbe":
        """Quick probe: row count, detected columns, sample rows."""
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing a source file (row count, columns, first N rows)."""

    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[dict[str, Any], ...]  # First 5 rows; do not mutate
    encoding: str | None = None
    detected_delimiter: str | None = None


def header_row_index(options: dict[str, Any]) -> int:
    """0-based physical index of the header row (skip_rows + header_row - 1)."""
    return int(options.get("skip_rows", 0)) + int(options.get("header_row", 1)) - 1


def build_headers(cells: list[Any]) -> list[str]:
    """Header names from the header row; blanks become Column_N, repeats get a suffix."""
    headers: list[str] = []
    for c, value in enumerate(cells):
        key = str(value).strip() if value is not None else ""
        key = key or f"Column_{c + 1}"
        base = key
        cnt = 0
        while key in headers:
            cnt += 1
            key = f"{base}_{cnt}"
        headers.append(key)
    return headers


def is_blank_row(values: list[Any]) -> bool:
    return not any(v is not None and str(v).strip() != "" for v in values)
