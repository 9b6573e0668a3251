"""
CSV source adapter.

Uses csv.reader. Configurable: delimiter, encoding, quoting, skip_rows,
header_row. Handles BOM via utf-8-sig when encoding is utf-8. Streams rows.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Iterator

from registrar_ingestion.adapters.base import (
    SourceProbe,
    SourceRow,
    build_headers,
    header_row_index,
    is_blank_row,
)

_QUOTING = {
    "minimal": csv.QUOTE_MINIMAL,
    "all": csv.QUOTE_ALL,
    "nonnumeric": csv.QUOTE_NONNUMERIC,
    "none": csv.QUOTE_NONE,
}


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() == "utf-8":
        return "utf-8-sig"  # Strip BOM if present
    return enc


def _get_quoting(options: dict[str, Any]) -> int:
    q = options.get("quoting", "minimal")
    if isinstance(q, int):
        return q
    return _QUOTING.get(str(q).lower(), csv.QUOTE_MINIMAL)


class CsvSourceAdapter:
    """Read CSV files as one SourceRow per data row."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[SourceRow]:
        encoding = _get_encoding(options)
        delimiter = options.get("delimiter", ",")
        quoting = _get_quoting(options)
        header_index = header_row_index(options)

        with source_path.open("r", encoding=encoding, newline="") as f:
            reader = csv.reader(f, delimiter=delimiter, quoting=quoting)
            for _ in range(header_index):
                next(reader, None)
            header = next(reader, None)
            if header is None:
                return
            headers = build_headers(header)

            # Sheet row numbers are 1-based; the header sits at header_index + 1
            for offset, row in enumerate(reader, start=header_index + 2):
                if is_blank_row(row):
                    continue
                padded = row + [""] * (len(headers) - len(row))
                yield SourceRow(offset, dict(zip(headers, padded)))

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        encoding = _get_encoding(options)
        delimiter = options.get("delimiter", ",")
        sample_size = 5

        columns: tuple[str, ...] = ()
        sample: list[dict[str, Any]] = []
        count = 0

        with source_path.open("r", encoding=encoding, newline="") as f:
            reader = csv.reader(f, delimiter=delimiter, quoting=_get_quoting(options))
            for _ in range(header_row_index(options)):
                next(reader, None)
            header = next(reader, None)
            if header is not None:
                columns = tuple(build_headers(header))
            for row in reader:
                if is_blank_row(row):
                    continue
                count += 1
                if len(sample) < sample_size:
                    sample.append(dict(zip(columns, row)))

        return SourceProbe(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            encoding=encoding,
            detected_delimiter=delimiter,
        )
