"""
XLSX source adapter for spreadsheet exports (e.g. a Google Sheets download).

Supports:
  - sheet by index (0-based) or name
  - skip_rows before the header and a 1-based header_row after them
  - normalizes cell values: strings stripped, blanks -> "", integral floats
    -> int, date cells -> ISO ``YYYY-MM-DD``
"""

from __future__ import annotations

from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Iterator

import openpyxl

from registrar_ingestion.adapters.base import (
    SourceProbe,
    SourceRow,
    build_headers,
    header_row_index,
    is_blank_row,
)


def _cell_value(v: Any) -> Any:
    """Normalize one openpyxl cell value."""
    if v is None:
        return ""
    if isinstance(v, datetime):
        if v.time() == time(0, 0):
            return v.date().isoformat()
        return v.isoformat()
    if isinstance(v, date):
        return v.isoformat()
    if isinstance(v, float):
        if v == int(v):
            return int(v)
        return v
    if isinstance(v, (int, bool)):
        return v
    return str(v).strip()


class XlsxSourceAdapter:
    """
    Read .xlsx files as one SourceRow per data row.

    source_options:
      sheet: 0-based sheet index (int) or sheet name (str). Default: active sheet.
      skip_rows: number of rows to skip at top of sheet. Default: 0.
      header_row: 1-based row (after skip_rows) holding the column names. Default: 1.
    """

    def _rows(self, source_path: Path, options: dict[str, Any]) -> Iterator[tuple[int, list[Any]]]:
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            sheet = self._get_sheet(wb, options)
            for number, row in enumerate(sheet.iter_rows(values_only=True), start=1):
                yield number, [_cell_value(v) for v in row]
        finally:
            wb.close()

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[SourceRow]:
        header_number = header_row_index(options) + 1
        headers: list[str] | None = None

        for number, cells in self._rows(source_path, options):
            if number < header_number:
                continue
            if number == header_number:
                headers = build_headers(_trim_trailing_blanks(cells))
                continue
            if headers is None or is_blank_row(cells):
                continue
            padded = cells + [""] * (len(headers) - len(cells))
            yield SourceRow(number, dict(zip(headers, padded)))

    def _get_sheet(self, wb: Any, options: dict[str, Any]) -> Any:
        sheet_ref = options.get("sheet")
        if sheet_ref is None:
            return wb.active
        if isinstance(sheet_ref, int):
            return wb.worksheets[sheet_ref]
        return wb[sheet_ref]

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        columns: tuple[str, ...] = ()
        sample: list[dict[str, Any]] = []
        count = 0
        for row in self.read(source_path, options):
            if not columns:
                columns = tuple(row.values)
            count += 1
            if len(sample) < 5:
                sample.append(row.values)
        if not columns:
            header_number = header_row_index(options) + 1
            for number, cells in self._rows(source_path, options):
                if number == header_number:
                    columns = tuple(build_headers(_trim_trailing_blanks(cells)))
                    break
        return SourceProbe(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            encoding=None,
            detected_delimiter=None,
        )


def _trim_trailing_blanks(cells: list[Any]) -> list[Any]:
    end = len(cells)
    while end > 0 and (cells[end - 1] is None or cells[end - 1] == ""):
        end -= 1
    return cells[:end]
