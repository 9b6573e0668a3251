"""
Extraction service: source file -> RawRecord list.

Wraps a SourceAdapter, turns every read failure into ExtractionError and
refuses sources without data rows, so downstream stages always receive at
least one row.
"""

from __future__ import annotations

import csv
import zipfile
from pathlib import Path
from typing import Any

from openpyxl.utils.exceptions import InvalidFileException

from registrar_kernel.exceptions import ExtractionError
from registrar_kernel.logging_config import get_logger

from registrar_ingestion.adapters import adapter_for_path
from registrar_ingestion.adapters.base import SourceAdapter, SourceRow
from registrar_ingestion.domain.events import NULL_SINK, EventSink, Phase, PipelineEvent
from registrar_ingestion.domain.types import RawRecord

logger = get_logger("ingestion.extract_service")

_READ_ERRORS = (
    OSError,
    ValueError,
    KeyError,
    IndexError,
    csv.Error,
    zipfile.BadZipFile,
    InvalidFileException,
)


def _raw_value(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def to_raw_record(row: SourceRow) -> RawRecord:
    """Convert an adapter row: blank cells become None, everything else text."""
    return RawRecord(
        row_id=row.row_number,
        values={name: _raw_value(value) for name, value in row.values.items()},
    )


def read_raw_records(
    adapter: SourceAdapter | None,
    path: Path | str,
    options: dict[str, Any] | None = None,
    sink: EventSink = NULL_SINK,
) -> list[RawRecord]:
    """
    Read every data row of ``path``.

    Raises:
        ExtractionError: the file is missing or unreadable, has no rows at
            all, or has a header row but no data rows.
    """
    path = Path(path)
    options = options or {}
    source = str(path)

    if not path.is_file():
        raise ExtractionError(f"Source file not found: {path}", source=source)

    try:
        adapter = adapter or adapter_for_path(path)
        sink.emit(
            PipelineEvent(
                Phase.EXTRACT,
                f"Reading from source: {path.name}",
                {"event": "extract_started", "source": source},
            )
        )
        probe = adapter.probe(path, options)
        records = [to_raw_record(row) for row in adapter.read(path, options)]
    except _READ_ERRORS as exc:
        raise ExtractionError(f"Unable to read source {path}: {exc}", source=source) from exc

    if not probe.columns:
        raise ExtractionError("No data found in sheet", source=source)
    if not records:
        raise ExtractionError("Sheet has headers but no data rows", source=source)

    logger.info(
        "source_extracted",
        extra={"source": source, "row_count": len(records), "columns": list(probe.columns)},
    )
    sink.emit(
        PipelineEvent(
            Phase.EXTRACT,
            f"Fetched {len(records)} rows from {path.name}",
            {"event": "rows_extracted", "count": len(records), "source": source},
        )
    )
    return records
