"""Source adapters for registration sheets (file I/O only, no DB)."""

from pathlib import Path

from registrar_ingestion.adapters.base import SourceAdapter, SourceProbe, SourceRow
from registrar_ingestion.adapters.csv_adapter import CsvSourceAdapter
from registrar_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

ADAPTERS_BY_SUFFIX: dict[str, type] = {
    ".csv": CsvSourceAdapter,
    ".xlsx": XlsxSourceAdapter,
}


def adapter_for_path(path: Path | str) -> SourceAdapter:
    """Pick an adapter from the file suffix."""
    suffix = Path(path).suffix.lower()
    try:
        return ADAPTERS_BY_SUFFIX[suffix]()
    except KeyError:
        raise ValueError(
            f"Unsupported source file type {suffix!r}; expected one of {sorted(ADAPTERS_BY_SUFFIX)}"
        ) from None


__all__ = [
    "ADAPTERS_BY_SUFFIX",
    "CsvSourceAdapter",
    "SourceAdapter",
    "SourceProbe",
    "SourceRow",
    "XlsxSourceAdapter",
    "adapter_for_path",
]
