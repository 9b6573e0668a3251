"""Tests for the CSV and XLSX source adapters."""

from datetime import datetime

import openpyxl
import pytest

from registrar_ingestion.adapters import (
    CsvSourceAdapter,
    XlsxSourceAdapter,
    adapter_for_path,
)
from registrar_ingestion.adapters.base import build_headers, header_row_index, is_blank_row

HEADER = ["FirstName", "LastName", "Email", "DateOfBirth", "Year", "PhoneNumber", "Department"]


@pytest.fixture
def write_xlsx(tmp_path):
    def _write(rows, name="registrations.xlsx", title="Sheet1"):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = title
        for row in rows:
            ws.append(row)
        path = tmp_path / name
        wb.save(path)
        return path

    return _write


class TestHelpers:

    def test_header_row_index(self):
        assert header_row_index({}) == 0
        assert header_row_index({"skip_rows": 2, "header_row": 2}) == 3

    def test_build_headers(self):
        assert build_headers(["Email", None, " Email ", ""]) == [
            "Email",
            "Column_2",
            "Email_1",
            "Column_4",
        ]

    def test_is_blank_row(self):
        assert is_blank_row(["", None, "  "])
        assert not is_blank_row(["", "x"])


class TestCsvSourceAdapter:

    def test_reads_rows_with_sheet_row_numbers(self, write_csv):
        path = write_csv(
            [
                HEADER,
                ["Ada", "Lovelace", "ada@example.com", "2000-12-10", "3", "9876543210", "cs"],
                [""] * 7,
                ["Alan", "Turing", "alan@example.com", "1999-06-23", "4", "", "math"],
            ]
        )
        rows = list(CsvSourceAdapter().read(path, {}))
        assert [r.row_number for r in rows] == [2, 4]
        assert rows[0].values["Email"] == "ada@example.com"
        assert rows[1].values["PhoneNumber"] == ""

    def test_short_rows_padded(self, write_csv):
        path = write_csv([HEADER, ["Ada", "Lovelace"]])
        (row,) = CsvSourceAdapter().read(path, {})
        assert row.values["Department"] == ""
        assert len(row.values) == len(HEADER)

    def test_skip_rows_and_delimiter(self, tmp_path):
        path = tmp_path / "semi.csv"
        path.write_text("exported 2024-06-01\nFirstName;Email\nAda;ada@example.com\n")
        (row,) = CsvSourceAdapter().read(path, {"skip_rows": 1, "delimiter": ";"})
        assert row.row_number == 3
        assert row.values == {"FirstName": "Ada", "Email": "ada@example.com"}

    def test_strips_bom(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes("\ufeffFirstName,Email\nAda,ada@example.com\n".encode("utf-8"))
        (row,) = CsvSourceAdapter().read(path, {})
        assert "FirstName" in row.values

    def test_empty_file_yields_nothing(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        assert list(CsvSourceAdapter().read(path, {})) == []

    def test_probe(self, write_csv):
        path = write_csv([HEADER] + [["Ada", "Lovelace", f"a{i}@x.com", "", "", "", ""] for i in range(7)])
        probe = CsvSourceAdapter().probe(path, {})
        assert probe.row_count == 7
        assert probe.columns == tuple(HEADER)
        assert len(probe.sample_rows) == 5
        assert probe.detected_delimiter == ","


class TestXlsxSourceAdapter:

    def test_cell_values_normalized(self, write_xlsx):
        path = write_xlsx(
            [
                HEADER + ["Credits"],
                ["  Ada ", "Lovelace", "ada@example.com", datetime(2000, 12, 10), 3, 9876543210, "cs", 4.0],
            ]
        )
        (row,) = XlsxSourceAdapter().read(path, {})
        assert row.row_number == 2
        assert row.values["FirstName"] == "Ada"
        assert row.values["DateOfBirth"] == "2000-12-10"
        assert row.values["PhoneNumber"] == 9876543210
        assert row.values["Credits"] == 4

    def test_blank_rows_skipped(self, write_xlsx):
        path = write_xlsx([HEADER, ["Ada"], [None], ["Alan"]])
        rows = list(XlsxSourceAdapter().read(path, {}))
        assert [r.row_number for r in rows] == [2, 4]
        assert rows[0].values["Email"] == ""

    def test_sheet_by_name(self, tmp_path):
        wb = openpyxl.Workbook()
        wb.active.append(["ignored"])
        other = wb.create_sheet("Registrations")
        other.append(["FirstName"])
        other.append(["Grace"])
        path = tmp_path / "multi.xlsx"
        wb.save(path)
        (row,) = XlsxSourceAdapter().read(path, {"sheet": "Registrations"})
        assert row.values == {"FirstName": "Grace"}

    def test_unknown_sheet_raises_key_error(self, write_xlsx):
        path = write_xlsx([HEADER])
        with pytest.raises(KeyError):
            list(XlsxSourceAdapter().read(path, {"sheet": "Missing"}))

    def test_probe(self, write_xlsx):
        path = write_xlsx([HEADER, ["Ada"], ["Alan"]])
        probe = XlsxSourceAdapter().probe(path, {})
        assert probe.row_count == 2
        assert probe.columns == tuple(HEADER)

    def test_probe_header_only(self, write_xlsx):
        path = write_xlsx([HEADER])
        probe = XlsxSourceAdapter().probe(path, {})
        assert probe.row_count == 0
        assert probe.columns == tuple(HEADER)


class TestAdapterForPath:

    def test_by_suffix(self):
        assert isinstance(adapter_for_path("a.csv"), CsvSourceAdapter)
        assert isinstance(adapter_for_path("a.XLSX"), XlsxSourceAdapter)

    def test_unsupported(self):
        with pytest.raises(ValueError, match="Unsupported source file type"):
            adapter_for_path("a.json")
