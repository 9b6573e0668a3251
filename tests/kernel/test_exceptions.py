"""Tests for the registrar exception hierarchy."""

import pytest

from registrar_kernel.exceptions import (
    ExtractionError,
    LoadError,
    ParseError,
    RecordError,
    RegistrarError,
    RunError,
    ValidationError,
)


class TestHierarchy:

    @pytest.mark.parametrize("cls", [ParseError, ValidationError])
    def test_record_scoped(self, cls):
        assert issubclass(cls, RecordError)
        assert not issubclass(cls, RunError)

    @pytest.mark.parametrize("cls", [ExtractionError, LoadError])
    def test_run_scoped(self, cls):
        assert issubclass(cls, RunError)
        assert not issubclass(cls, RecordError)

    def test_common_base(self):
        assert issubclass(RecordError, RegistrarError)
        assert issubclass(RunError, RegistrarError)


class TestCodes:

    @pytest.mark.parametrize(
        "exc,code",
        [
            (ParseError("bad"), "PARSE_ERROR"),
            (ValidationError(2, ["Missing email"]), "VALIDATION_ERROR"),
            (ExtractionError("gone"), "EXTRACTION_ERROR"),
            (LoadError("boom"), "LOAD_ERROR"),
        ],
    )
    def test_code(self, exc, code):
        assert exc.code == code


class TestValidationError:

    def test_message_lists_errors(self):
        exc = ValidationError(5, ["Missing email", "Invalid year: 7"])
        assert str(exc) == "Row 5 failed validation: Missing email, Invalid year: 7"
        assert exc.errors == ("Missing email", "Invalid year: 7")
        assert exc.row_id == 5


class TestStructuredFields:

    def test_parse_error(self):
        exc = ParseError("Invalid grade: Z", field="grade", value="Z")
        assert (exc.field, exc.value) == ("grade", "Z")

    def test_load_error_stage(self):
        assert LoadError("x", stage="courses").stage == "courses"

    def test_extraction_error_source(self):
        assert ExtractionError("x", source="a.csv").source == "a.csv"
