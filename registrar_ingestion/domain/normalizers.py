"""
Field normalizers for raw registration rows.

Each function takes one raw cell value and returns its canonical form, or
raises ParseError.  Empty input always normalizes to ``None``; deciding
whether a field is required is the validator's job.

Architecture: registrar_ingestion/domain. ZERO I/O.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Mapping

from dateutil import parser as date_parser

from registrar_config.schema import RegistrarConfig
from registrar_kernel.exceptions import ParseError

from registrar_ingestion.domain import types as cols
from registrar_ingestion.domain.types import NormalizedRecord, RawRecord

# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _calendar_date(year: str, month: str, day: str) -> date | None:
    """The date for the given components, or None if it is not a real day."""
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


# -----------------------------------------------------------------------------
# Dates
# -----------------------------------------------------------------------------

_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_US_SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_DASH_DATE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_FOUR_DIGIT_YEAR = re.compile(r"\d{4}")


def parse_date(value: Any, field: str = "date") -> str | None:
    """
    Normalize a date to ``YYYY-MM-DD``.

    Accepted forms, tried in order:
        ISO           2024-1-5
        US slash      12/20/1999 (month/day/year)
        Dash          05-15-1998 as month-day when that is a real date,
                      otherwise 15-05-1998 as day-month
        Free text     Aug 30, 1998

    A candidate that is not a real calendar date falls through to the next
    form.

    Raises:
        ParseError: if no form yields a real date.
    """
    text = _optional_str(value)
    if text is None:
        return None

    match = _ISO_DATE.match(text)
    if match:
        parsed = _calendar_date(*match.groups())
        if parsed:
            return parsed.isoformat()

    match = _US_SLASH_DATE.match(text)
    if match:
        month, day, year = match.groups()
        parsed = _calendar_date(year, month, day)
        if parsed:
            return parsed.isoformat()

    match = _DASH_DATE.match(text)
    if match:
        first, second, year = match.groups()
        parsed = None
        if 1 <= int(first) <= 12:
            parsed = _calendar_date(year, first, second)
        if parsed is None:
            parsed = _calendar_date(year, second, first)
        if parsed:
            return parsed.isoformat()

    # Free text must at least carry a full year; dateutil fills gaps from today
    if _FOUR_DIGIT_YEAR.search(text):
        try:
            return date_parser.parse(text).date().isoformat()
        except (ValueError, OverflowError) as exc:
            raise ParseError(
                f"Invalid date format: {value}", field=field, value=value
            ) from exc

    raise ParseError(f"Invalid date format: {value}", field=field, value=value)


# -----------------------------------------------------------------------------
# Year, department, grade, credits
# -----------------------------------------------------------------------------

YEAR_NAMES: dict[str, int] = {
    "freshman": 1,
    "sophomore": 2,
    "junior": 3,
    "senior": 4,
    "1": 1,
    "2": 2,
    "3": 3,
    "4": 4,
}


def normalize_year(value: Any) -> int | None:
    """Map a study year name or digit to 1-4."""
    text = _optional_str(value)
    if text is None:
        return None
    year = YEAR_NAMES.get(text.lower())
    if year is None:
        raise ParseError(f"Invalid year: {value}", field="year", value=value)
    return year


def normalize_department(value: Any, aliases: Mapping[str, str]) -> str | None:
    """Resolve a department alias to its canonical name."""
    text = _optional_str(value)
    if text is None:
        return None
    canonical = aliases.get(text.lower())
    if canonical is None:
        raise ParseError(f"Unknown department: {value}", field="department", value=value)
    return canonical


LETTER_GRADES: tuple[str, ...] = ("A", "A-", "B", "B-", "C", "C-", "D", "F")

# (minimum score, letter), highest first
GRADE_BANDS: tuple[tuple[int, str], ...] = (
    (93, "A"),
    (90, "A-"),
    (87, "B"),
    (83, "B-"),
    (77, "C"),
    (73, "C-"),
    (60, "D"),
)

_LEADING_INT = re.compile(r"^[+-]?\d+")


def grade_for_score(score: int) -> str:
    """Letter grade for a numeric score."""
    for minimum, letter in GRADE_BANDS:
        if score >= minimum:
            return letter
    return "F"


def normalize_grade(value: Any) -> str | None:
    """
    Normalize a grade to a letter.

    Letter grades pass through upper-cased; numeric scores are banded on the
    standard scale.  A missing grade (including the literal "null") is None.
    """
    text = _optional_str(value)
    if text is None or text.lower() == "null":
        return None
    grade = text.upper()
    if grade in LETTER_GRADES:
        return grade
    match = _LEADING_INT.match(grade)
    if match:
        return grade_for_score(int(match.group()))
    raise ParseError(f"Invalid grade: {value}", field="grade", value=value)


CREDIT_WORDS: dict[str, int] = {"one": 1, "two": 2, "three": 3, "four": 4}


def parse_credits(value: Any) -> int | None:
    """Credits as an int; None when empty or unparseable."""
    text = _optional_str(value)
    if text is None:
        return None
    word = CREDIT_WORDS.get(text.lower())
    if word is not None:
        return word
    match = _LEADING_INT.match(text)
    return int(match.group()) if match else None


# -----------------------------------------------------------------------------
# Record
# -----------------------------------------------------------------------------


def normalize_record(raw: RawRecord, config: RegistrarConfig) -> NormalizedRecord:
    """
    Normalize every field of a raw row.

    Raises:
        ParseError: the first field that cannot be normalized.
    """
    email = _optional_str(raw.get(cols.EMAIL))
    return NormalizedRecord(
        row_id=raw.row_id,
        first_name=_optional_str(raw.get(cols.FIRST_NAME)),
        last_name=_optional_str(raw.get(cols.LAST_NAME)),
        email=email.lower() if email else None,
        date_of_birth=parse_date(raw.get(cols.DATE_OF_BIRTH), field="date_of_birth"),
        year=normalize_year(raw.get(cols.YEAR)),
        phone=_optional_str(raw.get(cols.PHONE_NUMBER)),
        department=normalize_department(
            raw.get(cols.DEPARTMENT), config.department_aliases
        ),
        course=_optional_str(raw.get(cols.COURSE)),
        credits=parse_credits(raw.get(cols.CREDITS)),
        credits_input=_optional_str(raw.get(cols.CREDITS)),
        enrollment_date=parse_date(
            raw.get(cols.ENROLLMENT_DATE), field="enrollment_date"
        ),
        grade=normalize_grade(raw.get(cols.GRADE)),
    )
