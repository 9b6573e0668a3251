"""
registrar_ingestion.domain.types -- Pure frozen dataclasses for the ETL.

ZERO I/O.  Raw rows come in as RawRecord, leave normalization as
NormalizedRecord, and leave extraction as the four entity collections
bundled in ExtractedEntities.  Dates are carried as ISO ``YYYY-MM-DD``
strings until the load boundary.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

# =============================================================================
# Source columns
# =============================================================================

# Header names as they appear in the registration sheet and API payloads
FIRST_NAME = "FirstName"
LAST_NAME = "LastName"
EMAIL = "Email"
DATE_OF_BIRTH = "DateOfBirth"
YEAR = "Year"
PHONE_NUMBER = "PhoneNumber"
DEPARTMENT = "Department"
COURSE = "Course"
CREDITS = "Credits"
ENROLLMENT_DATE = "EnrollmentDate"
GRADE = "Grade"

SOURCE_COLUMNS: tuple[str, ...] = (
    FIRST_NAME,
    LAST_NAME,
    EMAIL,
    DATE_OF_BIRTH,
    YEAR,
    PHONE_NUMBER,
    DEPARTMENT,
    COURSE,
    CREDITS,
    ENROLLMENT_DATE,
    GRADE,
)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def header_key(name: str) -> str:
    """Fold a header for matching: "First Name", "first_name" -> "firstname"."""
    return _NON_ALNUM.sub("", str(name).lower())


# =============================================================================
# Records
# =============================================================================


@dataclass(frozen=True)
class RawRecord:
    """
    One ingested row: header -> raw cell value (``None`` for empty cells).

    ``row_id`` is the 1-based sheet row number, so the first data row under
    a single header row is 2.
    """

    row_id: int
    values: Mapping[str, str | None] = field(default_factory=dict)

    def get(self, column: str) -> str | None:
        """Value of ``column``, matching headers case- and punctuation-insensitively."""
        if column in self.values:
            return self.values[column]
        wanted = header_key(column)
        for name, value in self.values.items():
            if header_key(name) == wanted:
                return value
        return None

    def count_empty_fields(self) -> int:
        """Number of cells that are missing or blank."""
        return sum(
            1 for value in self.values.values()
            if value is None or not str(value).strip()
        )


@dataclass(frozen=True)
class NormalizedRecord:
    """A row after field normalization; not yet validated."""

    row_id: int
    first_name: str | None
    last_name: str | None
    email: str | None
    date_of_birth: str | None  # ISO date
    year: int | None
    phone: str | None
    department: str | None  # canonical name
    course: str | None
    credits: int | None
    credits_input: str | None  # raw text, kept for the bound check
    enrollment_date: str | None  # ISO date
    grade: str | None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of the per-record business rules."""

    valid: bool
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class RejectedRecord:
    """A row excluded from the load, with every reason found."""

    row_id: int
    errors: tuple[str, ...]


# =============================================================================
# Entities
# =============================================================================


@dataclass(frozen=True)
class DepartmentEntity:
    name: str
    head: str | None = None


@dataclass(frozen=True)
class StudentEntity:
    first_name: str
    last_name: str
    email: str
    date_of_birth: str
    year: int
    phone: str | None
    department_name: str


@dataclass(frozen=True)
class CourseEntity:
    name: str
    department_name: str
    credits: int | None = None


@dataclass(frozen=True)
class EnrollmentEntity:
    student_email: str
    course_name: str
    enrollment_date: str
    grade: str | None = None


@dataclass(frozen=True)
class ExtractedEntities:
    """The four entity collections in first-seen order."""

    departments: tuple[DepartmentEntity, ...] = ()
    students: tuple[StudentEntity, ...] = ()
    courses: tuple[CourseEntity, ...] = ()
    enrollments: tuple[EnrollmentEntity, ...] = ()

    def counts(self) -> dict[str, int]:
        return {
            "departments": len(self.departments),
            "students": len(self.students),
            "courses": len(self.courses),
            "enrollments": len(self.enrollments),
        }


@dataclass(frozen=True)
class TransformResult:
    """Output of the shared transform used by the batch and single-record paths."""

    valid: tuple[NormalizedRecord, ...]
    rejected: tuple[RejectedRecord, ...]
    entities: ExtractedEntities
    duplicates_removed: int = 0


# =============================================================================
# Load and registration results
# =============================================================================


@dataclass(frozen=True)
class LoadSummary:
    """Row counts written by one batch load."""

    departments: int = 0
    students: int = 0
    courses: int = 0
    enrollments: int = 0
    skipped_enrollments: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "departments": self.departments,
            "students": self.students,
            "courses": self.courses,
            "enrollments": self.enrollments,
        }


class RegistrationStatus(str, Enum):
    """Outcome of a single-record registration."""

    CREATED = "created"
    ALREADY_REGISTERED = "already_registered"
    INVALID = "invalid"


@dataclass(frozen=True)
class RegistrationOutcome:
    status: RegistrationStatus
    student_id: int | None = None
    email: str | None = None
    errors: tuple[str, ...] = ()
    enrolled_course: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "student_id": self.student_id,
            "email": self.email,
            "errors": list(self.errors),
            "enrolled_course": self.enrolled_course,
        }


@dataclass(frozen=True)
class RunSummary:
    """Everything a batch run produced, for the CLI and the report."""

    run_id: str
    status: str  # "success", "dry_run", "failed"
    extracted: int
    duplicates_removed: int
    rejected: tuple[RejectedRecord, ...]
    valid_records: int
    loaded: LoadSummary | None
    duration_seconds: float
