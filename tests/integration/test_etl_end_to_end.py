"""
End-to-end: sheet file -> dedup -> normalize -> validate -> extract -> load.

Runs the full batch path against an in-memory store and checks what landed.
"""

from datetime import datetime

import openpyxl
from sqlalchemy import select

from registrar_ingestion.domain.types import RegistrationStatus
from registrar_ingestion.services.pipeline import EtlPipeline
from registrar_ingestion.services.registration_service import RegistrationService
from registrar_ingestion.services.verification import (
    sample_enrollments,
    students_per_department,
    table_counts,
)
from registrar_kernel.models import Course, Department, Enrollment, Student

HEADER = ["FirstName", "LastName", "Email", "DateOfBirth", "Year", "Department", "Course", "Credits", "EnrollmentDate"]


class TestDuplicateWithAlias:

    def test_alias_and_duplicate_collapse(self, config, session_factory, clock, write_csv, session):
        path = write_csv(
            [
                HEADER,
                ["Ada", "Lovelace", "a@x.com", "2000-01-01", "1", "cs", "Algorithms", "four", "2024-01-15"],
                ["Ada", "Lovelace", "a@x.com", "2000-01-01", "1", "Computer Science", "", "", ""],
            ]
        )
        summary = EtlPipeline(config, session_factory, clock=clock).run(path)

        assert summary.duplicates_removed == 1
        assert session.scalars(select(Department.name)).all() == ["Computer Science"]
        assert table_counts(session) == {
            "department": 1,
            "student": 1,
            "course": 1,
            "enrollment": 1,
        }
        course = session.scalar(select(Course))
        assert (course.name, course.credits) == ("Algorithms", 4)
        enrollment = session.scalar(select(Enrollment))
        assert enrollment.grade is None


class TestXlsxSource:

    def test_spreadsheet_export(self, config, session_factory, clock, tmp_path, session):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Sheet1"
        ws.append(HEADER + ["Grade"])
        ws.append(["Grace", "Hopper", "grace@example.com", datetime(1999, 12, 9), "Senior", "comp sci", "Compilers", 3, datetime(2024, 2, 1), 88])
        ws.append(["Emmy", "Noether", "emmy@example.com", "03/23/1999", 2, "MATH", None, None, None, None])
        path = tmp_path / "export.xlsx"
        wb.save(path)

        summary = EtlPipeline(config, session_factory, clock=clock).run(path)

        assert summary.status == "success"
        assert summary.rejected == ()
        assert students_per_department(session) == [
            ("Computer Science", 1),
            ("Mathematics", 1),
        ]
        (sample,) = sample_enrollments(session)
        assert sample["course"] == "Compilers"
        assert sample["enrollment_date"] == "2024-02-01"
        assert sample["grade"] == "B"


class TestBatchThenRegister:

    def test_registration_after_batch_reuses_reference_data(
        self, config, session_factory, clock, write_csv, session, valid_payload
    ):
        path = write_csv(
            [
                HEADER,
                ["Alan", "Turing", "alan@example.com", "2000-06-23", "4", "cs", "Algorithms", "4", "2024-01-10"],
            ]
        )
        EtlPipeline(config, session_factory, clock=clock).run(path)

        service = RegistrationService(config, session_factory, clock=clock)
        assert service.register(valid_payload).status is RegistrationStatus.CREATED
        duplicate = service.register({**valid_payload, "Email": "alan@example.com"})
        assert duplicate.status is RegistrationStatus.ALREADY_REGISTERED

        assert table_counts(session) == {
            "department": 1,
            "student": 2,
            "course": 1,
            "enrollment": 2,
        }
        assert session.scalar(select(Student.year).where(Student.email == "ada@example.com")) == 3
