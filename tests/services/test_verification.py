"""Tests for post-load verification queries."""

from registrar_ingestion.domain.types import (
    CourseEntity,
    DepartmentEntity,
    EnrollmentEntity,
    ExtractedEntities,
    StudentEntity,
)
from registrar_ingestion.services.load_coordinator import LoadCoordinator
from registrar_ingestion.services.verification import (
    sample_enrollments,
    students_per_department,
    table_counts,
)


def _student(first, email, department):
    return StudentEntity(first, "Tester", email, "2000-01-01", 1, None, department)


def _load(session_factory):
    entities = ExtractedEntities(
        departments=(
            DepartmentEntity("Computer Science"),
            DepartmentEntity("Mathematics"),
            DepartmentEntity("Physics"),
        ),
        students=(
            _student("Ada", "ada@example.com", "Computer Science"),
            _student("Alan", "alan@example.com", "Computer Science"),
            _student("Emmy", "emmy@example.com", "Mathematics"),
        ),
        courses=(CourseEntity("Algorithms", "Computer Science", 4),),
        enrollments=(
            EnrollmentEntity("ada@example.com", "Algorithms", "2024-01-15", "A"),
            EnrollmentEntity("alan@example.com", "Algorithms", "2024-01-16", None),
        ),
    )
    LoadCoordinator(session_factory).load(entities)


class TestVerification:

    def test_table_counts_empty(self, session):
        assert table_counts(session) == {
            "department": 0,
            "student": 0,
            "course": 0,
            "enrollment": 0,
        }

    def test_students_per_department(self, session_factory, session):
        _load(session_factory)
        assert students_per_department(session) == [
            ("Computer Science", 2),
            ("Mathematics", 1),
            ("Physics", 0),
        ]

    def test_sample_enrollments(self, session_factory, session):
        _load(session_factory)
        assert sample_enrollments(session) == [
            {
                "student": "Ada Tester",
                "email": "ada@example.com",
                "course": "Algorithms",
                "enrollment_date": "2024-01-15",
                "grade": "A",
            },
            {
                "student": "Alan Tester",
                "email": "alan@example.com",
                "course": "Algorithms",
                "enrollment_date": "2024-01-16",
                "grade": None,
            },
        ]

    def test_sample_limit(self, session_factory, session):
        _load(session_factory)
        assert len(sample_enrollments(session, limit=1)) == 1
