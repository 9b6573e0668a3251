"""Tests for the transactional batch load."""

import pytest
from sqlalchemy import select

from registrar_ingestion.domain.events import Phase
from registrar_ingestion.domain.types import (
    CourseEntity,
    DepartmentEntity,
    EnrollmentEntity,
    ExtractedEntities,
    StudentEntity,
)
from registrar_ingestion.services.load_coordinator import LoadCoordinator
from registrar_ingestion.services.verification import table_counts
from registrar_kernel.exceptions import LoadError
from registrar_kernel.models import Course, Department, Enrollment, Student


def _student(email, department="Computer Science"):
    return StudentEntity(
        first_name="Ada",
        last_name="Lovelace",
        email=email,
        date_of_birth="2000-12-10",
        year=3,
        phone="9876543210",
        department_name=department,
    )


@pytest.fixture
def entities():
    return ExtractedEntities(
        departments=(
            DepartmentEntity("Computer Science", "Alan Turing"),
            DepartmentEntity("Mathematics"),
        ),
        students=(_student("ada@example.com"), _student("emmy@example.com", "Mathematics")),
        courses=(CourseEntity("Algorithms", "Computer Science", 4),),
        enrollments=(
            EnrollmentEntity("ada@example.com", "Algorithms", "2024-01-15", "A"),
            EnrollmentEntity("emmy@example.com", "Algorithms", "2024-01-16"),
        ),
    )


@pytest.fixture
def coordinator(session_factory, sink):
    return LoadCoordinator(session_factory, sink)


class TestLoad:

    def test_loads_all_tables(self, coordinator, entities, session):
        summary = coordinator.load(entities)
        assert summary.as_dict() == {
            "departments": 2,
            "students": 2,
            "courses": 1,
            "enrollments": 2,
        }
        assert table_counts(session) == {
            "department": 2,
            "student": 2,
            "course": 1,
            "enrollment": 2,
        }

    def test_foreign_keys_resolved(self, coordinator, entities, session):
        coordinator.load(entities)
        emmy = session.scalar(select(Student).where(Student.email == "emmy@example.com"))
        maths = session.scalar(select(Department).where(Department.name == "Mathematics"))
        assert emmy.department_id == maths.id
        assert emmy.date_of_birth.isoformat() == "2000-12-10"
        course = session.scalar(select(Course))
        assert {e.course_id for e in session.scalars(select(Enrollment))} == {course.id}

    def test_department_head_stored(self, coordinator, entities, session):
        coordinator.load(entities)
        heads = dict(session.execute(select(Department.name, Department.head)).all())
        assert heads == {"Computer Science": "Alan Turing", "Mathematics": None}

    def test_event_sequence(self, coordinator, entities, sink):
        coordinator.load(entities)
        assert sink.messages(Phase.LOAD) == [
            "Cleared existing data",
            "Inserted 2 departments",
            "Inserted 2 students",
            "Inserted 1 courses",
            "Inserted 2 enrollments",
            "Transaction committed successfully",
        ]

    def test_table_loaded_event_context(self, coordinator, entities, sink):
        coordinator.load(entities)
        loaded = [
            (e.context["table"], e.context["count"])
            for e in sink.of_phase(Phase.LOAD)
            if e.context.get("event") == "table_loaded"
        ]
        assert loaded == [
            ("departments", 2),
            ("students", 2),
            ("courses", 1),
            ("enrollments", 2),
        ]

    def test_reload_replaces_contents(self, coordinator, entities, session):
        coordinator.load(entities)
        smaller = ExtractedEntities(
            departments=(DepartmentEntity("Physics"),),
            students=(_student("marie@example.com", "Physics"),),
        )
        summary = coordinator.load(smaller)
        assert summary.as_dict() == {
            "departments": 1,
            "students": 1,
            "courses": 0,
            "enrollments": 0,
        }
        assert session.scalars(select(Student.email)).all() == ["marie@example.com"]

    def test_empty_snapshot_clears_store(self, coordinator, entities, session):
        coordinator.load(entities)
        coordinator.load(ExtractedEntities())
        assert set(table_counts(session).values()) == {0}


class TestSkippedEnrollments:

    def test_unresolvable_enrollment_warns_and_rest_commits(
        self, coordinator, entities, sink, session, captured_logs
    ):
        orphan = EnrollmentEntity("ghost@example.com", "Algorithms", "2024-01-15")
        broken = ExtractedEntities(
            departments=entities.departments,
            students=entities.students,
            courses=entities.courses,
            enrollments=entities.enrollments + (orphan,),
        )
        summary = coordinator.load(broken)
        assert summary.enrollments == 2
        assert summary.skipped_enrollments == 1
        (warning,) = sink.of_phase(Phase.WARN)
        assert warning.message == "Skipping enrollment: ghost@example.com -> Algorithms"
        assert warning.context["event"] == "enrollment_skipped"
        assert table_counts(session)["enrollment"] == 2
        assert any(
            r["message"] == "enrollment_skipped" and r["level"] == "WARNING"
            for r in captured_logs()
        )


class TestRollback:

    def test_failure_rolls_back_everything(self, coordinator, entities, sink, session):
        coordinator.load(entities)
        # Student references a department that is not part of the snapshot
        broken = ExtractedEntities(
            departments=(DepartmentEntity("Physics"),),
            students=(_student("marie@example.com", "Chemistry"),),
        )
        with pytest.raises(LoadError) as exc_info:
            coordinator.load(broken)

        assert exc_info.value.stage == "students"
        assert exc_info.value.code == "LOAD_ERROR"
        assert str(exc_info.value).startswith("Load failed during students:")
        assert exc_info.value.__cause__ is not None
        assert sink.messages(Phase.LOAD)[-1] == "Transaction rolled back due to error"

        session.expire_all()
        assert table_counts(session) == {
            "department": 2,
            "student": 2,
            "course": 1,
            "enrollment": 2,
        }

    def test_rollback_logged(self, coordinator, captured_logs):
        broken = ExtractedEntities(students=(_student("x@example.com", "Nowhere"),))
        with pytest.raises(LoadError):
            coordinator.load(broken)
        assert any(r["message"] == "transaction_rolled_back" for r in captured_logs())
