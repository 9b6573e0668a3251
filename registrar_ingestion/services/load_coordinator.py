"""
Load coordinator: extracted entities -> store, in one transaction.

The batch load is a destructive refresh.  All four tables are emptied, then
written parent-first (departments, students, courses, enrollments).  Each
insert returns the fresh surrogate ids, which resolve the natural keys of
the next table.  Any failure rolls the whole transaction back.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, TypeVar

from sqlalchemy import delete, insert, text
from sqlalchemy.orm import Session

from registrar_kernel.db.engine import is_postgres, session_scope
from registrar_kernel.exceptions import LoadError
from registrar_kernel.logging_config import get_logger
from registrar_kernel.models import Course, Department, Enrollment, Student

from registrar_ingestion.domain.events import NULL_SINK, EventSink, Phase, PipelineEvent
from registrar_ingestion.domain.types import ExtractedEntities, LoadSummary

logger = get_logger("ingestion.load_coordinator")

_Rows = TypeVar("_Rows", dict[str, int], list[dict])

_TRUNCATE_ALL = (
    "TRUNCATE TABLE enrollment, course, student, department RESTART IDENTITY CASCADE"
)


class LoadCoordinator:
    """Writes one ExtractedEntities snapshot, replacing whatever was stored."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        sink: EventSink = NULL_SINK,
    ):
        self._session_factory = session_factory
        self._sink = sink
        self._stage = "connect"

    def load(self, entities: ExtractedEntities) -> LoadSummary:
        """
        Replace the store contents with ``entities``.

        Raises:
            LoadError: any failure; the transaction has been rolled back and
                the original exception is chained.
        """
        self._stage = "connect"
        try:
            with session_scope(self._session_factory) as session:
                summary = self._load(session, entities)
        except Exception as exc:
            self._emit(
                Phase.LOAD,
                "Transaction rolled back due to error",
                {"event": "load_rolled_back", "stage": self._stage},
            )
            raise LoadError(
                f"Load failed during {self._stage}: {exc}", stage=self._stage
            ) from exc

        self._emit(
            Phase.LOAD,
            "Transaction committed successfully",
            {"event": "load_committed"},
        )
        logger.info("load_committed", extra=summary.as_dict())
        return summary

    def _load(self, session: Session, entities: ExtractedEntities) -> LoadSummary:
        self._stage = "reset"
        self._reset(session)

        self._stage = "departments"
        department_ids = self._insert_departments(session, entities)

        self._stage = "students"
        student_ids = self._insert_students(session, entities, department_ids)

        self._stage = "courses"
        course_ids = self._insert_courses(session, entities, department_ids)

        self._stage = "enrollments"
        enrolled, skipped = self._insert_enrollments(
            session, entities, student_ids, course_ids
        )

        self._stage = "commit"
        return LoadSummary(
            departments=len(department_ids),
            students=len(student_ids),
            courses=len(course_ids),
            enrollments=enrolled,
            skipped_enrollments=skipped,
        )

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _reset(self, session: Session) -> None:
        if is_postgres(session):
            session.execute(text(_TRUNCATE_ALL))
        else:
            for model in (Enrollment, Course, Student, Department):
                session.execute(delete(model))
        self._emit(Phase.LOAD, "Cleared existing data", {"event": "tables_cleared"})

    def _insert_departments(
        self,
        session: Session,
        entities: ExtractedEntities,
    ) -> dict[str, int]:
        if not entities.departments:
            return self._loaded("departments", {})
        rows = session.execute(
            insert(Department).returning(Department.id, Department.name),
            [{"name": d.name, "head": d.head} for d in entities.departments],
        ).all()
        return self._loaded("departments", {name: id_ for id_, name in rows})

    def _insert_students(
        self,
        session: Session,
        entities: ExtractedEntities,
        department_ids: dict[str, int],
    ) -> dict[str, int]:
        if not entities.students:
            return self._loaded("students", {})
        rows = session.execute(
            insert(Student).returning(Student.id, Student.email),
            [
                {
                    "first_name": s.first_name,
                    "last_name": s.last_name,
                    "email": s.email,
                    "date_of_birth": date.fromisoformat(s.date_of_birth),
                    "year": s.year,
                    "phone": s.phone,
                    "department_id": department_ids.get(s.department_name),
                }
                for s in entities.students
            ],
        ).all()
        return self._loaded("students", {email: id_ for id_, email in rows})

    def _insert_courses(
        self,
        session: Session,
        entities: ExtractedEntities,
        department_ids: dict[str, int],
    ) -> dict[str, int]:
        if not entities.courses:
            return self._loaded("courses", {})
        rows = session.execute(
            insert(Course).returning(Course.id, Course.name),
            [
                {
                    "name": c.name,
                    "department_id": department_ids.get(c.department_name),
                    "credits": c.credits,
                }
                for c in entities.courses
            ],
        ).all()
        return self._loaded("courses", {name: id_ for id_, name in rows})

    def _insert_enrollments(
        self,
        session: Session,
        entities: ExtractedEntities,
        student_ids: dict[str, int],
        course_ids: dict[str, int],
    ) -> tuple[int, int]:
        params = []
        skipped = 0
        for e in entities.enrollments:
            student_id = student_ids.get(e.student_email)
            course_id = course_ids.get(e.course_name)
            if student_id is None or course_id is None:
                skipped += 1
                logger.warning(
                    "enrollment_skipped",
                    extra={"student_email": e.student_email, "course_name": e.course_name},
                )
                self._emit(
                    Phase.WARN,
                    f"Skipping enrollment: {e.student_email} -> {e.course_name}",
                    {
                        "event": "enrollment_skipped",
                        "email": e.student_email,
                        "course": e.course_name,
                    },
                )
                continue
            params.append(
                {
                    "student_id": student_id,
                    "course_id": course_id,
                    "enrollment_date": date.fromisoformat(e.enrollment_date),
                    "grade": e.grade,
                }
            )

        if params:
            session.execute(insert(Enrollment), params)
        self._loaded("enrollments", params)
        return len(params), skipped

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def _loaded(self, table: str, rows: _Rows) -> _Rows:
        self._emit(
            Phase.LOAD,
            f"Inserted {len(rows)} {table}",
            {"event": "table_loaded", "table": table, "count": len(rows)},
        )
        return rows

    def _emit(self, phase: Phase, message: str, context: dict) -> None:
        self._sink.emit(PipelineEvent(phase, message, context))
