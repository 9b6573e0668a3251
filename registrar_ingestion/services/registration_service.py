"""
Single-record registration: one payload -> one student (and enrollment).

Runs the payload through the same transform as the batch pipeline, then
writes it in one transaction.  Unlike the batch load this path is
additive: departments and courses are reused when they already exist.

Concurrency: two requests for the same email (or a new department/course)
may race.  Every insert runs inside a SAVEPOINT; a unique-constraint
violation rolls back only that savepoint and the row written by the other
request is fetched instead.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Mapping

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from registrar_config.schema import RegistrarConfig
from registrar_kernel.db.engine import session_scope
from registrar_kernel.domain.clock import Clock, SystemClock
from registrar_kernel.exceptions import LoadError
from registrar_kernel.logging_config import LogContext, get_logger
from registrar_kernel.models import Course, Department, Enrollment, Student

from registrar_ingestion.domain.events import NULL_SINK, EventSink
from registrar_ingestion.domain.transform import transform_records
from registrar_ingestion.domain.types import (
    EMAIL,
    ExtractedEntities,
    RawRecord,
    RegistrationOutcome,
    RegistrationStatus,
    StudentEntity,
)

logger = get_logger("ingestion.registration_service")

# Payloads are treated as the first data row under a header
_PAYLOAD_ROW_ID = 2


def _payload_value(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


class RegistrationService:
    """Registers one student at a time against the live store."""

    def __init__(
        self,
        config: RegistrarConfig,
        session_factory: Callable[[], Session],
        clock: Clock | None = None,
        sink: EventSink = NULL_SINK,
    ):
        self._config = config
        self._session_factory = session_factory
        self._clock = clock or SystemClock()
        self._sink = sink

    def register(self, payload: Mapping[str, Any]) -> RegistrationOutcome:
        """
        Validate and store one registration payload.

        Returns:
            INVALID with every error when the payload fails normalization or
            validation; ALREADY_REGISTERED with the existing id when the
            email is taken; CREATED with the new student id otherwise.

        Raises:
            LoadError: any store failure other than a lost uniqueness race.
        """
        raw = RawRecord(
            row_id=_PAYLOAD_ROW_ID,
            values={str(k): _payload_value(v) for k, v in payload.items()},
        )
        email = (raw.get(EMAIL) or "").strip().lower() or None

        with LogContext.bind(producer="registration", email=email):
            result = transform_records(
                [raw], self._config, self._sink, today=self._clock.today()
            )
            if not result.entities.students:
                errors = tuple(e for r in result.rejected for e in r.errors)
                logger.info("registration_rejected", extra={"errors": list(errors)})
                return RegistrationOutcome(
                    RegistrationStatus.INVALID,
                    email=email,
                    errors=errors or ("Unknown validation error",),
                )

            try:
                with session_scope(self._session_factory) as session:
                    outcome = self._store(session, result.entities)
            except SQLAlchemyError as exc:
                raise LoadError(
                    f"Registration failed for {email}: {exc}", stage="register"
                ) from exc

            logger.info(
                "registration_completed",
                extra={
                    "status": outcome.status.value,
                    "student_id": outcome.student_id,
                    "enrolled_course": outcome.enrolled_course,
                },
            )
            return outcome

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _store(
        self,
        session: Session,
        entities: ExtractedEntities,
    ) -> RegistrationOutcome:
        student = entities.students[0]

        existing_id = self._find_student_id(session, student.email)
        if existing_id is not None:
            return RegistrationOutcome(
                RegistrationStatus.ALREADY_REGISTERED,
                student_id=existing_id,
                email=student.email,
            )

        department = entities.departments[0]
        department_id = self._insert_or_fetch(
            session,
            Department,
            Department.name,
            department.name,
            {"name": department.name, "head": department.head},
        )

        try:
            student_id = self._insert_student(session, student, department_id)
        except IntegrityError:
            # Another request registered this email since the lookup above
            existing_id = self._find_student_id(session, student.email)
            if existing_id is None:
                raise
            logger.info("registration_race_lost", extra={"student_id": existing_id})
            return RegistrationOutcome(
                RegistrationStatus.ALREADY_REGISTERED,
                student_id=existing_id,
                email=student.email,
            )

        enrolled_course = None
        if entities.courses and entities.enrollments:
            course = entities.courses[0]
            enrollment = entities.enrollments[0]
            course_id = self._insert_or_fetch(
                session,
                Course,
                Course.name,
                course.name,
                {
                    "name": course.name,
                    "department_id": department_id,
                    "credits": course.credits,
                },
            )
            session.add(
                Enrollment(
                    student_id=student_id,
                    course_id=course_id,
                    enrollment_date=date.fromisoformat(enrollment.enrollment_date),
                    grade=enrollment.grade,
                )
            )
            session.flush()
            enrolled_course = course.name

        return RegistrationOutcome(
            RegistrationStatus.CREATED,
            student_id=student_id,
            email=student.email,
            enrolled_course=enrolled_course,
        )

    def _find_student_id(self, session: Session, email: str) -> int | None:
        return session.scalar(select(Student.id).where(Student.email == email))

    def _insert_student(
        self,
        session: Session,
        student: StudentEntity,
        department_id: int,
    ) -> int:
        with session.begin_nested():
            row = Student(
                first_name=student.first_name,
                last_name=student.last_name,
                email=student.email,
                date_of_birth=date.fromisoformat(student.date_of_birth),
                year=student.year,
                phone=student.phone,
                department_id=department_id,
            )
            session.add(row)
            session.flush()
            return row.id

    def _insert_or_fetch(
        self,
        session: Session,
        model: type,
        key_column: Any,
        key_value: str,
        values: dict[str, Any],
    ) -> int:
        """Id of the row with ``key_value``, inserting it when absent."""
        existing = session.scalar(select(model.id).where(key_column == key_value))
        if existing is not None:
            return existing
        try:
            with session.begin_nested():
                row = model(**values)
                session.add(row)
                session.flush()
                return row.id
        except IntegrityError:
            existing = session.scalar(select(model.id).where(key_column == key_value))
            if existing is None:
                raise
            logger.info(
                "concurrent_insert_resolved",
                extra={"table": model.__tablename__, "key": key_value},
            )
            return existing
