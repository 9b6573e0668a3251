"""
Post-load verification queries.

Read-only summaries used after a load to check what landed in the store.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from registrar_kernel.models import Course, Department, Enrollment, Student


def table_counts(session: Session) -> dict[str, int]:
    """Row count of every registrar table."""
    return {
        model.__tablename__: session.scalar(select(func.count()).select_from(model))
        for model in (Department, Student, Course, Enrollment)
    }


def students_per_department(session: Session) -> list[tuple[str, int]]:
    """(department, student count) for every department, busiest first."""
    student_count = func.count(Student.id)
    stmt = (
        select(Department.name, student_count)
        .outerjoin(Student, Student.department_id == Department.id)
        .group_by(Department.id, Department.name)
        .order_by(student_count.desc(), Department.name)
    )
    return [(name, count) for name, count in session.execute(stmt)]


def sample_enrollments(session: Session, limit: int = 5) -> list[dict[str, Any]]:
    """The first ``limit`` enrollments with student and course names."""
    stmt = (
        select(
            Student.first_name,
            Student.last_name,
            Student.email,
            Course.name,
            Enrollment.enrollment_date,
            Enrollment.grade,
        )
        .join(Student, Enrollment.student_id == Student.id)
        .join(Course, Enrollment.course_id == Course.id)
        .order_by(Enrollment.id)
        .limit(limit)
    )
    samples: list[dict[str, Any]] = []
    for first, last, email, course, enrolled_on, grade in session.execute(stmt):
        samples.append(
            {
                "student": f"{first} {last}",
                "email": email,
                "course": course,
                "enrollment_date": enrolled_on.isoformat()
                if isinstance(enrolled_on, date)
                else enrolled_on,
                "grade": grade,
            }
        )
    return samples
