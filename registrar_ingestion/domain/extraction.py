"""
Entity extraction: split validated rows into the four store entities.

One row carries a student and optionally one course enrollment.  Each
entity is keyed by its natural key and the first row that names it wins.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from registrar_ingestion.domain.types import (
    CourseEntity,
    DepartmentEntity,
    EnrollmentEntity,
    ExtractedEntities,
    NormalizedRecord,
    StudentEntity,
)


def extract_entities(
    records: Sequence[NormalizedRecord],
    department_heads: Mapping[str, str],
) -> ExtractedEntities:
    """
    Build department, student, course and enrollment entities in one pass.

    Records must already be valid: department, email, names, birth date and
    year are present, and a course implies an enrollment date.
    """
    departments: dict[str, DepartmentEntity] = {}
    students: dict[str, StudentEntity] = {}
    courses: dict[str, CourseEntity] = {}
    enrollments: list[EnrollmentEntity] = []

    for r in records:
        if r.department not in departments:
            departments[r.department] = DepartmentEntity(
                name=r.department,
                head=department_heads.get(r.department),
            )

        if r.email not in students:
            students[r.email] = StudentEntity(
                first_name=r.first_name,
                last_name=r.last_name,
                email=r.email,
                date_of_birth=r.date_of_birth,
                year=r.year,
                phone=r.phone,
                department_name=r.department,
            )

        if not r.course:
            continue

        if r.course not in courses:
            courses[r.course] = CourseEntity(
                name=r.course,
                department_name=r.department,
                credits=r.credits,
            )

        enrollments.append(
            EnrollmentEntity(
                student_email=r.email,
                course_name=r.course,
                enrollment_date=r.enrollment_date,
                grade=r.grade,
            )
        )

    return ExtractedEntities(
        departments=tuple(departments.values()),
        students=tuple(students.values()),
        courses=tuple(courses.values()),
        enrollments=tuple(enrollments),
    )
