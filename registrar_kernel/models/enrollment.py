"""
Module: registrar_kernel.models.enrollment
Responsibility: ORM persistence for student-course enrollments.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Both student_id and course_id reference existing rows.
    - enrollment_date is always present; grade is optional.
"""

from datetime import date

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from registrar_kernel.db.base import Base, SurrogateKey


class Enrollment(Base):
    """A student enrolled in a course on a given date."""

    __tablename__ = "enrollment"

    __table_args__ = (
        Index("idx_enrollment_student", "student_id"),
        Index("idx_enrollment_course", "course_id"),
    )

    student_id: Mapped[int] = mapped_column(
        SurrogateKey,
        ForeignKey("student.id"),
        nullable=False,
    )

    course_id: Mapped[int] = mapped_column(
        SurrogateKey,
        ForeignKey("course.id"),
        nullable=False,
    )

    enrollment_date: Mapped[date] = mapped_column(nullable=False)

    # Letter grade (A, A-, B, B-, C, C-, D, F)
    grade: Mapped[str | None] = mapped_column(String(2), nullable=True)

    def __repr__(self) -> str:
        return f"<Enrollment {self.id}: student={self.student_id} course={self.course_id}>"
