"""
Module: registrar_kernel.models.student
Responsibility: ORM persistence for registered students.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - email is the natural key (uq_student_email).  It is stored lower-cased
      by the normalizer, so uniqueness is case-insensitive in practice.
    - year is between 1 and 4 (ck_student_year).
    - department_id references an existing department.

Failure modes:
    - IntegrityError on duplicate email, out-of-range year, or a dangling
      department_id.
"""

from datetime import date

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    SmallInteger,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from registrar_kernel.db.base import Base, SurrogateKey


class Student(Base):
    """A registered student belonging to exactly one department."""

    __tablename__ = "student"

    __table_args__ = (
        UniqueConstraint("email", name="uq_student_email"),
        CheckConstraint("year BETWEEN 1 AND 4", name="ck_student_year"),
        Index("idx_student_department", "department_id"),
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)

    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    date_of_birth: Mapped[date] = mapped_column(nullable=False)

    # Study year, 1 (freshman) to 4 (senior)
    year: Mapped[int] = mapped_column(SmallInteger, nullable=False)

    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    department_id: Mapped[int] = mapped_column(
        SurrogateKey,
        ForeignKey("department.id"),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Student {self.id}: {self.email}>"
