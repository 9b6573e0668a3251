"""
Module: registrar_kernel.models.course
Responsibility: ORM persistence for courses offered by a department.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - name is the natural key (uq_course_name).
    - credits, when present, is between 1 and 4 (ck_course_credits).
"""

from sqlalchemy import CheckConstraint, ForeignKey, SmallInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from registrar_kernel.db.base import Base, SurrogateKey


class Course(Base):
    """A course, owned by the department of the first record that named it."""

    __tablename__ = "course"

    __table_args__ = (
        UniqueConstraint("name", name="uq_course_name"),
        CheckConstraint(
            "credits IS NULL OR credits BETWEEN 1 AND 4",
            name="ck_course_credits",
        ),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    department_id: Mapped[int] = mapped_column(
        SurrogateKey,
        ForeignKey("department.id"),
        nullable=False,
    )

    credits: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)

    def __repr__(self) -> str:
        return f"<Course {self.id}: {self.name}>"
