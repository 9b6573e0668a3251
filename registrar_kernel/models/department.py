"""
Module: registrar_kernel.models.department
Responsibility: ORM persistence for academic departments.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - name is the natural key (uq_department_name) and holds the canonical
      department name produced by the alias table.

Failure modes:
    - IntegrityError on duplicate name.
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from registrar_kernel.db.base import Base


class Department(Base):
    """An academic department, optionally with a head of department."""

    __tablename__ = "department"

    __table_args__ = (UniqueConstraint("name", name="uq_department_name"),)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    head: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<Department {self.id}: {self.name}>"
