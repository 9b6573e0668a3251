"""
Module: registrar_kernel.db.base
Responsibility: Declarative base class for all SQLAlchemy ORM models.  Provides
    the integer surrogate key convention and the type annotation map for
    consistent column types.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/ or from registrar_ingestion.

Invariants enforced:
    - Integer surrogate keys: every table has an autoincrementing ``id``.
      Natural keys (department name, student email, course name) are carried
      as UNIQUE columns and resolved to ids at load time.
    - int maps to BigInteger on PostgreSQL and to INTEGER on SQLite, so the
      primary key stays a rowid alias there and autoincrements.

Failure modes:
    - IntegrityError if a natural key is inserted twice.
"""

from datetime import date
from typing import ClassVar

from sqlalchemy import BigInteger, Date, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

SurrogateKey = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is an autoincrementing integer primary key.
        - str maps to String(255), date to Date.
    """

    type_annotation_map: ClassVar[dict] = {
        int: SurrogateKey,
        str: String(255),
        date: Date,
    }

    id: Mapped[int] = mapped_column(
        SurrogateKey,
        primary_key=True,
        autoincrement=True,
    )
