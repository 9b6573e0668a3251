"""Database layer - engine, declarative base, session scope."""

from registrar_kernel.db.base import Base, SurrogateKey
from registrar_kernel.db.engine import (
    create_sqlite_engine,
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    is_postgres,
    reset_engine,
    session_scope,
)

__all__ = [
    "Base",
    "SurrogateKey",
    "create_sqlite_engine",
    "create_tables",
    "drop_tables",
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_engine_from_url",
    "is_postgres",
    "reset_engine",
    "session_scope",
]
