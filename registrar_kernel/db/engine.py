"""
Engine and session management for the registrar store.

One process-wide engine is built by ``init_engine_from_url()``; services
receive the resulting session factory and open units of work through
``session_scope()``.

Backends:
    postgresql  production; QueuePool with pre-ping, READ COMMITTED.
    sqlite      tests and local dry runs; one shared connection with
                driver-level transactions disabled so SAVEPOINTs nest.
"""

import atexit
from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from registrar_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_NOT_INITIALIZED = "Engine not initialized. Call init_engine_from_url() first."

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


# ---------------------------------------------------------------------------
# Engine construction
# ---------------------------------------------------------------------------


def create_sqlite_engine(database_url: str = "sqlite://", echo: bool = False) -> Engine:
    """SQLite engine with foreign keys on and explicit BEGIN per transaction."""
    engine = create_engine(
        database_url,
        echo=echo,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def _create_postgres_engine(database_url: str, echo: bool, **pool_options) -> Engine:
    return create_engine(
        database_url,
        echo=echo,
        poolclass=QueuePool,
        isolation_level="READ COMMITTED",
        **pool_options,
    )


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 5,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Build the module engine and session factory for ``database_url``.

    Pool arguments apply to PostgreSQL only; a ``sqlite`` URL always gets
    the single-connection engine from ``create_sqlite_engine``.
    """
    global _engine, _session_factory

    if database_url.startswith("sqlite"):
        engine = create_sqlite_engine(database_url, echo=echo)
    else:
        engine = _create_postgres_engine(
            database_url,
            echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
        )

    _engine = engine
    _session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    configure_logging()
    logger.info("engine_initialized", extra={"dialect": engine.dialect.name, "echo": echo})
    return engine


def reset_engine() -> None:
    """Dispose the module engine and forget the session factory."""
    global _engine, _session_factory
    engine, _engine, _session_factory = _engine, None, None
    if engine is not None:
        engine.dispose()


@atexit.register
def _dispose_on_exit() -> None:
    if _engine is not None:
        _engine.dispose()


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _session_factory


def get_session() -> Session:
    return get_session_factory()()


def is_postgres(session_or_engine: Session | Engine | None = None) -> bool:
    """True when the bind behind ``session_or_engine`` (or the module engine) is PostgreSQL."""
    if isinstance(session_or_engine, Session):
        bind = session_or_engine.get_bind()
    else:
        bind = session_or_engine if session_or_engine is not None else _engine
    return bind is not None and bind.dialect.name == "postgresql"


# ---------------------------------------------------------------------------
# Unit of work
# ---------------------------------------------------------------------------


@contextmanager
def session_scope(
    session_factory: Callable[[], Session] | None = None,
) -> Iterator[Session]:
    """
    Open a session, commit on clean exit, roll back and re-raise otherwise.

    Uses ``session_factory`` when given, else the module factory.

        with session_scope(factory) as session:
            session.add(student)
    """
    factory = session_factory if session_factory is not None else get_session_factory()
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


def _metadata():
    from registrar_kernel.db.base import Base
    import registrar_kernel.models  # noqa: F401  registers the mapped tables

    return Base.metadata


def create_tables(engine: Engine | None = None) -> None:
    """Create every registrar table on ``engine`` (default: the module engine)."""
    metadata = _metadata()
    metadata.create_all(engine or get_engine())
    logger.info("tables_created", extra={"tables": sorted(metadata.tables)})


def drop_tables(engine: Engine | None = None) -> None:
    """Drop every registrar table. Tests only."""
    _metadata().drop_all(engine or get_engine())
