"""
Pytest fixtures for the registrar test suite.

Provides:
- An in-memory SQLite store per test (one shared connection, SAVEPOINT-capable)
- The bundled default configuration
- A deterministic clock pinned to 2024-06-01
- A collecting event sink and structured-log capture
- Row builders for raw registration data
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO
from pathlib import Path

import pytest
from sqlalchemy.orm import sessionmaker

import registrar_config
from registrar_config.loader import load_config
from registrar_ingestion.domain.events import CollectingEventSink
from registrar_ingestion.domain.types import RawRecord
from registrar_kernel.db.engine import create_sqlite_engine, create_tables
from registrar_kernel.domain.clock import DeterministicClock
from registrar_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

DEFAULT_CONFIG_PATH = Path(registrar_config.__file__).parent / "sets" / "default.yaml"

TEST_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)

# A complete, valid registration row as it appears in the sheet
VALID_ROW = {
    "FirstName": "Ada",
    "LastName": "Lovelace",
    "Email": "ada@example.com",
    "DateOfBirth": "2000-12-10",
    "Year": "Junior",
    "PhoneNumber": "9876543210",
    "Department": "cs",
    "Course": "Algorithms",
    "Credits": "four",
    "EnrollmentDate": "2024-01-15",
    "Grade": "A",
}


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture registrar logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, coordinator):
            coordinator.load(entities)
            logs = captured_logs()
            assert any(r["message"] == "load_committed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("registrar")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Configuration, time, events
# =============================================================================


@pytest.fixture
def config():
    return load_config(DEFAULT_CONFIG_PATH)


@pytest.fixture
def clock():
    return DeterministicClock(TEST_NOW)


@pytest.fixture
def today(clock):
    return clock.today()


@pytest.fixture
def sink():
    return CollectingEventSink()


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with all registrar tables."""
    engine = create_sqlite_engine("sqlite://")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


# =============================================================================
# Row builders
# =============================================================================


@pytest.fixture
def make_row():
    """Build a RawRecord from VALID_ROW with overrides; pass None to blank a cell."""

    def _make(row_id: int = 2, **overrides) -> RawRecord:
        values = dict(VALID_ROW)
        values.update(overrides)
        return RawRecord(row_id=row_id, values=values)

    return _make


@pytest.fixture
def write_csv(tmp_path):
    """Write rows (header first) to a CSV file and return its path."""

    def _write(rows: list[list[str]], name: str = "registrations.csv") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(",".join(row) for row in rows) + "\n")
        return path

    return _write


@pytest.fixture
def valid_payload():
    """A single-registration payload keyed by source column names."""
    return dict(VALID_ROW)
