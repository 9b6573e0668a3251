"""Tests for the engine helpers, the ORM constraints and the clocks."""

from datetime import date, datetime, timezone

import pytest
from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError

from registrar_kernel.db.engine import (
    get_engine,
    init_engine_from_url,
    is_postgres,
    reset_engine,
    session_scope,
)
from registrar_kernel.domain.clock import DeterministicClock, SystemClock
from registrar_kernel.models import Course, Department, Student


def _department(session, name="Physics"):
    department = Department(name=name)
    session.add(department)
    session.flush()
    return department


class TestSchema:

    def test_tables_created(self, engine):
        assert set(inspect(engine).get_table_names()) == {
            "department",
            "student",
            "course",
            "enrollment",
        }

    def test_department_name_unique(self, session):
        _department(session)
        session.add(Department(name="Physics"))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_student_year_checked(self, session):
        department = _department(session)
        session.add(
            Student(
                first_name="Kid",
                last_name="Young",
                email="kid@example.com",
                date_of_birth=date(2000, 1, 1),
                year=5,
                department_id=department.id,
            )
        )
        with pytest.raises(IntegrityError):
            session.flush()

    def test_course_credits_checked(self, session):
        department = _department(session)
        session.add(Course(name="Quantum", department_id=department.id, credits=9))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_foreign_keys_enforced(self, session):
        session.add(Course(name="Orphan", department_id=999))
        with pytest.raises(IntegrityError):
            session.flush()


class TestSessionScope:

    def test_commits(self, session_factory):
        with session_scope(session_factory) as session:
            _department(session)
        with session_scope(session_factory) as session:
            assert session.scalar(select(Department.name)) == "Physics"

    def test_rolls_back_and_reraises(self, session_factory):
        with pytest.raises(RuntimeError):
            with session_scope(session_factory) as session:
                _department(session)
                raise RuntimeError("abort")
        with session_scope(session_factory) as session:
            assert session.scalar(select(Department.name)) is None

    def test_savepoint_rollback_keeps_outer_work(self, session_factory):
        with session_scope(session_factory) as session:
            _department(session, "Physics")
            with pytest.raises(IntegrityError):
                with session.begin_nested():
                    _department(session, "Physics")
            _department(session, "Mathematics")
        with session_scope(session_factory) as session:
            names = session.scalars(select(Department.name).order_by(Department.name)).all()
        assert names == ["Mathematics", "Physics"]


class TestModuleEngine:

    def test_uninitialized(self):
        reset_engine()
        with pytest.raises(RuntimeError, match="Engine not initialized"):
            get_engine()

    def test_sqlite_url(self):
        engine = init_engine_from_url("sqlite://")
        try:
            assert get_engine() is engine
            assert not is_postgres(engine)
        finally:
            reset_engine()


class TestClocks:

    def test_deterministic(self):
        clock = DeterministicClock(datetime(2024, 6, 1, 23, 30, tzinfo=timezone.utc))
        assert clock.now() == clock.now()
        assert clock.today() == date(2024, 6, 1)
        clock.advance(3600)
        assert clock.today() == date(2024, 6, 2)

    def test_set_time(self):
        clock = DeterministicClock()
        clock.advance(10)
        clock.set_time(datetime(2030, 1, 1, tzinfo=timezone.utc))
        assert clock.now() == datetime(2030, 1, 1, tzinfo=timezone.utc)

    def test_system_clock_is_aware(self):
        assert SystemClock().now().tzinfo is not None
