# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

Database-backed tests run against a throwaway SQLite file per test. The
catalogue (students, semesters, courses, prerequisites, history) is seeded
through CatalogSeeder, which commits in its own session and hands back ids,
so the session under test never holds the seeded objects.
"""

from collections.abc import AsyncGenerator, Generator
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from registrar.core.config.settings import Settings, clear_settings_cache
from registrar.domains.enrollment.service import EnrollmentEngine
from registrar.infrastructure.database.connection import create_sessionmaker
from registrar.infrastructure.database.models import (
    Base,
    Course,
    CourseEnrollment,
    CoursePrerequisite,
    EnrollmentStatus,
    RegistrationPeriod,
    Semester,
    Student,
)
from registrar.infrastructure.notifications import MemoryChannel, NotificationService
from registrar.utils.datetime import utc_now


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Reload settings from the environment for every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> Settings:
    """Provide development settings with default enrollment policy."""
    return Settings(environment="development")


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a SQLite database with the full schema."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'registrar.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(db_engine)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create the session under test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# =============================================================================
# Notification Fixtures
# =============================================================================


@pytest.fixture
def memory_channel() -> MemoryChannel:
    return MemoryChannel()


@pytest.fixture
def notifier(memory_channel: MemoryChannel) -> NotificationService:
    """Provide a notification service that records events in memory."""
    return NotificationService(channels=[memory_channel])


@pytest.fixture
def make_engine(notifier: NotificationService, settings: Settings):
    """Build an EnrollmentEngine on a given session."""

    def _make(session: AsyncSession) -> EnrollmentEngine:
        return EnrollmentEngine(session, notifier=notifier, settings=settings)

    return _make


@pytest.fixture
def engine(db_session: AsyncSession, make_engine) -> EnrollmentEngine:
    return make_engine(db_session)


# =============================================================================
# Catalogue Seeding
# =============================================================================


class CatalogSeeder:
    """Creates catalogue rows in a separate session and returns their ids."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _save(self, *rows: Base) -> None:
        async with self._session_factory() as session:
            session.add_all(rows)
            await session.commit()

    async def student(
        self,
        gpa: str | None = "3.00",
        passed_hours: int = 60,
        is_active: bool = True,
        student_number: str | None = None,
    ) -> str:
        number = self._next()
        student = Student(
            student_number=student_number or f"S{number:05d}",
            full_name=f"Student {number}",
            gpa=Decimal(gpa) if gpa is not None else None,
            passed_hours=passed_hours,
            is_active=is_active,
        )
        await self._save(student)
        return student.id

    async def semester(self, code: str | None = None, registration_open: bool = True) -> str:
        """Create a semester, with a registration period around now when open."""
        number = self._next()
        semester = Semester(
            code=code or f"2025-T{number}",
            name=f"Term {number}",
            start_date=date(2025, 9, 1),
            end_date=date(2026, 1, 31),
        )
        await self._save(semester)

        if registration_open:
            await self.registration_period(
                semester.id,
                starts_in=timedelta(days=-7),
                ends_in=timedelta(days=7),
            )
        return semester.id

    async def registration_period(
        self,
        semester_id: str,
        starts_in: timedelta,
        ends_in: timedelta,
        is_active: bool = True,
    ) -> str:
        now = utc_now()
        period = RegistrationPeriod(
            semester_id=semester_id,
            name="Main registration",
            starts_at=now + starts_in,
            ends_at=now + ends_in,
            is_active=is_active,
        )
        await self._save(period)
        return period.id

    async def course(
        self,
        code: str | None = None,
        max_students: int | None = 30,
        min_gpa: str | None = None,
        min_passed_hours: int | None = None,
        credits: int = 3,
        is_active: bool = True,
        semester_id: str | None = None,
    ) -> str:
        number = self._next()
        course = Course(
            code=code or f"C{number:03d}",
            title=f"Course {number}",
            credits=credits,
            max_students=max_students,
            min_gpa=Decimal(min_gpa) if min_gpa is not None else None,
            min_passed_hours=min_passed_hours,
            is_active=is_active,
            semester_id=semester_id,
        )
        await self._save(course)
        return course.id

    async def prerequisite(
        self,
        course_id: str,
        prerequisite_course_id: str,
        is_required: bool = True,
        min_grade: str | None = None,
    ) -> str:
        edge = CoursePrerequisite(
            course_id=course_id,
            prerequisite_course_id=prerequisite_course_id,
            is_required=is_required,
            min_grade=Decimal(min_grade) if min_grade is not None else None,
        )
        await self._save(edge)
        return edge.id

    async def enrollment(
        self,
        student_id: str,
        course_id: str,
        semester_id: str,
        status: EnrollmentStatus = EnrollmentStatus.ACTIVE,
        grade_points: str | None = None,
    ) -> str:
        """Record an enrollment directly, e.g. a completed course in the history."""
        enrollment = CourseEnrollment(
            student_id=student_id,
            course_id=course_id,
            semester_id=semester_id,
            status=status,
            grade_points=Decimal(grade_points) if grade_points is not None else None,
            requested_by="seed",
        )
        await self._save(enrollment)
        return enrollment.id

    async def soft_delete_course(self, course_id: str) -> None:
        async with self._session_factory() as session:
            course = await session.get(Course, course_id)
            course.deleted_at = utc_now()
            await session.commit()

    async def update(self, model: type[Base], row_id: str, **values: object) -> None:
        async with self._session_factory() as session:
            row = await session.get(model, row_id)
            for key, value in values.items():
                setattr(row, key, value)
            await session.commit()


@pytest.fixture
def seed(session_factory: async_sessionmaker[AsyncSession]) -> CatalogSeeder:
    return CatalogSeeder(session_factory)


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
