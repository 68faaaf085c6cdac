# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment and waitlist models.

Two partial unique indexes back the engine's locking: at most one active
enrollment per (student, course, semester), and at most one active waitlist
entry per (student, course, semester). Waitlist positions are unique per
(course, semester) over all rows, active or not, so they are never reused.
"""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from registrar.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from registrar.utils.datetime import utc_now


class EnrollmentStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DROPPED = "dropped"


class EnrollmentType(str, enum.Enum):
    REGULAR = "regular"
    WAITLIST_PROMOTED = "waitlist_promoted"
    OVERRIDE = "override"


class WaitlistRemovalReason(str, enum.Enum):
    PROMOTED = "promoted"
    INELIGIBLE = "ineligible"
    WITHDRAWN = "withdrawn"


def _enum_column(enum_cls: type[enum.Enum]) -> Enum:
    return Enum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=lambda members: [m.value for m in members],
    )


class CourseEnrollment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student's seat in a course for a semester."""

    __tablename__ = "course_enrollments"
    __table_args__ = (
        Index(
            "uq_course_enrollments_active",
            "student_id",
            "course_id",
            "semester_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
        Index("ix_course_enrollments_course_semester", "course_id", "semester_id", "status"),
    )

    student_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    )
    semester_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("semesters.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[EnrollmentStatus] = mapped_column(
        _enum_column(EnrollmentStatus),
        nullable=False,
        default=EnrollmentStatus.ACTIVE,
    )
    enrollment_type: Mapped[EnrollmentType] = mapped_column(
        _enum_column(EnrollmentType),
        nullable=False,
        default=EnrollmentType.REGULAR,
    )
    grade_points: Mapped[Decimal | None] = mapped_column(Numeric(3, 2), nullable=True)
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    dropped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    drop_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    requested_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    dropped_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    @property
    def is_active(self) -> bool:
        return self.status == EnrollmentStatus.ACTIVE


class WaitlistEntry(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A queued request for a seat, ordered by position."""

    __tablename__ = "waitlist_entries"
    __table_args__ = (
        UniqueConstraint(
            "course_id", "semester_id", "position", name="uq_waitlist_entries_position"
        ),
        Index(
            "uq_waitlist_entries_active_student",
            "student_id",
            "course_id",
            "semester_id",
            unique=True,
            sqlite_where=text("is_active"),
            postgresql_where=text("is_active"),
        ),
    )

    student_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    )
    semester_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("semesters.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    removed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    removal_reason: Mapped[WaitlistRemovalReason | None] = mapped_column(
        _enum_column(WaitlistRemovalReason),
        nullable=True,
    )
    requested_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def deactivate(self, reason: WaitlistRemovalReason) -> None:
        """Take the entry out of the queue. The position stays reserved."""
        self.is_active = False
        self.removed_at = utc_now()
        self.removal_reason = reason
