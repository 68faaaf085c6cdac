# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the eligibility evaluator.

Every check runs on every evaluation, so a request failing several rules
reports all of them.
"""

from datetime import timedelta

import pytest

from registrar.domains.eligibility import (
    EligibilityEvaluator,
    FixedRegistrationWindow,
    RegistrationWindow,
)
from registrar.infrastructure.database.models import EnrollmentStatus
from registrar.models.eligibility import ReasonCode

MISSING_ID = "550e8400-e29b-41d4-a716-446655440099"


@pytest.fixture
def evaluator(db_session, settings):
    return EligibilityEvaluator(db_session, settings=settings)


class TestEligibleRequest:
    """Tests for requests that pass every check."""

    @pytest.mark.asyncio
    async def test_allowed(self, evaluator, seed):
        student = await seed.student()
        course = await seed.course()
        semester = await seed.semester()

        result = await evaluator.evaluate(student, course, semester)

        assert result.allowed is True
        assert result.reasons == []

    @pytest.mark.asyncio
    async def test_repeatable(self, evaluator, seed):
        """Test that evaluating twice gives the same answer."""
        student = await seed.student(gpa="2.00")
        course = await seed.course(min_gpa="2.50")
        semester = await seed.semester()

        first = await evaluator.evaluate(student, course, semester)
        second = await evaluator.evaluate(student, course, semester)

        assert first == second


class TestExistenceChecks:
    """Tests for missing and inactive records."""

    @pytest.mark.asyncio
    async def test_everything_missing(self, evaluator):
        result = await evaluator.evaluate(MISSING_ID, MISSING_ID, MISSING_ID)

        assert result.allowed is False
        assert ReasonCode.STUDENT_NOT_FOUND in result.codes
        assert ReasonCode.COURSE_NOT_FOUND in result.codes
        assert ReasonCode.SEMESTER_NOT_FOUND in result.codes

    @pytest.mark.asyncio
    async def test_inactive_student_and_course(self, evaluator, seed):
        student = await seed.student(is_active=False)
        course = await seed.course(is_active=False)
        semester = await seed.semester()

        result = await evaluator.evaluate(student, course, semester)

        assert ReasonCode.STUDENT_INACTIVE in result.codes
        assert ReasonCode.COURSE_INACTIVE in result.codes

    @pytest.mark.asyncio
    async def test_soft_deleted_course_not_found(self, evaluator, seed):
        student = await seed.student()
        course = await seed.course()
        semester = await seed.semester()
        await seed.soft_delete_course(course)

        result = await evaluator.evaluate(student, course, semester)

        assert result.codes == [ReasonCode.COURSE_NOT_FOUND]

    @pytest.mark.asyncio
    async def test_course_offered_in_other_semester(self, evaluator, seed):
        student = await seed.student()
        fall = await seed.semester()
        spring = await seed.semester()
        course = await seed.course(semester_id=fall)

        result = await evaluator.evaluate(student, course, spring)

        assert result.codes == [ReasonCode.COURSE_NOT_OFFERED]


class TestStandingChecks:
    """Tests for GPA and passed-hours requirements."""

    @pytest.mark.asyncio
    async def test_gpa_below_minimum(self, evaluator, seed):
        student = await seed.student(gpa="2.40")
        course = await seed.course(min_gpa="2.50")
        semester = await seed.semester()

        result = await evaluator.evaluate(student, course, semester)

        assert result.codes == [ReasonCode.MIN_GPA_NOT_MET]

    @pytest.mark.asyncio
    async def test_gpa_equal_to_minimum_passes(self, evaluator, seed):
        student = await seed.student(gpa="2.50")
        course = await seed.course(min_gpa="2.50")
        semester = await seed.semester()

        result = await evaluator.evaluate(student, course, semester)

        assert result.allowed is True

    @pytest.mark.asyncio
    async def test_missing_gpa_fails_minimum(self, evaluator, seed):
        student = await seed.student(gpa=None)
        course = await seed.course(min_gpa="1.00")
        semester = await seed.semester()

        result = await evaluator.evaluate(student, course, semester)

        assert result.codes == [ReasonCode.MIN_GPA_NOT_MET]

    @pytest.mark.asyncio
    async def test_passed_hours_below_minimum(self, evaluator, seed):
        student = await seed.student(passed_hours=20)
        course = await seed.course(min_passed_hours=30)
        semester = await seed.semester()

        result = await evaluator.evaluate(student, course, semester)

        assert result.codes == [ReasonCode.MIN_PASSED_HOURS_NOT_MET]


class TestDuplicateAndPrerequisites:
    """Tests for duplicate enrollments and prerequisite edges."""

    @pytest.mark.asyncio
    async def test_duplicate_active_enrollment(self, evaluator, seed):
        student = await seed.student()
        course = await seed.course()
        semester = await seed.semester()
        await seed.enrollment(student, course, semester)

        result = await evaluator.evaluate(student, course, semester)

        assert result.codes == [ReasonCode.DUPLICATE_ENROLLMENT]

    @pytest.mark.asyncio
    async def test_dropped_enrollment_is_not_duplicate(self, evaluator, seed):
        student = await seed.student()
        course = await seed.course()
        semester = await seed.semester()
        await seed.enrollment(student, course, semester, status=EnrollmentStatus.DROPPED)

        result = await evaluator.evaluate(student, course, semester)

        assert result.allowed is True

    @pytest.mark.asyncio
    async def test_prerequisite_grade_below_minimum(self, evaluator, seed):
        """Test MATH301 with a 1.7 in MATH201 against a 2.0 minimum."""
        student = await seed.student()
        semester = await seed.semester()
        math201 = await seed.course(code="MATH201")
        math301 = await seed.course(code="MATH301")
        await seed.prerequisite(math301, math201, min_grade="2.0")
        await seed.enrollment(
            student, math201, semester, status=EnrollmentStatus.COMPLETED, grade_points="1.7"
        )

        result = await evaluator.evaluate(student, math301, semester)

        assert result.allowed is False
        assert result.codes == ["PrerequisiteUnmet:MATH201"]

    @pytest.mark.asyncio
    async def test_advisory_prerequisite_is_warning(self, evaluator, seed):
        student = await seed.student()
        semester = await seed.semester()
        target = await seed.course(code="CS301")
        advisory = await seed.course(code="CS250")
        await seed.prerequisite(target, advisory, is_required=False)

        result = await evaluator.evaluate(student, target, semester)

        assert result.allowed is True
        assert result.warning_codes == ["AdvisoryPrerequisiteUnmet:CS250"]

    @pytest.mark.asyncio
    async def test_all_failures_reported(self, evaluator, seed):
        student = await seed.student(gpa="2.00", passed_hours=10)
        semester = await seed.semester(registration_open=False)
        prerequisite = await seed.course(code="CS101")
        course = await seed.course(code="CS201", min_gpa="2.50", min_passed_hours=30)
        await seed.prerequisite(course, prerequisite)

        result = await evaluator.evaluate(student, course, semester)

        assert set(result.codes) == {
            ReasonCode.MIN_GPA_NOT_MET,
            ReasonCode.MIN_PASSED_HOURS_NOT_MET,
            "PrerequisiteUnmet:CS101",
            ReasonCode.REGISTRATION_CLOSED,
        }


class TestRegistrationWindow:
    """Tests for the registration window check."""

    @pytest.mark.asyncio
    async def test_semester_without_period_is_closed(self, evaluator, seed):
        student = await seed.student()
        course = await seed.course()
        semester = await seed.semester(registration_open=False)

        result = await evaluator.evaluate(student, course, semester)

        assert result.codes == [ReasonCode.REGISTRATION_CLOSED]

    @pytest.mark.asyncio
    async def test_expired_period_is_closed(self, evaluator, seed):
        student = await seed.student()
        course = await seed.course()
        semester = await seed.semester(registration_open=False)
        await seed.registration_period(
            semester, starts_in=timedelta(days=-30), ends_in=timedelta(days=-1)
        )

        result = await evaluator.evaluate(student, course, semester)

        assert result.codes == [ReasonCode.REGISTRATION_CLOSED]

    @pytest.mark.asyncio
    async def test_window_check_can_be_skipped(self, evaluator, seed):
        student = await seed.student()
        course = await seed.course()
        semester = await seed.semester(registration_open=False)

        result = await evaluator.evaluate(
            student, course, semester, check_registration_window=False
        )

        assert result.allowed is True

    @pytest.mark.asyncio
    async def test_fixed_window(self, db_session, settings, seed):
        window = FixedRegistrationWindow(is_open=False)
        evaluator = EligibilityEvaluator(db_session, registration_window=window, settings=settings)
        student = await seed.student()
        course = await seed.course()
        semester = await seed.semester()

        result = await evaluator.evaluate(student, course, semester)

        assert isinstance(window, RegistrationWindow)
        assert result.codes == [ReasonCode.REGISTRATION_CLOSED]


class TestOverride:
    """Tests for administrative override."""

    @pytest.mark.asyncio
    async def test_override_waives_standing_prerequisites_and_window(self, evaluator, seed):
        student = await seed.student(gpa="1.50", passed_hours=0)
        semester = await seed.semester(registration_open=False)
        prerequisite = await seed.course(code="CS101")
        course = await seed.course(code="CS201", min_gpa="3.00", min_passed_hours=30)
        await seed.prerequisite(course, prerequisite)

        result = await evaluator.evaluate(student, course, semester, override=True)

        assert result.allowed is True

    @pytest.mark.asyncio
    async def test_override_does_not_waive_duplicates(self, evaluator, seed):
        student = await seed.student()
        course = await seed.course()
        semester = await seed.semester()
        await seed.enrollment(student, course, semester)

        result = await evaluator.evaluate(student, course, semester, override=True)

        assert result.codes == [ReasonCode.DUPLICATE_ENROLLMENT]

    @pytest.mark.asyncio
    async def test_override_does_not_waive_inactive_student(self, evaluator, seed):
        student = await seed.student(is_active=False)
        course = await seed.course()
        semester = await seed.semester()

        result = await evaluator.evaluate(student, course, semester, override=True)

        assert result.codes == [ReasonCode.STUDENT_INACTIVE]


class TestCreditLoadWarning:
    """Tests for the non-blocking credit-load warning."""

    @pytest.mark.asyncio
    async def test_warning_when_over_limit(self, evaluator, seed):
        """Test a probation student (limit 12) with 10 credits adding 3."""
        student = await seed.student(gpa="1.50")
        semester = await seed.semester()
        heavy = await seed.course(credits=10)
        course = await seed.course(credits=3)
        await seed.enrollment(student, heavy, semester)

        result = await evaluator.evaluate(student, course, semester)

        assert result.allowed is True
        assert result.warning_codes == [ReasonCode.CREDIT_LIMIT_EXCEEDED]

    @pytest.mark.asyncio
    async def test_no_warning_at_limit(self, evaluator, seed):
        student = await seed.student(gpa="1.50")
        semester = await seed.semester()
        heavy = await seed.course(credits=9)
        course = await seed.course(credits=3)
        await seed.enrollment(student, heavy, semester)

        result = await evaluator.evaluate(student, course, semester)

        assert result.warnings == []
