# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions shared by the enrollment domains.

Expected "no" outcomes (ineligible student, full course, already waitlisted,
already dropped) are returned as data by the services and never raised.
Exceptions are reserved for missing records, invalid requests and races
lost at the storage layer.
"""


class RegistrarServiceError(Exception):
    """Base exception for registrar domain errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code.
    """

    code = "RegistrarError"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class EnrollmentValidationError(RegistrarServiceError):
    """Raised when a request references missing or invalid records."""

    code = "ValidationError"


class RecordNotFoundError(EnrollmentValidationError):
    """Base for errors raised when a referenced record does not exist."""

    code = "NotFound"


class RecordConflictError(EnrollmentValidationError):
    """Base for errors raised when a write clashes with existing data."""

    code = "Conflict"


class CourseNotFoundError(RecordNotFoundError):
    """Raised when course is not found or has been deleted."""

    code = "CourseNotFound"


class EnrollmentNotFoundError(RecordNotFoundError):
    """Raised when enrollment is not found."""

    code = "EnrollmentNotFound"


class WaitlistEntryNotFoundError(RecordNotFoundError):
    """Raised when waitlist entry is not found."""

    code = "WaitlistEntryNotFound"


class ConcurrencyConflictError(RegistrarServiceError):
    """Raised when a write lost a race at the storage layer.

    The operation was rolled back. Callers may re-evaluate and retry once.
    """

    code = "ConcurrencyConflict"
    retryable = True
