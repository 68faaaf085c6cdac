# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mapping of domain exceptions to HTTP errors."""

from fastapi import HTTPException, status

from registrar.domains.errors import (
    ConcurrencyConflictError,
    RecordConflictError,
    RecordNotFoundError,
    RegistrarServiceError,
)


def to_http_error(error: RegistrarServiceError) -> HTTPException:
    """Convert a domain exception to an HTTPException.

    Not found maps to 404, conflicts to 409 and other validation errors to
    400. A lost storage race is a 409 that tells the client it may retry.
    """
    if isinstance(error, ConcurrencyConflictError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": error.code, "message": error.message, "retryable": True},
        )
    if isinstance(error, RecordNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, RecordConflictError):
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return HTTPException(
        status_code=status_code,
        detail={"code": error.code, "message": error.message},
    )
