"""Translate domain failures into HTTP responses.

Routers catch SkillhubError around each service call and re-raise
`to_http(e)`.  The response body carries a stable machine-readable
code next to the human message:

    {"detail": {"code": "InsufficientFunds", "message": "balance 50 is below price 100"}}
"""

from __future__ import annotations

from fastapi import HTTPException, status

from skillhub.services.errors import (
    AlreadyEnrolledError,
    ConcurrentUpdateError,
    DuplicateRecordError,
    InsufficientFundsError,
    NotFoundError,
    PermissionDeniedError,
    SkillhubError,
    StoreError,
    ValidationError,
)

# First match wins, so subclasses come before their bases.
_STATUS_BY_ERROR: tuple[tuple[type[SkillhubError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InsufficientFundsError, status.HTTP_402_PAYMENT_REQUIRED),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (ValidationError, 422),
    (ConcurrentUpdateError, status.HTTP_409_CONFLICT),
    (DuplicateRecordError, status.HTTP_409_CONFLICT),
    (StoreError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def error_code(e: SkillhubError) -> str:
    # AlreadyCompletedError is reported as its parent.
    if isinstance(e, AlreadyEnrolledError):
        return "AlreadyEnrolled"
    name = type(e).__name__
    return name.removesuffix("Error") or name


def to_http(e: SkillhubError) -> HTTPException:
    code = status.HTTP_409_CONFLICT
    for error_type, http_status in _STATUS_BY_ERROR:
        if isinstance(e, error_type):
            code = http_status
            break
    return HTTPException(
        status_code=code,
        detail={"code": error_code(e), "message": str(e)},
    )
