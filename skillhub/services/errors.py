"""Typed failures raised by the ledger, registry and membership services.

Routers translate these into HTTP responses (see skillhub/api/errors.py);
nothing below the router layer swallows them.
"""

from __future__ import annotations


class SkillhubError(Exception):
    """Base class for every domain failure."""


class ValidationError(SkillhubError, ValueError):
    pass


class PermissionDeniedError(SkillhubError):
    pass


class NotFoundError(SkillhubError):
    pass


class CourseNotFoundError(NotFoundError):
    pass


class TeacherNotFoundError(NotFoundError):
    pass


class InsufficientFundsError(SkillhubError):
    def __init__(self, balance: int, price: int) -> None:
        super().__init__(f"balance {balance} is below price {price}")
        self.balance = balance
        self.price = price


class AlreadyEnrolledError(SkillhubError):
    pass


class NotEnrolledError(SkillhubError):
    pass


class AlreadyMemberError(SkillhubError):
    pass


class NotMemberError(SkillhubError):
    pass


class ProjectFullError(SkillhubError):
    pass


class CreatorCannotLeaveError(SkillhubError):
    pass


class InvalidStatusTransitionError(SkillhubError):
    pass


class StoreError(SkillhubError):
    """Underlying data-access failure.  Never retried."""


class DuplicateRecordError(StoreError):
    """An insert collided with an existing record id."""

    def __init__(self, record: str, record_id: str) -> None:
        super().__init__(f"{record} {record_id} already exists")
        self.record = record
        self.record_id = record_id


class ConcurrentUpdateError(StoreError):
    """A compare-and-swap write found the record changed since it was read."""

    def __init__(self, record: str, record_id: str) -> None:
        super().__init__(f"{record} {record_id} was modified concurrently")
        self.record = record
        self.record_id = record_id
