"""Enrollment Service: a learner pays a course's SVC price to start it.

Preconditions, checked in this order against freshly read state:
  1. learner account exists          -> NotFoundError
  2. balance >= price                -> InsufficientFundsError
  3. course not already ongoing      -> AlreadyEnrolledError
     (nor already completed          -> AlreadyCompletedError)

Effect: course id appended to the learner's ongoing set, balance debited
by the price.  The teacher is paid at completion, not here; the debited
SVC is held implicitly until then.  The course's informational learner
list is appended in the same transaction when the course record exists.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from skillhub.core.metrics import LEDGER_OPERATIONS, SVC_TRANSFERRED
from skillhub.models.account import Account
from skillhub.repos.store import Store
from skillhub.services import course_registry
from skillhub.services.cas import run_with_cas
from skillhub.services.errors import (
    AlreadyEnrolledError,
    InsufficientFundsError,
    NotFoundError,
    SkillhubError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class AlreadyCompletedError(AlreadyEnrolledError):
    """The learner finished this course before; re-enrolling would put the
    id in both the ongoing and completed sets."""


async def enroll(
    store: Store,
    learner_id: str,
    course_id: str,
    price: int,
    *,
    max_attempts: int | None = None,
) -> Account:
    if price < 0:
        raise ValidationError("price must be >= 0")

    course_touched = False

    async def attempt() -> Account:
        nonlocal course_touched
        async with store.transaction():
            learner = await store.accounts.get(learner_id)
            if learner is None:
                raise NotFoundError(f"account {learner_id} not found")
            if learner.skill_coins < price:
                raise InsufficientFundsError(learner.skill_coins, price)
            if learner.is_enrolled(course_id):
                raise AlreadyEnrolledError(f"already enrolled in course {course_id}")
            if learner.has_completed(course_id):
                raise AlreadyCompletedError(f"course {course_id} already completed")

            updated = await store.accounts.update(
                replace(
                    learner,
                    ongoing_courses=learner.ongoing_courses + (course_id,),
                    skill_coins=learner.skill_coins - price,
                ),
                expected_version=learner.version,
            )

            course = await store.courses.get(course_id)
            if course is not None:
                after = await course_registry.append_learner(store, course, learner_id)
                course_touched = after is not course
            return updated

    try:
        account = await run_with_cas("enroll", attempt, max_attempts=max_attempts)
    except SkillhubError as e:
        LEDGER_OPERATIONS.labels(operation="enroll", outcome=type(e).__name__).inc()
        logger.warning(
            "Rejected enrollment learner=%s course=%s price=%d: %s",
            learner_id,
            course_id,
            price,
            type(e).__name__,
            extra={"account_id": learner_id, "course_id": course_id},
        )
        raise

    if course_touched:
        await course_registry.invalidate(course_id)

    LEDGER_OPERATIONS.labels(operation="enroll", outcome="ok").inc()
    SVC_TRANSFERRED.labels(direction="debit").inc(price)
    logger.info(
        "Enrolled learner=%s course=%s price=%d balance=%d",
        learner_id,
        course_id,
        price,
        account.skill_coins,
        extra={"account_id": learner_id, "course_id": course_id},
    )
    return account
