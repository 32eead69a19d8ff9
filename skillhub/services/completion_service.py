"""Completion Service: a learner finishes a course, the teacher is paid.

Preconditions, in order:
  1. learner account exists            -> NotFoundError
  2. course is in the learner's ongoing -> NotEnrolledError
  3. course record resolvable          -> CourseNotFoundError
  4. teacher account resolvable        -> TeacherNotFoundError

Effect, all in one transaction: course id moves ongoing -> completed
(never duplicated in completed), the learner is credited the reward and
the teacher is credited the course price.

Completion policy:
  mint      learner receives `reward` on top of the teacher's payout.
            The learner already paid the price at enrollment, so each
            completion creates `reward` SVC.
  transfer  learner reward is 0; the teacher receives exactly the
            price the learner paid, and total SVC is conserved.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from skillhub.core.config import SETTINGS, CompletionPolicy
from skillhub.core.metrics import LEDGER_OPERATIONS, SVC_MINTED, SVC_TRANSFERRED
from skillhub.models.account import Account
from skillhub.repos.store import Store
from skillhub.services.cas import run_with_cas
from skillhub.services.errors import (
    CourseNotFoundError,
    NotEnrolledError,
    NotFoundError,
    SkillhubError,
    TeacherNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def effective_reward(reward: int, policy: CompletionPolicy) -> int:
    return reward if policy == "mint" else 0


async def complete(
    store: Store,
    learner_id: str,
    course_id: str,
    reward: int | None = None,
    *,
    policy: CompletionPolicy | None = None,
    max_attempts: int | None = None,
) -> Account:
    if reward is None:
        reward = SETTINGS.completion_reward
    if reward < 0:
        raise ValidationError("reward must be >= 0")
    policy = policy or SETTINGS.completion_policy
    credit = effective_reward(reward, policy)
    payout = 0

    async def attempt() -> Account:
        nonlocal payout
        async with store.transaction():
            learner = await store.accounts.get(learner_id)
            if learner is None:
                raise NotFoundError(f"account {learner_id} not found")
            if not learner.is_enrolled(course_id):
                raise NotEnrolledError(f"not enrolled in course {course_id}")
            course = await store.courses.get(course_id)
            if course is None:
                raise CourseNotFoundError(f"course {course_id} not found")
            if course.teacher_id == learner_id:
                teacher = learner
            else:
                teacher = await store.accounts.get(course.teacher_id)
            if teacher is None:
                raise TeacherNotFoundError(
                    f"teacher {course.teacher_id} of course {course_id} not found"
                )

            completed = learner.completed_courses
            if course_id not in completed:
                completed = completed + (course_id,)
            finished = replace(
                learner,
                ongoing_courses=tuple(
                    c for c in learner.ongoing_courses if c != course_id
                ),
                completed_courses=completed,
                skill_coins=learner.skill_coins + credit,
            )
            payout = course.svc_value

            if teacher.id == learner.id:
                # Teaching yourself: both credits land on one record.
                return await store.accounts.update(
                    replace(finished, skill_coins=finished.skill_coins + payout),
                    expected_version=learner.version,
                )

            updated = await store.accounts.update(
                finished, expected_version=learner.version
            )
            await store.accounts.update(
                replace(teacher, skill_coins=teacher.skill_coins + payout),
                expected_version=teacher.version,
            )
            return updated

    try:
        account = await run_with_cas("complete", attempt, max_attempts=max_attempts)
    except SkillhubError as e:
        LEDGER_OPERATIONS.labels(operation="complete", outcome=type(e).__name__).inc()
        logger.warning(
            "Rejected completion learner=%s course=%s: %s",
            learner_id,
            course_id,
            type(e).__name__,
            extra={"account_id": learner_id, "course_id": course_id},
        )
        raise

    LEDGER_OPERATIONS.labels(operation="complete", outcome="ok").inc()
    SVC_MINTED.inc(credit)
    SVC_TRANSFERRED.labels(direction="payout").inc(payout)
    logger.info(
        "Completed learner=%s course=%s reward=%d payout=%d policy=%s",
        learner_id,
        course_id,
        credit,
        payout,
        policy,
        extra={"account_id": learner_id, "course_id": course_id},
    )
    return account
