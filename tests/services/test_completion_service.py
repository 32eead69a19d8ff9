from __future__ import annotations

import asyncio

import pytest

from skillhub.repos.account_repo import InMemoryAccountRepo
from skillhub.repos.store import InMemoryStore
from skillhub.services import completion_service, enrollment_service
from skillhub.services.errors import (
    CourseNotFoundError,
    NotEnrolledError,
    NotFoundError,
    StoreError,
    TeacherNotFoundError,
    ValidationError,
)
from tests.conftest import seed_account, seed_course


def _get(store: InMemoryStore, account_id: str):
    account = asyncio.run(store.accounts.get(account_id))
    assert account is not None
    return account


def _complete(store: InMemoryStore, learner: str, course: str, reward=100, **kw):
    return asyncio.run(
        completion_service.complete(store, learner, course, reward, **kw)
    )


def test_learner_journey_enroll_then_complete(store: InMemoryStore) -> None:
    seed_account(store, "a", balance=500)
    seed_account(store, "t", balance=1000)
    seed_course(store, "c", teacher_id="t", svc_value=150)

    after_enroll = asyncio.run(enrollment_service.enroll(store, "a", "c", 150))
    assert after_enroll.skill_coins == 350
    assert after_enroll.ongoing_courses == ("c",)

    after_complete = _complete(store, "a", "c", 100, policy="mint")
    assert after_complete.skill_coins == 450
    assert after_complete.ongoing_courses == ()
    assert after_complete.completed_courses == ("c",)
    assert _get(store, "t").skill_coins == 1150

    with pytest.raises(NotEnrolledError):
        _complete(store, "a", "c", 100, policy="mint")
    assert _get(store, "a").skill_coins == 450
    assert _get(store, "t").skill_coins == 1150


def test_complete_credits_reward_and_pays_teacher(store: InMemoryStore) -> None:
    seed_account(store, "a", balance=10, ongoing_courses=("c",))
    seed_account(store, "t", balance=0)
    seed_course(store, "c", teacher_id="t", svc_value=80)

    account = _complete(store, "a", "c", 25, policy="mint")

    assert account.skill_coins == 35
    assert _get(store, "t").skill_coins == 80


def test_complete_does_not_duplicate_completed_entry(store: InMemoryStore) -> None:
    seed_account(
        store,
        "a",
        balance=0,
        ongoing_courses=("c",),
        completed_courses=("c",),
    )
    seed_account(store, "t")
    seed_course(store, "c", teacher_id="t")

    account = _complete(store, "a", "c", policy="mint")

    assert account.completed_courses == ("c",)
    assert account.ongoing_courses == ()


def test_complete_keeps_other_ongoing_courses(store: InMemoryStore) -> None:
    seed_account(store, "a", ongoing_courses=("c0", "c", "c2"))
    seed_account(store, "t")
    seed_course(store, "c", teacher_id="t")

    account = _complete(store, "a", "c", policy="mint")

    assert account.ongoing_courses == ("c0", "c2")


def test_complete_requires_enrollment(store: InMemoryStore) -> None:
    seed_account(store, "a", balance=100)
    seed_account(store, "t", balance=0)
    seed_course(store, "c", teacher_id="t")

    with pytest.raises(NotEnrolledError):
        _complete(store, "a", "c")

    assert _get(store, "a").skill_coins == 100
    assert _get(store, "t").skill_coins == 0


def test_complete_unknown_learner(store: InMemoryStore) -> None:
    with pytest.raises(NotFoundError):
        _complete(store, "ghost", "c")


def test_complete_unknown_course(store: InMemoryStore) -> None:
    seed_account(store, "a", ongoing_courses=("c",))

    with pytest.raises(CourseNotFoundError):
        _complete(store, "a", "c")

    assert _get(store, "a").ongoing_courses == ("c",)


def test_complete_unknown_teacher(store: InMemoryStore) -> None:
    seed_account(store, "a", ongoing_courses=("c",))
    seed_course(store, "c", teacher_id="vanished")

    with pytest.raises(TeacherNotFoundError):
        _complete(store, "a", "c")

    account = _get(store, "a")
    assert account.ongoing_courses == ("c",)
    assert account.completed_courses == ()


def test_complete_negative_reward_rejected(store: InMemoryStore) -> None:
    seed_account(store, "a", ongoing_courses=("c",))

    with pytest.raises(ValidationError):
        _complete(store, "a", "c", -5)


# ---- completion policy ----


def test_transfer_policy_conserves_currency(store: InMemoryStore) -> None:
    seed_account(store, "a", balance=500)
    seed_account(store, "t", balance=1000)
    seed_course(store, "c", teacher_id="t", svc_value=150)
    total_before = 1500

    asyncio.run(enrollment_service.enroll(store, "a", "c", 150))
    account = _complete(store, "a", "c", 100, policy="transfer")

    assert account.skill_coins == 350
    assert _get(store, "t").skill_coins == 1150
    assert account.skill_coins + _get(store, "t").skill_coins == total_before


def test_effective_reward() -> None:
    assert completion_service.effective_reward(100, "mint") == 100
    assert completion_service.effective_reward(100, "transfer") == 0


def test_self_taught_course_credits_both_amounts(store: InMemoryStore) -> None:
    seed_account(store, "t", balance=0, ongoing_courses=("c",))
    seed_course(store, "c", teacher_id="t", svc_value=70)

    account = _complete(store, "t", "c", 30, policy="mint")

    assert account.skill_coins == 100
    assert account.completed_courses == ("c",)


# ---- atomicity ----


class _FailingTeacherRepo(InMemoryAccountRepo):
    """Fails any write to one account, after the learner write has landed."""

    def __init__(self, failing_id: str) -> None:
        super().__init__()
        self._failing_id = failing_id

    async def update(self, account, *, expected_version):
        if account.id == self._failing_id:
            raise StoreError("disk on fire")
        return await super().update(account, expected_version=expected_version)


def test_teacher_write_failure_rolls_back_learner(store: InMemoryStore) -> None:
    store.accounts = _FailingTeacherRepo("t")
    seed_account(store, "a", balance=10, ongoing_courses=("c",))
    seed_account(store, "t", balance=0)
    seed_course(store, "c", teacher_id="t")

    with pytest.raises(StoreError):
        _complete(store, "a", "c", 100, policy="mint")

    account = _get(store, "a")
    assert account.skill_coins == 10
    assert account.ongoing_courses == ("c",)
    assert account.completed_courses == ()
    assert _get(store, "t").skill_coins == 0


def test_concurrent_completions_pay_teacher_once(store: InMemoryStore) -> None:
    seed_account(store, "a", ongoing_courses=("c",))
    seed_account(store, "t", balance=0)
    seed_course(store, "c", teacher_id="t", svc_value=100)

    async def race():
        return await asyncio.gather(
            completion_service.complete(store, "a", "c", 10, policy="mint"),
            completion_service.complete(store, "a", "c", 10, policy="mint"),
            return_exceptions=True,
        )

    results = asyncio.run(race())

    assert sum(1 for r in results if isinstance(r, NotEnrolledError)) == 1
    assert _get(store, "t").skill_coins == 100
    assert _get(store, "a").skill_coins == 10
