"""Compare-and-swap retry behaviour.

The in-memory store serialises transactions, so real interleavings never
reach the version check.  These tests inject a competing write between a
service's read and its write, the way a second API instance sharing one
database would, and check that every precondition is re-evaluated on the
re-run.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace

import pytest

from skillhub.repos.account_repo import InMemoryAccountRepo
from skillhub.repos.store import InMemoryStore
from skillhub.services import enrollment_service
from skillhub.services.cas import run_with_cas
from skillhub.services.errors import ConcurrentUpdateError, InsufficientFundsError
from tests.conftest import seed_account


class _InterleavingAccountRepo(InMemoryAccountRepo):
    """Applies `competing` to the stored record just before the next N writes."""

    def __init__(self) -> None:
        super().__init__()
        self.competing = None
        self.remaining = 0

    async def update(self, account, *, expected_version):
        if self.remaining and self.competing is not None:
            self.remaining -= 1
            current = self._by_id[account.id]
            self._by_id[account.id] = replace(
                self.competing(current), version=current.version + 1
            )
        return await super().update(account, expected_version=expected_version)


class _RacyStore(InMemoryStore):
    """No rollback snapshot: the injected write stands for another
    connection's commit, which our own rollback cannot undo."""

    def __init__(self) -> None:
        super().__init__()
        self.accounts = _InterleavingAccountRepo()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        yield


@pytest.fixture
def racy_store() -> _RacyStore:
    return _RacyStore()


def test_enroll_retries_and_rechecks_balance(racy_store: _RacyStore) -> None:
    seed_account(racy_store, "alice", balance=150)
    repo = racy_store.accounts
    # Another writer spends 100 between our read and our write.
    repo.competing = lambda a: replace(
        a,
        skill_coins=a.skill_coins - 100,
        ongoing_courses=a.ongoing_courses + ("other",),
    )
    repo.remaining = 1

    with pytest.raises(InsufficientFundsError):
        asyncio.run(enrollment_service.enroll(racy_store, "alice", "c1", 100))

    account = asyncio.run(racy_store.accounts.get("alice"))
    assert account is not None
    assert account.skill_coins == 50
    assert account.ongoing_courses == ("other",)


def test_enroll_succeeds_on_retry_when_still_affordable(
    racy_store: _RacyStore,
) -> None:
    seed_account(racy_store, "alice", balance=500)
    repo = racy_store.accounts
    repo.competing = lambda a: replace(a, skill_coins=a.skill_coins - 100)
    repo.remaining = 1

    account = asyncio.run(enrollment_service.enroll(racy_store, "alice", "c1", 100))

    assert account.skill_coins == 300
    assert account.ongoing_courses == ("c1",)


def test_enroll_gives_up_after_max_attempts(racy_store: _RacyStore) -> None:
    seed_account(racy_store, "alice", balance=500)
    repo = racy_store.accounts
    repo.competing = lambda a: replace(a, bio=a.bio + ".")
    repo.remaining = 10

    with pytest.raises(ConcurrentUpdateError):
        asyncio.run(
            enrollment_service.enroll(
                racy_store, "alice", "c1", 100, max_attempts=2
            )
        )

    account = asyncio.run(racy_store.accounts.get("alice"))
    assert account is not None
    assert account.skill_coins == 500
    assert repo.remaining == 8


def test_run_with_cas_does_not_retry_other_errors() -> None:
    calls = 0

    async def attempt():
        nonlocal calls
        calls += 1
        raise InsufficientFundsError(0, 1)

    with pytest.raises(InsufficientFundsError):
        asyncio.run(run_with_cas("test", attempt, max_attempts=5))
    assert calls == 1


def test_run_with_cas_returns_first_success() -> None:
    outcomes = [ConcurrentUpdateError("account", "a"), "done"]

    async def attempt():
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    assert asyncio.run(run_with_cas("test", attempt, max_attempts=3)) == "done"
