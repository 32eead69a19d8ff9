from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace

import pytest

from skillhub.models.principal import Principal
from skillhub.repos.account_repo import InMemoryAccountRepo
from skillhub.repos.store import InMemoryStore
from skillhub.services import account_service
from skillhub.services.errors import NotFoundError, ValidationError
from tests.conftest import seed_account


def test_first_sign_in_grants_starting_bonus(store: InMemoryStore) -> None:
    principal = Principal(user_id="u1", name="Ada", email="ada@example.com")

    account, created = asyncio.run(
        account_service.ensure_account(store, principal, starting_bonus=500)
    )

    assert created is True
    assert account.id == "u1"
    assert account.name == "Ada"
    assert account.skill_coins == 500
    assert account.ongoing_courses == ()
    assert account.completed_courses == ()


def test_second_sign_in_is_idempotent(store: InMemoryStore) -> None:
    principal = Principal(user_id="u1", email="ada@example.com")
    first, _ = asyncio.run(
        account_service.ensure_account(store, principal, starting_bonus=500)
    )
    # Spend some of the bonus before signing in again.
    asyncio.run(
        store.accounts.update(
            replace(first, skill_coins=20), expected_version=first.version
        )
    )

    account, created = asyncio.run(
        account_service.ensure_account(store, principal, starting_bonus=500)
    )

    assert created is False
    assert account.skill_coins == 20


class _StaleReadAccountRepo(InMemoryAccountRepo):
    """Yields to the event loop after reading, so a second caller can read
    the same snapshot before the first one writes."""

    async def get(self, account_id):
        found = self._by_id.get(account_id)
        await asyncio.sleep(0)
        return found


class _UnserializedStore(InMemoryStore):
    """Separate database sessions: nothing serialises their transactions."""

    def __init__(self) -> None:
        super().__init__()
        self.accounts = _StaleReadAccountRepo()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        yield


def test_concurrent_first_sign_ins_share_one_account() -> None:
    store = _UnserializedStore()
    principal = Principal(user_id="u1", email="ada@example.com")

    async def both():
        return await asyncio.gather(
            account_service.ensure_account(store, principal, starting_bonus=500),
            account_service.ensure_account(store, principal, starting_bonus=500),
        )

    (first, first_created), (second, second_created) = asyncio.run(both())

    assert sorted([first_created, second_created]) == [False, True]
    assert first == second
    assert first.skill_coins == 500
    assert list(store.accounts._by_id) == ["u1"]


def test_name_defaults_to_email_local_part(store: InMemoryStore) -> None:
    principal = Principal(user_id="u1", email="grace@example.com")

    account, _ = asyncio.run(account_service.ensure_account(store, principal))

    assert account.name == "grace"


def test_get_account_unknown(store: InMemoryStore) -> None:
    with pytest.raises(NotFoundError):
        asyncio.run(account_service.get_account(store, "ghost"))


def test_update_profile_edits_allowed_fields(store: InMemoryStore) -> None:
    seed_account(store, "u1", balance=300)

    account = asyncio.run(
        account_service.update_profile(
            store, "u1", {"bio": "Teaches Rust", "skills": ["rust", "go"]}
        )
    )

    assert account.bio == "Teaches Rust"
    assert account.skills == ("rust", "go")
    assert account.skill_coins == 300
    assert account.version == 2


@pytest.mark.parametrize(
    "field", ["skill_coins", "ongoing_courses", "completed_courses", "rating"]
)
def test_update_profile_refuses_ledger_fields(
    store: InMemoryStore, field: str
) -> None:
    seed_account(store, "u1", balance=300)

    with pytest.raises(ValidationError, match="not editable"):
        asyncio.run(account_service.update_profile(store, "u1", {field: 1_000_000}))

    account = asyncio.run(store.accounts.get("u1"))
    assert account is not None
    assert account.skill_coins == 300


def test_update_profile_rejects_blank_name(store: InMemoryStore) -> None:
    seed_account(store, "u1")

    with pytest.raises(ValidationError):
        asyncio.run(account_service.update_profile(store, "u1", {"name": "   "}))


def test_update_profile_unknown_account(store: InMemoryStore) -> None:
    with pytest.raises(NotFoundError):
        asyncio.run(account_service.update_profile(store, "ghost", {"bio": "x"}))


def test_update_profile_clears_link(store: InMemoryStore) -> None:
    seed_account(store, "u1", github_url="https://github.com/u1")

    account = asyncio.run(
        account_service.update_profile(store, "u1", {"github_url": None})
    )

    assert account.github_url is None


@pytest.mark.parametrize("field", ["name", "bio", "skills", "onboarding_completed"])
def test_update_profile_rejects_null_for_required_field(
    store: InMemoryStore, field: str
) -> None:
    seed_account(store, "u1")

    with pytest.raises(ValidationError, match="cannot be null"):
        asyncio.run(account_service.update_profile(store, "u1", {field: None}))
