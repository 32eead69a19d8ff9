from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from skillhub.models.account import Account, now_ts
from skillhub.services.errors import ConcurrentUpdateError, DuplicateRecordError


class AccountRepo(Protocol):
    async def get(self, account_id: str) -> Account | None: ...
    async def add(self, account: Account) -> None: ...
    async def add_if_absent(self, account: Account) -> bool: ...
    async def update(self, account: Account, *, expected_version: int) -> Account: ...
    async def list_by_ids(self, account_ids: list[str]) -> list[Account]: ...


class InMemoryAccountRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, Account] = {}

    async def get(self, account_id: str) -> Account | None:
        return self._by_id.get(account_id)

    async def add(self, account: Account) -> None:
        if account.id in self._by_id:
            raise DuplicateRecordError("account", account.id)
        self._by_id[account.id] = account

    async def add_if_absent(self, account: Account) -> bool:
        if account.id in self._by_id:
            return False
        self._by_id[account.id] = account
        return True

    async def update(self, account: Account, *, expected_version: int) -> Account:
        """Compare-and-swap write: succeeds only if nobody wrote since the read."""
        current = self._by_id.get(account.id)
        if current is None or current.version != expected_version:
            raise ConcurrentUpdateError("account", account.id)
        stored = replace(account, version=expected_version + 1, updated_at=now_ts())
        self._by_id[account.id] = stored
        return stored

    async def list_by_ids(self, account_ids: list[str]) -> list[Account]:
        return [self._by_id[i] for i in account_ids if i in self._by_id]
