"""Account Ledger: account provisioning, lookup and profile edits.

Balances and course sets are only ever changed by the enrollment and
completion services; `update_profile` refuses those fields.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from skillhub.core.config import SETTINGS
from skillhub.models.account import Account
from skillhub.models.principal import Principal
from skillhub.repos.store import Store
from skillhub.services.cas import run_with_cas
from skillhub.services.errors import NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = frozenset(
    {
        "name",
        "avatar_url",
        "skills",
        "bio",
        "linkedin_url",
        "github_url",
        "portfolio_url",
        "other_links",
        "onboarding_completed",
    }
)
_TUPLE_FIELDS = frozenset({"skills", "other_links"})
# Profile links a user may clear with an explicit null.
_NULLABLE_FIELDS = frozenset({"linkedin_url", "github_url", "portfolio_url"})


async def ensure_account(
    store: Store,
    principal: Principal,
    *,
    starting_bonus: int | None = None,
) -> tuple[Account, bool]:
    """First sign-in provisioning.  Returns (account, created).

    Idempotent: an existing account is returned unchanged, so the starting
    bonus is granted exactly once per identity.  Two first sign-ins racing
    on separate connections both end up with the one row that was inserted.
    """
    bonus = SETTINGS.starting_bonus if starting_bonus is None else starting_bonus
    async with store.transaction():
        existing = await store.accounts.get(principal.user_id)
        if existing is not None:
            return existing, False
        account = Account.new(
            id=principal.user_id,
            name=principal.name or principal.email.split("@")[0],
            email=principal.email,
            avatar_url=principal.avatar_url,
            starting_bonus=bonus,
        )
        if not await store.accounts.add_if_absent(account):
            winner = await store.accounts.get(principal.user_id)
            if winner is None:
                raise StoreError(f"account {principal.user_id} vanished after insert")
            logger.info(
                "Account id=%s provisioned concurrently, returning existing",
                principal.user_id,
                extra={"account_id": principal.user_id},
            )
            return winner, False

    logger.info(
        "Provisioned account id=%s bonus=%d",
        account.id,
        bonus,
        extra={"account_id": account.id},
    )
    return account, True


async def get_account(store: Store, account_id: str) -> Account:
    account = await store.accounts.get(account_id)
    if account is None:
        raise NotFoundError(f"account {account_id} not found")
    return account


async def update_profile(
    store: Store,
    account_id: str,
    changes: dict[str, Any],
    *,
    max_attempts: int | None = None,
) -> Account:
    unknown = set(changes) - PROFILE_FIELDS
    if unknown:
        logger.warning(
            "Rejected profile update account=%s fields=%s",
            account_id,
            sorted(unknown),
            extra={"account_id": account_id},
        )
        raise ValidationError(f"fields not editable: {', '.join(sorted(unknown))}")
    cleared = sorted(
        k for k, v in changes.items() if v is None and k not in _NULLABLE_FIELDS
    )
    if cleared:
        raise ValidationError(f"fields cannot be null: {', '.join(cleared)}")
    if "name" in changes and not str(changes["name"]).strip():
        raise ValidationError("name must be non-empty")
    normalized = {
        k: tuple(v) if k in _TUPLE_FIELDS and v is not None else v
        for k, v in changes.items()
    }

    async def attempt() -> Account:
        async with store.transaction():
            account = await store.accounts.get(account_id)
            if account is None:
                raise NotFoundError(f"account {account_id} not found")
            return await store.accounts.update(
                replace(account, **normalized), expected_version=account.version
            )

    account = await run_with_cas("account.profile", attempt, max_attempts=max_attempts)
    logger.info(
        "Updated profile account=%s fields=%s",
        account_id,
        ",".join(sorted(changes)),
        extra={"account_id": account_id},
    )
    return account
