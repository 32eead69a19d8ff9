"""PostgreSQL implementation of AccountRepo."""

from __future__ import annotations

from dataclasses import replace

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from skillhub.db.tables import AccountRow
from skillhub.models.account import Account, now_ts
from skillhub.repos.pg_errors import store_errors
from skillhub.services.errors import ConcurrentUpdateError


class PgAccountRepo:
    """Satisfies the AccountRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, account_id: str) -> Account | None:
        async with store_errors("account.get"):
            stmt = select(AccountRow).where(AccountRow.id == account_id)
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_account(row)

    async def add(self, account: Account) -> None:
        async with store_errors("account.add"):
            self._session.add(AccountRow(**_account_values(account)))
            await self._session.flush()

    async def add_if_absent(self, account: Account) -> bool:
        """Insert unless the id is taken.  A concurrent insert of the same id
        blocks until the other transaction ends, then reports not inserted."""
        stmt = (
            insert(AccountRow)
            .values(**_account_values(account))
            .on_conflict_do_nothing(index_elements=[AccountRow.id])
        )
        async with store_errors("account.add_if_absent"):
            result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def update(self, account: Account, *, expected_version: int) -> Account:
        stored = replace(account, version=expected_version + 1, updated_at=now_ts())
        values = _account_values(stored)
        del values["id"], values["created_at"]
        stmt = (
            update(AccountRow)
            .where(AccountRow.id == account.id, AccountRow.version == expected_version)
            .values(**values)
        )
        async with store_errors("account.update"):
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise ConcurrentUpdateError("account", account.id)
        return stored

    async def list_by_ids(self, account_ids: list[str]) -> list[Account]:
        if not account_ids:
            return []
        async with store_errors("account.list_by_ids"):
            stmt = select(AccountRow).where(AccountRow.id.in_(account_ids))
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_account(r) for r in rows]


def _account_values(account: Account) -> dict:
    return {
        "id": account.id,
        "name": account.name,
        "email": account.email,
        "avatar_url": account.avatar_url,
        "skills": list(account.skills),
        "bio": account.bio,
        "rating": account.rating,
        "skill_coins": account.skill_coins,
        "ongoing_courses": list(account.ongoing_courses),
        "completed_courses": list(account.completed_courses),
        "collaborations": list(account.collaborations),
        "linkedin_url": account.linkedin_url,
        "github_url": account.github_url,
        "portfolio_url": account.portfolio_url,
        "other_links": list(account.other_links),
        "skills_verified": account.skills_verified,
        "verification_status": account.verification_status,
        "onboarding_completed": account.onboarding_completed,
        "created_at": account.created_at,
        "updated_at": account.updated_at,
        "version": account.version,
    }


def _row_to_account(row: AccountRow) -> Account:
    return Account(
        id=row.id,
        name=row.name or "",
        email=row.email or "",
        avatar_url=row.avatar_url or "",
        skills=tuple(row.skills) if row.skills else (),
        bio=row.bio or "",
        rating=row.rating or 0.0,
        skill_coins=row.skill_coins,
        ongoing_courses=tuple(row.ongoing_courses) if row.ongoing_courses else (),
        completed_courses=(
            tuple(row.completed_courses) if row.completed_courses else ()
        ),
        collaborations=tuple(row.collaborations) if row.collaborations else (),
        linkedin_url=row.linkedin_url,
        github_url=row.github_url,
        portfolio_url=row.portfolio_url,
        other_links=tuple(row.other_links) if row.other_links else (),
        skills_verified=row.skills_verified,
        verification_status=row.verification_status,
        onboarding_completed=row.onboarding_completed,
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
    )
