"""PostgreSQL implementation of ReviewRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillhub.db.tables import ReviewRow
from skillhub.models.review import Review
from skillhub.repos.pg_errors import store_errors


class PgReviewRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, review: Review) -> None:
        row = ReviewRow(
            id=review.id,
            user_id=review.user_id,
            reviewer_id=review.reviewer_id,
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
        )
        async with store_errors("review.add"):
            self._session.add(row)
            await self._session.flush()

    async def list_for_user(self, user_id: str) -> list[Review]:
        async with store_errors("review.list_for_user"):
            stmt = (
                select(ReviewRow)
                .where(ReviewRow.user_id == user_id)
                .order_by(ReviewRow.created_at.desc())
            )
            rows = (await self._session.execute(stmt)).scalars().all()
        return [
            Review(
                id=r.id,
                user_id=r.user_id,
                reviewer_id=r.reviewer_id,
                rating=r.rating,
                comment=r.comment,
                created_at=r.created_at,
            )
            for r in rows
        ]
