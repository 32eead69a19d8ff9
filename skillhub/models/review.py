from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

from skillhub.models.account import now_ts


@dataclass(frozen=True, slots=True)
class Review:
    """Append-only peer review of an account (user_reviews table)."""

    id: str
    user_id: str  # reviewed account
    reviewer_id: str
    rating: int  # 1..5
    comment: str | None = None
    created_at: int = 0

    @staticmethod
    def new(
        *, user_id: str, reviewer_id: str, rating: int, comment: str | None = None
    ) -> Review:
        return Review(
            id=str(uuid4()),
            user_id=user_id,
            reviewer_id=reviewer_id,
            rating=rating,
            comment=comment,
            created_at=now_ts(),
        )
