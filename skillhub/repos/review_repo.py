from __future__ import annotations

from typing import Protocol

from skillhub.models.review import Review


class ReviewRepo(Protocol):
    async def add(self, review: Review) -> None: ...
    async def list_for_user(self, user_id: str) -> list[Review]: ...


class InMemoryReviewRepo:
    def __init__(self) -> None:
        self._reviews: list[Review] = []

    async def add(self, review: Review) -> None:
        self._reviews.append(review)

    async def list_for_user(self, user_id: str) -> list[Review]:
        return sorted(
            (r for r in self._reviews if r.user_id == user_id),
            key=lambda r: -r.created_at,
        )
