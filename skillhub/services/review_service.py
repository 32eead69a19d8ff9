from __future__ import annotations

import logging
from dataclasses import replace

from skillhub.models.review import Review
from skillhub.repos.store import Store
from skillhub.services.cas import run_with_cas
from skillhub.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def average_rating(reviews: list[Review]) -> float:
    if not reviews:
        return 0.0
    return round(sum(r.rating for r in reviews) / len(reviews), 1)


async def add_review(
    store: Store,
    *,
    user_id: str,
    reviewer_id: str,
    rating: int,
    comment: str | None = None,
    max_attempts: int | None = None,
) -> Review:
    """Append a review and refresh the reviewed account's average rating."""
    if not 1 <= rating <= 5:
        raise ValidationError("rating must be between 1 and 5")
    if user_id == reviewer_id:
        raise ValidationError("cannot review yourself")

    review = Review.new(
        user_id=user_id,
        reviewer_id=reviewer_id,
        rating=rating,
        comment=comment.strip() if comment and comment.strip() else None,
    )

    async def attempt() -> Review:
        async with store.transaction():
            account = await store.accounts.get(user_id)
            if account is None:
                raise NotFoundError(f"account {user_id} not found")
            if await store.accounts.get(reviewer_id) is None:
                raise NotFoundError(f"account {reviewer_id} not found")
            await store.reviews.add(review)
            reviews = await store.reviews.list_for_user(user_id)
            await store.accounts.update(
                replace(account, rating=average_rating(reviews)),
                expected_version=account.version,
            )
            return review

    saved = await run_with_cas("review.add", attempt, max_attempts=max_attempts)
    logger.info(
        "Review added user=%s reviewer=%s rating=%d",
        user_id,
        reviewer_id,
        rating,
        extra={"account_id": user_id},
    )
    return saved


async def list_reviews(store: Store, user_id: str) -> list[Review]:
    return await store.reviews.list_for_user(user_id)
