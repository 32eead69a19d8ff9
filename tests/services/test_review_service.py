from __future__ import annotations

import asyncio

import pytest

from skillhub.models.review import Review
from skillhub.repos.store import InMemoryStore
from skillhub.services import review_service
from skillhub.services.errors import NotFoundError, ValidationError
from tests.conftest import seed_account


def _review(store: InMemoryStore, reviewer: str, rating: int, comment=None):
    return asyncio.run(
        review_service.add_review(
            store,
            user_id="teacher",
            reviewer_id=reviewer,
            rating=rating,
            comment=comment,
        )
    )


def test_average_rating_rounds_to_one_decimal() -> None:
    reviews = [
        Review.new(user_id="t", reviewer_id=r, rating=n)
        for r, n in [("a", 5), ("b", 4), ("c", 4)]
    ]
    assert review_service.average_rating(reviews) == 4.3


def test_average_rating_empty() -> None:
    assert review_service.average_rating([]) == 0.0


def test_add_review_updates_account_rating(store: InMemoryStore) -> None:
    seed_account(store, "teacher")
    seed_account(store, "l1")
    seed_account(store, "l2")

    _review(store, "l1", 5, "  great  ")
    review = _review(store, "l2", 2)

    assert review.rating == 2
    teacher = asyncio.run(store.accounts.get("teacher"))
    assert teacher is not None
    assert teacher.rating == 3.5
    reviews = asyncio.run(review_service.list_reviews(store, "teacher"))
    assert {r.comment for r in reviews} == {"great", None}


def test_cannot_review_yourself(store: InMemoryStore) -> None:
    seed_account(store, "teacher")

    with pytest.raises(ValidationError):
        _review(store, "teacher", 5)


@pytest.mark.parametrize("rating", [0, 6, -1])
def test_rating_out_of_range(store: InMemoryStore, rating: int) -> None:
    seed_account(store, "teacher")
    seed_account(store, "l1")

    with pytest.raises(ValidationError):
        _review(store, "l1", rating)


def test_review_of_unknown_account(store: InMemoryStore) -> None:
    seed_account(store, "l1")

    with pytest.raises(NotFoundError):
        _review(store, "l1", 4)

    assert asyncio.run(review_service.list_reviews(store, "teacher")) == []


def test_review_by_unknown_reviewer_is_rolled_back(store: InMemoryStore) -> None:
    seed_account(store, "teacher")

    with pytest.raises(NotFoundError):
        _review(store, "ghost", 4)

    assert asyncio.run(review_service.list_reviews(store, "teacher")) == []
