from __future__ import annotations

import asyncio

import pytest

from skillhub.repos.store import InMemoryStore
from skillhub.services import course_registry, enrollment_service
from skillhub.services.cache import cache_service
from skillhub.services.errors import (
    CourseNotFoundError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from tests.conftest import seed_account, seed_course


def _create(store: InMemoryStore, **kw):
    fields = {"teacher_id": "tom", "title": "Intro to Rust", "svc_value": 120}
    fields.update(kw)
    return asyncio.run(course_registry.create_course(store, **fields))


def test_create_course(store: InMemoryStore) -> None:
    seed_account(store, "tom")

    course = _create(store, duration=6, availability=["mon", "wed"])

    assert course.teacher_id == "tom"
    assert course.svc_value == 120
    assert course.availability == ("mon", "wed")
    assert course.learners == ()
    stored = asyncio.run(store.courses.get(course.id))
    assert stored == course


def test_create_course_unknown_teacher(store: InMemoryStore) -> None:
    with pytest.raises(NotFoundError):
        _create(store)


@pytest.mark.parametrize(
    "bad", [{"title": "  "}, {"svc_value": -1}, {"duration": -2}]
)
def test_create_course_validation(store: InMemoryStore, bad: dict) -> None:
    seed_account(store, "tom")

    with pytest.raises(ValidationError):
        _create(store, **bad)


def test_get_course_unknown(store: InMemoryStore) -> None:
    with pytest.raises(CourseNotFoundError):
        asyncio.run(course_registry.get_course(store, "missing"))


def test_get_course_populates_cache(store: InMemoryStore) -> None:
    seed_account(store, "tom")
    course = seed_course(store, "c1", teacher_id="tom")

    first = asyncio.run(course_registry.get_course(store, "c1"))
    assert asyncio.run(cache_service.get("course:c1")) is not None
    second = asyncio.run(course_registry.get_course(store, "c1"))

    assert first == course
    assert second == course


def test_update_course_by_teacher_invalidates_cache(store: InMemoryStore) -> None:
    seed_account(store, "tom")
    seed_course(store, "c1", teacher_id="tom", svc_value=100)
    asyncio.run(course_registry.get_course(store, "c1"))

    updated = asyncio.run(
        course_registry.update_course(
            store,
            "c1",
            editor_id="tom",
            changes={"svc_value": 80, "video_urls": ["https://v/1"]},
        )
    )

    assert updated.svc_value == 80
    assert updated.video_urls == ("https://v/1",)
    assert asyncio.run(cache_service.get("course:c1")) is None
    assert asyncio.run(course_registry.get_course(store, "c1")).svc_value == 80


def test_update_course_by_other_user_denied(store: InMemoryStore) -> None:
    seed_account(store, "tom")
    seed_course(store, "c1", teacher_id="tom")

    with pytest.raises(PermissionDeniedError):
        asyncio.run(
            course_registry.update_course(
                store, "c1", editor_id="mallory", changes={"svc_value": 0}
            )
        )


def test_update_course_refuses_learner_list(store: InMemoryStore) -> None:
    seed_account(store, "tom")
    seed_course(store, "c1", teacher_id="tom")

    with pytest.raises(ValidationError):
        asyncio.run(
            course_registry.update_course(
                store, "c1", editor_id="tom", changes={"learners": ["x"]}
            )
        )


def test_enrollment_refreshes_cached_learner_list(store: InMemoryStore) -> None:
    seed_account(store, "tom")
    seed_account(store, "alice", balance=500)
    seed_course(store, "c1", teacher_id="tom")
    asyncio.run(course_registry.get_course(store, "c1"))

    asyncio.run(enrollment_service.enroll(store, "alice", "c1", 100))

    course = asyncio.run(course_registry.get_course(store, "c1"))
    assert course.learners == ("alice",)


def test_list_teacher_courses(store: InMemoryStore) -> None:
    seed_account(store, "tom")
    seed_account(store, "ann")
    seed_course(store, "c1", teacher_id="tom")
    seed_course(store, "c2", teacher_id="ann")

    courses = asyncio.run(course_registry.list_teacher_courses(store, "tom"))

    assert [c.id for c in courses] == ["c1"]


def test_update_course_clears_image(store: InMemoryStore) -> None:
    seed_account(store, "tom")
    seed_course(store, "c1", teacher_id="tom")
    asyncio.run(
        course_registry.update_course(
            store, "c1", editor_id="tom", changes={"image_url": "https://img/c1.png"}
        )
    )

    updated = asyncio.run(
        course_registry.update_course(
            store, "c1", editor_id="tom", changes={"image_url": None}
        )
    )

    assert updated.image_url is None


def test_update_course_rejects_null_price(store: InMemoryStore) -> None:
    seed_account(store, "tom")
    seed_course(store, "c1", teacher_id="tom")

    with pytest.raises(ValidationError, match="cannot be null"):
        asyncio.run(
            course_registry.update_course(
                store, "c1", editor_id="tom", changes={"svc_value": None}
            )
        )
