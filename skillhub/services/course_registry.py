"""Course Registry: course records owned by their teacher."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, replace
from typing import Any

from skillhub.core.metrics import CACHE_OPERATIONS
from skillhub.models.course import Course
from skillhub.repos.store import Store
from skillhub.services.cache import cache_service
from skillhub.services.cas import run_with_cas
from skillhub.services.errors import (
    CourseNotFoundError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_COURSE_CACHE_TTL = 300

# Fields a teacher may edit after creation.
EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "skill_category",
        "svc_value",
        "duration",
        "availability",
        "image_url",
        "video_urls",
        "document_urls",
        "media_files",
    }
)
_TUPLE_FIELDS = frozenset(
    {"availability", "learners", "video_urls", "document_urls", "media_files"}
)
# Editable fields that may be cleared with an explicit null.
_NULLABLE_FIELDS = frozenset({"image_url"})


def _cache_key(course_id: str) -> str:
    return f"course:{course_id}"


def _validate(title: str, svc_value: int, duration: int) -> None:
    if not title.strip():
        raise ValidationError("course title must be non-empty")
    if svc_value < 0:
        raise ValidationError("svc_value must be >= 0")
    if duration < 0:
        raise ValidationError("duration must be >= 0")


def _course_from_json(raw: str) -> Course:
    data = json.loads(raw)
    for name in _TUPLE_FIELDS:
        data[name] = tuple(data[name])
    return Course(**data)


async def invalidate(course_id: str) -> None:
    await cache_service.delete(_cache_key(course_id))


async def create_course(
    store: Store,
    *,
    teacher_id: str,
    title: str,
    svc_value: int,
    description: str = "",
    skill_category: str = "",
    duration: int = 0,
    availability: tuple[str, ...] = (),
    image_url: str | None = None,
) -> Course:
    _validate(title, svc_value, duration)
    if await store.accounts.get(teacher_id) is None:
        raise NotFoundError(f"account {teacher_id} not found")

    course = Course.new(
        title=title.strip(),
        teacher_id=teacher_id,
        svc_value=svc_value,
        description=description,
        skill_category=skill_category,
        duration=duration,
        availability=tuple(availability),
        image_url=image_url,
    )
    async with store.transaction():
        await store.courses.add(course)
    logger.info(
        "Created course id=%s teacher=%s svc_value=%d",
        course.id,
        teacher_id,
        svc_value,
        extra={"course_id": course.id, "account_id": teacher_id},
    )
    return course


async def get_course(store: Store, course_id: str) -> Course:
    """Read-through cached lookup.  Raises CourseNotFoundError."""
    cached = await cache_service.get(_cache_key(course_id))
    if cached is not None:
        CACHE_OPERATIONS.labels(operation="hit").inc()
        return _course_from_json(cached)

    CACHE_OPERATIONS.labels(operation="miss").inc()
    course = await store.courses.get(course_id)
    if course is None:
        raise CourseNotFoundError(f"course {course_id} not found")
    await cache_service.set(
        _cache_key(course_id), json.dumps(asdict(course)), _COURSE_CACHE_TTL
    )
    return course


async def list_courses(store: Store, limit: int = 50) -> list[Course]:
    return await store.courses.list_all(limit)


async def list_teacher_courses(store: Store, teacher_id: str) -> list[Course]:
    return await store.courses.list_by_teacher(teacher_id)


async def update_course(
    store: Store,
    course_id: str,
    *,
    editor_id: str,
    changes: dict[str, Any],
    max_attempts: int | None = None,
) -> Course:
    """Edit course details or media.  Only the teacher may edit."""
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"fields not editable: {', '.join(sorted(unknown))}")
    cleared = sorted(
        k for k, v in changes.items() if v is None and k not in _NULLABLE_FIELDS
    )
    if cleared:
        raise ValidationError(f"fields cannot be null: {', '.join(cleared)}")
    normalized = {
        k: tuple(v) if k in _TUPLE_FIELDS and v is not None else v
        for k, v in changes.items()
    }

    async def attempt() -> Course:
        async with store.transaction():
            course = await store.courses.get(course_id)
            if course is None:
                raise CourseNotFoundError(f"course {course_id} not found")
            if course.teacher_id != editor_id:
                raise PermissionDeniedError("only the teacher can edit this course")
            updated = replace(course, **normalized)
            _validate(updated.title, updated.svc_value, updated.duration)
            return await store.courses.update(updated, expected_version=course.version)

    try:
        course = await run_with_cas("course.update", attempt, max_attempts=max_attempts)
    except (CourseNotFoundError, PermissionDeniedError, ValidationError) as e:
        logger.warning(
            "Rejected course update course=%s editor=%s: %s",
            course_id,
            editor_id,
            e,
            extra={"course_id": course_id, "account_id": editor_id},
        )
        raise

    await invalidate(course_id)
    logger.info(
        "Updated course id=%s fields=%s",
        course_id,
        ",".join(sorted(changes)),
        extra={"course_id": course_id},
    )
    return course


async def append_learner(store: Store, course: Course, learner_id: str) -> Course:
    """Informational learner-list append; caller owns the transaction.

    Idempotent: a learner already listed leaves the record untouched.
    """
    if learner_id in course.learners:
        return course
    return await store.courses.update(
        replace(course, learners=course.learners + (learner_id,)),
        expected_version=course.version,
    )
