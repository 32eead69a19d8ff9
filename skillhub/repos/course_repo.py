from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from skillhub.models.account import now_ts
from skillhub.models.course import Course
from skillhub.services.errors import ConcurrentUpdateError, DuplicateRecordError


class CourseRepo(Protocol):
    async def get(self, course_id: str) -> Course | None: ...
    async def add(self, course: Course) -> None: ...
    async def update(self, course: Course, *, expected_version: int) -> Course: ...
    async def list_all(self, limit: int = 50) -> list[Course]: ...
    async def list_by_teacher(self, teacher_id: str) -> list[Course]: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, Course] = {}

    async def get(self, course_id: str) -> Course | None:
        return self._by_id.get(course_id)

    async def add(self, course: Course) -> None:
        if course.id in self._by_id:
            raise DuplicateRecordError("course", course.id)
        self._by_id[course.id] = course

    async def update(self, course: Course, *, expected_version: int) -> Course:
        current = self._by_id.get(course.id)
        if current is None or current.version != expected_version:
            raise ConcurrentUpdateError("course", course.id)
        stored = replace(course, version=expected_version + 1, updated_at=now_ts())
        self._by_id[course.id] = stored
        return stored

    async def list_all(self, limit: int = 50) -> list[Course]:
        # newest first, matching the PostgreSQL ORDER BY created_at DESC
        courses = sorted(self._by_id.values(), key=lambda c: -c.created_at)
        return courses[:limit]

    async def list_by_teacher(self, teacher_id: str) -> list[Course]:
        return sorted(
            (c for c in self._by_id.values() if c.teacher_id == teacher_id),
            key=lambda c: -c.created_at,
        )
