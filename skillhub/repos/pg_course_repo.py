"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from dataclasses import replace

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillhub.db.tables import CourseRow
from skillhub.models.account import now_ts
from skillhub.models.course import Course
from skillhub.repos.pg_errors import store_errors
from skillhub.services.errors import ConcurrentUpdateError


class PgCourseRepo:
    """Satisfies the CourseRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, course_id: str) -> Course | None:
        async with store_errors("course.get"):
            stmt = select(CourseRow).where(CourseRow.id == course_id)
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_course(row)

    async def add(self, course: Course) -> None:
        async with store_errors("course.add"):
            self._session.add(CourseRow(**_course_values(course)))
            await self._session.flush()

    async def update(self, course: Course, *, expected_version: int) -> Course:
        stored = replace(course, version=expected_version + 1, updated_at=now_ts())
        values = _course_values(stored)
        del values["id"], values["created_at"]
        stmt = (
            update(CourseRow)
            .where(CourseRow.id == course.id, CourseRow.version == expected_version)
            .values(**values)
        )
        async with store_errors("course.update"):
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise ConcurrentUpdateError("course", course.id)
        return stored

    async def list_all(self, limit: int = 50) -> list[Course]:
        async with store_errors("course.list_all"):
            stmt = select(CourseRow).order_by(CourseRow.created_at.desc()).limit(limit)
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def list_by_teacher(self, teacher_id: str) -> list[Course]:
        async with store_errors("course.list_by_teacher"):
            stmt = (
                select(CourseRow)
                .where(CourseRow.teacher_id == teacher_id)
                .order_by(CourseRow.created_at.desc())
            )
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]


def _course_values(course: Course) -> dict:
    return {
        "id": course.id,
        "title": course.title,
        "description": course.description,
        "teacher_id": course.teacher_id,
        "skill_category": course.skill_category,
        "svc_value": course.svc_value,
        "duration": course.duration,
        "availability": list(course.availability),
        "learners": list(course.learners),
        "image_url": course.image_url,
        "video_urls": list(course.video_urls),
        "document_urls": list(course.document_urls),
        "media_files": list(course.media_files),
        "created_at": course.created_at,
        "updated_at": course.updated_at,
        "version": course.version,
    }


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        teacher_id=row.teacher_id,
        svc_value=row.svc_value,
        description=row.description or "",
        skill_category=row.skill_category or "",
        duration=row.duration or 0,
        availability=tuple(row.availability) if row.availability else (),
        learners=tuple(row.learners) if row.learners else (),
        image_url=row.image_url,
        video_urls=tuple(row.video_urls) if row.video_urls else (),
        document_urls=tuple(row.document_urls) if row.document_urls else (),
        media_files=tuple(row.media_files) if row.media_files else (),
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
    )
