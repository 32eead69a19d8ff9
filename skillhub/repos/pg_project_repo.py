"""PostgreSQL implementation of ProjectRepo."""

from __future__ import annotations

from dataclasses import replace

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillhub.db.tables import ProjectRow
from skillhub.models.account import now_ts
from skillhub.models.project import Project
from skillhub.repos.pg_errors import store_errors
from skillhub.services.errors import ConcurrentUpdateError


class PgProjectRepo:
    """Satisfies the ProjectRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, project_id: str) -> Project | None:
        async with store_errors("project.get"):
            stmt = select(ProjectRow).where(ProjectRow.id == project_id)
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_project(row)

    async def add(self, project: Project) -> None:
        async with store_errors("project.add"):
            self._session.add(ProjectRow(**_project_values(project)))
            await self._session.flush()

    async def update(self, project: Project, *, expected_version: int) -> Project:
        stored = replace(project, version=expected_version + 1, updated_at=now_ts())
        values = _project_values(stored)
        del values["id"], values["created_at"]
        stmt = (
            update(ProjectRow)
            .where(
                ProjectRow.id == project.id, ProjectRow.version == expected_version
            )
            .values(**values)
        )
        async with store_errors("project.update"):
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise ConcurrentUpdateError("project", project.id)
        return stored

    async def list_all(self, limit: int = 50) -> list[Project]:
        async with store_errors("project.list_all"):
            stmt = (
                select(ProjectRow).order_by(ProjectRow.created_at.desc()).limit(limit)
            )
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_project(r) for r in rows]

    async def list_for_user(self, user_id: str) -> list[Project]:
        async with store_errors("project.list_for_user"):
            stmt = (
                select(ProjectRow)
                .where(
                    or_(
                        ProjectRow.creator_id == user_id,
                        ProjectRow.current_members.any(user_id),
                    )
                )
                .order_by(ProjectRow.created_at.desc())
            )
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_project(r) for r in rows]


def _project_values(project: Project) -> dict:
    return {
        "id": project.id,
        "title": project.title,
        "description": project.description,
        "creator_id": project.creator_id,
        "required_skills": list(project.required_skills),
        "max_members": project.max_members,
        "current_members": list(project.current_members),
        "status": project.status,
        "category": project.category,
        "tags": list(project.tags),
        "difficulty_level": project.difficulty_level,
        "estimated_duration": project.estimated_duration,
        "contact_info": project.contact_info,
        "project_links": list(project.project_links),
        "gallery_images": list(project.gallery_images),
        "media_files": list(project.media_files),
        "deadline": project.deadline,
        "requirements": project.requirements,
        "project_goals": list(project.project_goals),
        "created_at": project.created_at,
        "updated_at": project.updated_at,
        "version": project.version,
    }


def _row_to_project(row: ProjectRow) -> Project:
    return Project(
        id=row.id,
        title=row.title,
        description=row.description,
        creator_id=row.creator_id,
        max_members=row.max_members,
        current_members=tuple(row.current_members) if row.current_members else (),
        status=row.status,
        required_skills=tuple(row.required_skills) if row.required_skills else (),
        category=row.category or "",
        tags=tuple(row.tags) if row.tags else (),
        difficulty_level=row.difficulty_level,
        estimated_duration=row.estimated_duration or "",
        contact_info=row.contact_info,
        project_links=tuple(row.project_links) if row.project_links else (),
        gallery_images=tuple(row.gallery_images) if row.gallery_images else (),
        media_files=tuple(row.media_files) if row.media_files else (),
        deadline=row.deadline,
        requirements=row.requirements,
        project_goals=tuple(row.project_goals) if row.project_goals else (),
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
    )
