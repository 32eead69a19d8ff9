from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from skillhub.models.account import now_ts
from skillhub.models.project import Project
from skillhub.services.errors import ConcurrentUpdateError, DuplicateRecordError


class ProjectRepo(Protocol):
    async def get(self, project_id: str) -> Project | None: ...
    async def add(self, project: Project) -> None: ...
    async def update(self, project: Project, *, expected_version: int) -> Project: ...
    async def list_all(self, limit: int = 50) -> list[Project]: ...
    async def list_for_user(self, user_id: str) -> list[Project]: ...


class InMemoryProjectRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, Project] = {}

    async def get(self, project_id: str) -> Project | None:
        return self._by_id.get(project_id)

    async def add(self, project: Project) -> None:
        if project.id in self._by_id:
            raise DuplicateRecordError("project", project.id)
        self._by_id[project.id] = project

    async def update(self, project: Project, *, expected_version: int) -> Project:
        current = self._by_id.get(project.id)
        if current is None or current.version != expected_version:
            raise ConcurrentUpdateError("project", project.id)
        stored = replace(project, version=expected_version + 1, updated_at=now_ts())
        self._by_id[project.id] = stored
        return stored

    async def list_all(self, limit: int = 50) -> list[Project]:
        projects = sorted(self._by_id.values(), key=lambda p: -p.created_at)
        return projects[:limit]

    async def list_for_user(self, user_id: str) -> list[Project]:
        """Projects the user created or is a member of."""
        return sorted(
            (
                p
                for p in self._by_id.values()
                if p.creator_id == user_id or user_id in p.current_members
            ),
            key=lambda p: -p.created_at,
        )
