"""Project Registry: creation, lookup and detail edits of collaboration projects."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from skillhub.models.project import DIFFICULTY_LEVELS, MIN_MEMBERS, Project
from skillhub.repos.store import Store
from skillhub.services.cas import run_with_cas
from skillhub.services.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Details the creator may edit.  Membership, status and capacity change only
# through the membership service.
EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "required_skills",
        "category",
        "tags",
        "difficulty_level",
        "estimated_duration",
        "contact_info",
        "project_links",
        "gallery_images",
        "media_files",
        "deadline",
        "requirements",
        "project_goals",
    }
)
_TUPLE_FIELDS = frozenset(
    {
        "required_skills",
        "tags",
        "project_links",
        "gallery_images",
        "media_files",
        "project_goals",
    }
)
_NULLABLE_FIELDS = frozenset({"contact_info", "deadline", "requirements"})


async def create_project(
    store: Store,
    *,
    creator_id: str,
    title: str,
    description: str,
    max_members: int,
    required_skills: tuple[str, ...] = (),
    category: str = "",
    tags: tuple[str, ...] = (),
    difficulty_level: str = "beginner",
    estimated_duration: str = "",
    contact_info: str | None = None,
    project_links: tuple[str, ...] = (),
    deadline: str | None = None,
    requirements: str | None = None,
    project_goals: tuple[str, ...] = (),
) -> Project:
    """Create a project with the creator as its sole member, status open."""
    if not title.strip():
        raise ValidationError("project title is required")
    if not description.strip():
        raise ValidationError("project description is required")
    if not creator_id.strip():
        raise ValidationError("creator id is required")
    if max_members < MIN_MEMBERS:
        raise ValidationError(f"max_members must be >= {MIN_MEMBERS}")
    if difficulty_level not in DIFFICULTY_LEVELS:
        raise ValidationError(
            f"difficulty_level must be one of {'|'.join(DIFFICULTY_LEVELS)}"
        )
    if await store.accounts.get(creator_id) is None:
        raise NotFoundError(f"account {creator_id} not found")

    project = Project.new(
        title=title.strip(),
        description=description.strip(),
        creator_id=creator_id,
        max_members=max_members,
        required_skills=required_skills,
        category=category,
        tags=tags,
        difficulty_level=difficulty_level,
        estimated_duration=estimated_duration,
        contact_info=contact_info,
        project_links=project_links,
        deadline=deadline,
        requirements=requirements,
        project_goals=project_goals,
    )
    async with store.transaction():
        await store.projects.add(project)
    logger.info(
        "Created project id=%s creator=%s max_members=%d",
        project.id,
        creator_id,
        max_members,
        extra={"project_id": project.id, "account_id": creator_id},
    )
    return project


async def get_project(store: Store, project_id: str) -> Project:
    project = await store.projects.get(project_id)
    if project is None:
        raise NotFoundError(f"project {project_id} not found")
    return project


async def list_projects(store: Store, limit: int = 50) -> list[Project]:
    return await store.projects.list_all(limit)


async def list_user_projects(store: Store, user_id: str) -> list[Project]:
    return await store.projects.list_for_user(user_id)


async def update_project(
    store: Store,
    project_id: str,
    *,
    editor_id: str,
    changes: dict[str, Any],
    max_attempts: int | None = None,
) -> Project:
    """Edit project details or media.  Only the creator may edit."""
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"fields not editable: {', '.join(sorted(unknown))}")
    cleared = sorted(
        k for k, v in changes.items() if v is None and k not in _NULLABLE_FIELDS
    )
    if cleared:
        raise ValidationError(f"fields cannot be null: {', '.join(cleared)}")
    for field in ("title", "description"):
        if field in changes and not changes[field].strip():
            raise ValidationError(f"project {field} is required")
    if changes.get("difficulty_level", "beginner") not in DIFFICULTY_LEVELS:
        raise ValidationError(
            f"difficulty_level must be one of {'|'.join(DIFFICULTY_LEVELS)}"
        )
    normalized = {
        k: tuple(v) if k in _TUPLE_FIELDS else v for k, v in changes.items()
    }

    async def attempt() -> Project:
        async with store.transaction():
            project = await store.projects.get(project_id)
            if project is None:
                raise NotFoundError(f"project {project_id} not found")
            if project.creator_id != editor_id:
                raise PermissionDeniedError("only the creator can edit this project")
            return await store.projects.update(
                replace(project, **normalized), expected_version=project.version
            )

    try:
        project = await run_with_cas(
            "project.update", attempt, max_attempts=max_attempts
        )
    except (NotFoundError, PermissionDeniedError) as e:
        logger.warning(
            "Rejected project update project=%s editor=%s: %s",
            project_id,
            editor_id,
            e,
            extra={"project_id": project_id, "account_id": editor_id},
        )
        raise

    logger.info(
        "Updated project id=%s fields=%s",
        project_id,
        ",".join(sorted(changes)),
        extra={"project_id": project_id},
    )
    return project
