"""Membership Service: joining and leaving projects.

Project.status is derived, not freely settable:

    open ──(2nd member joins)──> in-progress
    in-progress ──(back to creator only)──> open
    open | in-progress ──(creator, manual)──> completed | paused
    paused ──(creator, manual)──> completed, or resume to the derived status
    completed: terminal

join/leave only recompute `open`/`in-progress`; `completed` and `paused`
survive membership changes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace

from skillhub.core.metrics import MEMBERSHIP_CHANGES
from skillhub.models.project import (
    DERIVED_STATUSES,
    PROJECT_STATUSES,
    Project,
    derive_status,
)
from skillhub.repos.store import Store
from skillhub.services.cas import run_with_cas
from skillhub.services.errors import (
    AlreadyMemberError,
    CreatorCannotLeaveError,
    InvalidStatusTransitionError,
    NotFoundError,
    NotMemberError,
    PermissionDeniedError,
    ProjectFullError,
    SkillhubError,
    ValidationError,
)

logger = logging.getLogger(__name__)


async def _mutate(
    store: Store,
    action: str,
    project_id: str,
    user_id: str,
    change: Callable[[Project], Project],
    max_attempts: int | None,
) -> Project:
    """Read the project, apply `change` (which raises on a failed
    precondition), write it back with compare-and-swap."""

    async def attempt() -> Project:
        async with store.transaction():
            project = await store.projects.get(project_id)
            if project is None:
                raise NotFoundError(f"project {project_id} not found")
            changed = change(project)
            if changed is project:
                return project
            return await store.projects.update(
                changed, expected_version=project.version
            )

    try:
        project = await run_with_cas(
            f"project.{action}", attempt, max_attempts=max_attempts
        )
    except SkillhubError as e:
        MEMBERSHIP_CHANGES.labels(action=action, outcome=type(e).__name__).inc()
        logger.warning(
            "Rejected %s project=%s user=%s: %s",
            action,
            project_id,
            user_id,
            type(e).__name__,
            extra={"project_id": project_id, "account_id": user_id},
        )
        raise

    MEMBERSHIP_CHANGES.labels(action=action, outcome="ok").inc()
    logger.info(
        "%s project=%s user=%s members=%d/%d status=%s",
        action,
        project_id,
        user_id,
        project.member_count,
        project.max_members,
        project.status,
        extra={"project_id": project_id, "account_id": user_id},
    )
    return project


async def join(
    store: Store,
    project_id: str,
    user_id: str,
    *,
    max_attempts: int | None = None,
) -> Project:
    def change(project: Project) -> Project:
        if project.is_member(user_id):
            raise AlreadyMemberError(f"{user_id} is already a member")
        if project.is_full:
            raise ProjectFullError(
                f"project {project_id} is at capacity ({project.max_members})"
            )
        members = project.current_members + (user_id,)
        return replace(
            project,
            current_members=members,
            status=derive_status(project.status, len(members)),
        )

    return await _mutate(store, "join", project_id, user_id, change, max_attempts)


async def leave(
    store: Store,
    project_id: str,
    user_id: str,
    *,
    max_attempts: int | None = None,
) -> Project:
    def change(project: Project) -> Project:
        if not project.is_member(user_id):
            raise NotMemberError(f"{user_id} is not a member")
        if user_id == project.creator_id:
            raise CreatorCannotLeaveError("the project creator cannot leave")
        members = tuple(m for m in project.current_members if m != user_id)
        return replace(
            project,
            current_members=members,
            status=derive_status(project.status, len(members)),
        )

    return await _mutate(store, "leave", project_id, user_id, change, max_attempts)


async def set_status(
    store: Store,
    project_id: str,
    actor_id: str,
    new_status: str,
    *,
    max_attempts: int | None = None,
) -> Project:
    """Manual transition by the project creator."""
    if new_status not in PROJECT_STATUSES:
        raise ValidationError(f"status must be one of {'|'.join(PROJECT_STATUSES)}")

    def change(project: Project) -> Project:
        if actor_id != project.creator_id:
            raise PermissionDeniedError("only the creator can change project status")
        current = project.status
        if current == new_status:
            return project
        if current == "completed":
            raise InvalidStatusTransitionError("a completed project cannot change status")
        if new_status in DERIVED_STATUSES:
            # Only a paused project may return to a derived status, and only
            # to the one its member count implies.
            derived = derive_status("open", project.member_count)
            if current != "paused" or new_status != derived:
                raise InvalidStatusTransitionError(
                    f"cannot move from {current} to {new_status}"
                )
        return replace(project, status=new_status)

    return await _mutate(store, "status", project_id, actor_id, change, max_attempts)
