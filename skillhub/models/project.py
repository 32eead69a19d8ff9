from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import uuid4

from skillhub.models.account import now_ts

ProjectStatus = Literal["open", "in-progress", "completed", "paused"]
DifficultyLevel = Literal["beginner", "intermediate", "advanced"]

PROJECT_STATUSES: tuple[str, ...] = ("open", "in-progress", "completed", "paused")
DIFFICULTY_LEVELS: tuple[str, ...] = ("beginner", "intermediate", "advanced")

# Statuses recomputed from member count on join/leave.  The others are
# only reachable through a manual transition and survive membership changes.
DERIVED_STATUSES: frozenset[str] = frozenset({"open", "in-progress"})

MIN_MEMBERS = 2


@dataclass(frozen=True, slots=True)
class Project:
    """A collaboration project.

    Invariants: the creator is always in `current_members`, and
    `len(current_members) <= max_members`.
    """

    id: str
    title: str
    description: str
    creator_id: str
    max_members: int
    current_members: tuple[str, ...]
    status: str = "open"  # open|in-progress|completed|paused
    required_skills: tuple[str, ...] = ()
    category: str = ""
    tags: tuple[str, ...] = ()
    difficulty_level: str = "beginner"  # beginner|intermediate|advanced
    estimated_duration: str = ""
    contact_info: str | None = None
    project_links: tuple[str, ...] = ()
    gallery_images: tuple[str, ...] = ()
    media_files: tuple[str, ...] = ()
    deadline: str | None = None
    requirements: str | None = None
    project_goals: tuple[str, ...] = ()
    created_at: int = 0
    updated_at: int = 0
    version: int = 1

    @staticmethod
    def new(
        *,
        title: str,
        description: str,
        creator_id: str,
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
        ts = now_ts()
        return Project(
            id=str(uuid4()),
            title=title,
            description=description,
            creator_id=creator_id,
            max_members=max_members,
            current_members=(creator_id,),
            status="open",
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
            created_at=ts,
            updated_at=ts,
        )

    @property
    def member_count(self) -> int:
        return len(self.current_members)

    @property
    def is_full(self) -> bool:
        return self.member_count >= self.max_members

    def is_member(self, user_id: str) -> bool:
        return user_id in self.current_members


def derive_status(current: str, member_count: int) -> str:
    """Status implied by the member count, leaving sticky statuses alone."""
    if current not in DERIVED_STATUSES:
        return current
    return "in-progress" if member_count > 1 else "open"
