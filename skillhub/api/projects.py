from __future__ import annotations

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from skillhub.api.dependencies import get_store, require_principal
from skillhub.api.errors import to_http
from skillhub.models.principal import Principal
from skillhub.models.project import MIN_MEMBERS, Project
from skillhub.repos.store import Store
from skillhub.services import membership_service, project_registry
from skillhub.services.errors import SkillhubError

router = APIRouter(prefix="/v1/projects", tags=["projects"])


class ProjectOut(BaseModel):
    id: str
    title: str
    description: str
    creator_id: str
    max_members: int
    current_members: list[str]
    member_count: int
    status: str
    required_skills: list[str]
    category: str
    tags: list[str]
    difficulty_level: str
    estimated_duration: str
    contact_info: str | None
    project_links: list[str]
    gallery_images: list[str]
    media_files: list[str]
    deadline: str | None
    requirements: str | None
    project_goals: list[str]
    created_at: int
    updated_at: int


class ProjectCreateIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    max_members: int = Field(ge=MIN_MEMBERS)
    required_skills: list[str] = Field(default_factory=list)
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    difficulty_level: str = "beginner"
    estimated_duration: str = ""
    contact_info: str | None = None
    project_links: list[str] = Field(default_factory=list)
    deadline: str | None = None
    requirements: str | None = None
    project_goals: list[str] = Field(default_factory=list)


class ProjectUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    required_skills: list[str] | None = None
    category: str | None = None
    tags: list[str] | None = None
    difficulty_level: str | None = None
    estimated_duration: str | None = None
    contact_info: str | None = None
    project_links: list[str] | None = None
    gallery_images: list[str] | None = None
    media_files: list[str] | None = None
    deadline: str | None = None
    requirements: str | None = None
    project_goals: list[str] | None = None


class StatusIn(BaseModel):
    status: str


def _project_out(project: Project) -> ProjectOut:
    return ProjectOut(**asdict(project), member_count=project.member_count)


@router.get("", response_model=list[ProjectOut])
async def list_projects(
    _principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
    member_id: str | None = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[ProjectOut]:
    if member_id is not None:
        projects = await project_registry.list_user_projects(store, member_id)
    else:
        projects = await project_registry.list_projects(store, limit)
    return [_project_out(p) for p in projects]


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreateIn,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> ProjectOut:
    try:
        project = await project_registry.create_project(
            store,
            creator_id=principal.user_id,
            title=payload.title,
            description=payload.description,
            max_members=payload.max_members,
            required_skills=tuple(payload.required_skills),
            category=payload.category,
            tags=tuple(payload.tags),
            difficulty_level=payload.difficulty_level,
            estimated_duration=payload.estimated_duration,
            contact_info=payload.contact_info,
            project_links=tuple(payload.project_links),
            deadline=payload.deadline,
            requirements=payload.requirements,
            project_goals=tuple(payload.project_goals),
        )
    except SkillhubError as e:
        raise to_http(e) from None
    return _project_out(project)


@router.get("/{project_id}", response_model=ProjectOut)
async def get_project(
    project_id: str,
    _principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> ProjectOut:
    try:
        project = await project_registry.get_project(store, project_id)
    except SkillhubError as e:
        raise to_http(e) from None
    return _project_out(project)


@router.patch("/{project_id}", response_model=ProjectOut)
async def update_project(
    project_id: str,
    payload: ProjectUpdateIn,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> ProjectOut:
    try:
        project = await project_registry.update_project(
            store,
            project_id,
            editor_id=principal.user_id,
            changes=payload.model_dump(exclude_unset=True),
        )
    except SkillhubError as e:
        raise to_http(e) from None
    return _project_out(project)


@router.post("/{project_id}/join", response_model=ProjectOut)
async def join_project(
    project_id: str,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> ProjectOut:
    try:
        project = await membership_service.join(store, project_id, principal.user_id)
    except SkillhubError as e:
        raise to_http(e) from None
    return _project_out(project)


@router.post("/{project_id}/leave", response_model=ProjectOut)
async def leave_project(
    project_id: str,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> ProjectOut:
    try:
        project = await membership_service.leave(store, project_id, principal.user_id)
    except SkillhubError as e:
        raise to_http(e) from None
    return _project_out(project)


@router.patch("/{project_id}/status", response_model=ProjectOut)
async def set_project_status(
    project_id: str,
    payload: StatusIn,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> ProjectOut:
    try:
        project = await membership_service.set_status(
            store, project_id, principal.user_id, payload.status
        )
    except SkillhubError as e:
        raise to_http(e) from None
    return _project_out(project)
