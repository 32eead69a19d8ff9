"""Course, enrollment and completion endpoints.

  Client -> POST /v1/courses/{courseId}/enroll
    -> learner pays course.svc_value (402 if the balance is short)
    -> 201 with the learner's updated ledger state

  Client -> POST /v1/courses/{courseId}/complete
    -> course moves ongoing -> completed, teacher paid the price,
       learner credited COMPLETION_REWARD under the configured policy
    -> 200 with the learner's updated ledger state

The price and the reward are server-side values; clients never supply them.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from skillhub.api.accounts import AccountOut, account_out
from skillhub.api.dependencies import get_store, require_principal
from skillhub.api.errors import to_http
from skillhub.models.course import Course
from skillhub.models.principal import Principal
from skillhub.repos.store import Store
from skillhub.services import completion_service, course_registry, enrollment_service
from skillhub.services.errors import CourseNotFoundError, SkillhubError

router = APIRouter(prefix="/v1/courses", tags=["courses"])


class CourseOut(BaseModel):
    id: str
    title: str
    teacher_id: str
    svc_value: int
    description: str
    skill_category: str
    duration: int
    availability: list[str]
    learners: list[str]
    image_url: str | None
    video_urls: list[str]
    document_urls: list[str]
    media_files: list[str]
    created_at: int
    updated_at: int


class CourseCreateIn(BaseModel):
    title: str = Field(min_length=1)
    svc_value: int = Field(ge=0)
    description: str = ""
    skill_category: str = ""
    duration: int = Field(default=0, ge=0)
    availability: list[str] = Field(default_factory=list)
    image_url: str | None = None


class CourseUpdateIn(BaseModel):
    title: str | None = None
    svc_value: int | None = Field(default=None, ge=0)
    description: str | None = None
    skill_category: str | None = None
    duration: int | None = Field(default=None, ge=0)
    availability: list[str] | None = None
    image_url: str | None = None
    video_urls: list[str] | None = None
    document_urls: list[str] | None = None
    media_files: list[str] | None = None


def _course_out(course: Course) -> CourseOut:
    return CourseOut(**asdict(course))


@router.get("", response_model=list[CourseOut])
async def list_courses(
    _principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
    teacher_id: str | None = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[CourseOut]:
    if teacher_id is not None:
        courses = await course_registry.list_teacher_courses(store, teacher_id)
    else:
        courses = await course_registry.list_courses(store, limit)
    return [_course_out(c) for c in courses]


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseCreateIn,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> CourseOut:
    try:
        course = await course_registry.create_course(
            store,
            teacher_id=principal.user_id,
            title=payload.title,
            svc_value=payload.svc_value,
            description=payload.description,
            skill_category=payload.skill_category,
            duration=payload.duration,
            availability=tuple(payload.availability),
            image_url=payload.image_url,
        )
    except SkillhubError as e:
        raise to_http(e) from None
    return _course_out(course)


@router.get("/{course_id}", response_model=CourseOut)
async def get_course(
    course_id: str,
    _principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> CourseOut:
    try:
        course = await course_registry.get_course(store, course_id)
    except SkillhubError as e:
        raise to_http(e) from None
    return _course_out(course)


@router.patch("/{course_id}", response_model=CourseOut)
async def update_course(
    course_id: str,
    payload: CourseUpdateIn,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> CourseOut:
    try:
        course = await course_registry.update_course(
            store,
            course_id,
            editor_id=principal.user_id,
            changes=payload.model_dump(exclude_unset=True),
        )
    except SkillhubError as e:
        raise to_http(e) from None
    return _course_out(course)


@router.post(
    "/{course_id}/enroll",
    response_model=AccountOut,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_in_course(
    course_id: str,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> AccountOut:
    try:
        # Authoritative read: the price charged must not come from the cache.
        course = await store.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError(f"course {course_id} not found")
        account = await enrollment_service.enroll(
            store, principal.user_id, course_id, course.svc_value
        )
    except SkillhubError as e:
        raise to_http(e) from None
    return account_out(account)


@router.post("/{course_id}/complete", response_model=AccountOut)
async def complete_course(
    course_id: str,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> AccountOut:
    try:
        account = await completion_service.complete(
            store, principal.user_id, course_id
        )
    except SkillhubError as e:
        raise to_http(e) from None
    return account_out(account)
