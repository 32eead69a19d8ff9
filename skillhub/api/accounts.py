"""Account endpoints: first sign-in, profile, verification and reviews.

  POST  /v1/accounts/me               -> provision on first sign-in (201), else 200
  GET   /v1/accounts/me               -> own ledger state
  PATCH /v1/accounts/me               -> edit profile fields
  POST  /v1/accounts/me/verification  -> simulated skill verification
  GET   /v1/accounts/{id}             -> public profile
  GET   /v1/accounts/{id}/reviews     -> reviews + average
  POST  /v1/accounts/{id}/reviews     -> review another account
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from skillhub.api.dependencies import get_store, require_principal
from skillhub.api.errors import to_http
from skillhub.models.account import Account
from skillhub.models.principal import Principal
from skillhub.models.review import Review
from skillhub.models.verification import VerificationRequest
from skillhub.repos.store import Store
from skillhub.services import account_service, review_service, verification_service
from skillhub.services.errors import SkillhubError

router = APIRouter(prefix="/v1/accounts", tags=["accounts"])


class PublicAccountOut(BaseModel):
    id: str
    name: str
    avatar_url: str
    skills: list[str]
    bio: str
    rating: float
    linkedin_url: str | None
    github_url: str | None
    portfolio_url: str | None
    other_links: list[str]
    skills_verified: bool
    created_at: int


class AccountOut(PublicAccountOut):
    email: str
    skill_coins: int
    ongoing_courses: list[str]
    completed_courses: list[str]
    collaborations: list[str]
    verification_status: str | None
    onboarding_completed: bool
    updated_at: int


class ProfileUpdateIn(BaseModel):
    name: str | None = None
    avatar_url: str | None = None
    skills: list[str] | None = None
    bio: str | None = None
    linkedin_url: str | None = None
    github_url: str | None = None
    portfolio_url: str | None = None
    other_links: list[str] | None = None
    onboarding_completed: bool | None = None


class VerificationIn(BaseModel):
    claimed_skills: list[str] = Field(default_factory=list)
    linkedin_url: str | None = None
    github_url: str | None = None
    portfolio_url: str | None = None
    other_links: list[str] = Field(default_factory=list)
    bio: str | None = None


class VerificationOut(BaseModel):
    is_verified: bool
    confidence: float
    verified_skills: list[str]
    unverified_skills: list[str]
    suggestions: list[str]
    reasoning: str


class ReviewIn(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str | None = None


class ReviewOut(BaseModel):
    id: str
    user_id: str
    reviewer_id: str
    rating: int
    comment: str | None
    created_at: int


class ReviewsOut(BaseModel):
    average_rating: float
    reviews: list[ReviewOut]


def account_out(account: Account) -> AccountOut:
    return AccountOut(**asdict(account))


def _review_out(review: Review) -> ReviewOut:
    return ReviewOut(**asdict(review))


@router.post("/me", response_model=AccountOut)
async def sign_in(
    response: Response,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> AccountOut:
    try:
        account, created = await account_service.ensure_account(store, principal)
    except SkillhubError as e:
        raise to_http(e) from None
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return account_out(account)


@router.get("/me", response_model=AccountOut)
async def get_me(
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> AccountOut:
    try:
        account = await account_service.get_account(store, principal.user_id)
    except SkillhubError as e:
        raise to_http(e) from None
    return account_out(account)


@router.patch("/me", response_model=AccountOut)
async def update_me(
    payload: ProfileUpdateIn,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> AccountOut:
    try:
        account = await account_service.update_profile(
            store,
            principal.user_id,
            payload.model_dump(exclude_unset=True),
        )
    except SkillhubError as e:
        raise to_http(e) from None
    return account_out(account)


@router.post("/me/verification", response_model=VerificationOut)
async def verify_me(
    payload: VerificationIn,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> VerificationOut:
    request = VerificationRequest(
        name=principal.name,
        claimed_skills=tuple(payload.claimed_skills),
        linkedin_url=payload.linkedin_url,
        github_url=payload.github_url,
        portfolio_url=payload.portfolio_url,
        other_links=tuple(payload.other_links),
        bio=payload.bio,
    )
    try:
        _, result = await verification_service.verify_account(
            store, principal.user_id, request
        )
    except SkillhubError as e:
        raise to_http(e) from None
    return VerificationOut(**asdict(result))


@router.get("/{account_id}", response_model=PublicAccountOut)
async def get_account(
    account_id: str,
    _principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> PublicAccountOut:
    try:
        account = await account_service.get_account(store, account_id)
    except SkillhubError as e:
        raise to_http(e) from None
    return PublicAccountOut(**asdict(account))


@router.get("/{account_id}/reviews", response_model=ReviewsOut)
async def get_reviews(
    account_id: str,
    _principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> ReviewsOut:
    reviews = await review_service.list_reviews(store, account_id)
    return ReviewsOut(
        average_rating=review_service.average_rating(reviews),
        reviews=[_review_out(r) for r in reviews],
    )


@router.post(
    "/{account_id}/reviews",
    response_model=ReviewOut,
    status_code=status.HTTP_201_CREATED,
)
async def post_review(
    account_id: str,
    payload: ReviewIn,
    principal: Annotated[Principal, Depends(require_principal)],
    store: Annotated[Store, Depends(get_store)],
) -> ReviewOut:
    try:
        review = await review_service.add_review(
            store,
            user_id=account_id,
            reviewer_id=principal.user_id,
            rating=payload.rating,
            comment=payload.comment,
        )
    except SkillhubError as e:
        raise to_http(e) from None
    return _review_out(review)
