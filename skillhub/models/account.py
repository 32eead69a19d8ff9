from __future__ import annotations

import time
from dataclasses import dataclass


def now_ts() -> int:
    return int(time.time())


@dataclass(frozen=True, slots=True)
class Account:
    """A marketplace user and their SVC ledger state.

    `id` is the stable subject issued by the identity provider.
    `skill_coins` is the balance; `ongoing_courses` and `completed_courses`
    are disjoint.  `version` increments on every persisted write and is the
    compare-and-swap token for ledger updates.
    """

    id: str
    name: str
    email: str = ""
    avatar_url: str = ""
    skills: tuple[str, ...] = ()
    bio: str = ""
    rating: float = 0.0
    skill_coins: int = 0
    ongoing_courses: tuple[str, ...] = ()
    completed_courses: tuple[str, ...] = ()
    collaborations: tuple[str, ...] = ()
    linkedin_url: str | None = None
    github_url: str | None = None
    portfolio_url: str | None = None
    other_links: tuple[str, ...] = ()
    skills_verified: bool = False
    verification_status: str | None = None  # verified|unverified
    onboarding_completed: bool = False
    created_at: int = 0
    updated_at: int = 0
    version: int = 1

    @staticmethod
    def new(
        *,
        id: str,
        name: str,
        email: str = "",
        avatar_url: str = "",
        skills: tuple[str, ...] = (),
        starting_bonus: int = 0,
    ) -> Account:
        ts = now_ts()
        return Account(
            id=id,
            name=name,
            email=email,
            avatar_url=avatar_url,
            skills=skills,
            skill_coins=starting_bonus,
            created_at=ts,
            updated_at=ts,
        )

    def is_enrolled(self, course_id: str) -> bool:
        return course_id in self.ongoing_courses

    def has_completed(self, course_id: str) -> bool:
        return course_id in self.completed_courses
