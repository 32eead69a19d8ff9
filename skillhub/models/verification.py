from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class VerificationRequest:
    """Evidence submitted for the simulated skill verification."""

    name: str
    claimed_skills: tuple[str, ...]
    linkedin_url: str | None = None
    github_url: str | None = None
    portfolio_url: str | None = None
    other_links: tuple[str, ...] = ()
    bio: str | None = None


@dataclass(frozen=True, slots=True)
class VerificationResult:
    is_verified: bool
    confidence: float  # 0..1
    verified_skills: tuple[str, ...]
    unverified_skills: tuple[str, ...]
    suggestions: tuple[str, ...]
    reasoning: str
