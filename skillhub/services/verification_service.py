"""Simulated AI skill verification.

A stand-in for a model-backed reviewer: confidence grows with the
number of evidence links supplied (LinkedIn, GitHub, portfolio) and
with having claimed any skills at all, plus a small random jitter.
Accuracy is not a goal; the output shape is what the client consumes.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import replace

from skillhub.models.account import Account
from skillhub.models.verification import VerificationRequest, VerificationResult
from skillhub.repos.store import Store
from skillhub.services.cas import run_with_cas
from skillhub.services.errors import NotFoundError

logger = logging.getLogger(__name__)

VERIFIED_THRESHOLD = 0.6
MAX_CONFIDENCE = 0.95


def verify_skills(
    request: VerificationRequest, rng: random.Random | None = None
) -> VerificationResult:
    rng = rng or random.Random()
    evidence = {
        "linkedin": bool(request.linkedin_url),
        "github": bool(request.github_url),
        "portfolio": bool(request.portfolio_url),
    }
    evidence_score = sum(evidence.values())
    skill_count = len(request.claimed_skills)

    confidence = min(
        MAX_CONFIDENCE,
        (evidence_score / 3) * 0.6
        + (0.3 if skill_count > 0 else 0.0)
        + rng.random() * 0.1,
    )
    is_verified = confidence > VERIFIED_THRESHOLD
    verified_count = math.floor(
        skill_count * (confidence if is_verified else confidence * 0.5)
    )
    verified = request.claimed_skills[:verified_count]
    unverified = request.claimed_skills[verified_count:]

    suggestions = []
    if not evidence["linkedin"]:
        suggestions.append("Add your LinkedIn profile to increase verification confidence")
    if not evidence["github"]:
        suggestions.append("Connect your GitHub to showcase your code")
    if not evidence["portfolio"]:
        suggestions.append("Add a portfolio website to demonstrate your work")
    suggestions.append("Consider adding specific project examples for each skill")

    if is_verified:
        reasoning = (
            f"Skills verification successful. Found strong evidence for "
            f"{verified_count}/{skill_count} claimed skills across "
            f"{evidence_score} platform(s)."
        )
    else:
        reasoning = (
            f"Verification incomplete. Need more evidence for {len(unverified)} "
            f"skills. Consider adding more detailed profiles or project links."
        )

    return VerificationResult(
        is_verified=is_verified,
        confidence=confidence,
        verified_skills=verified,
        unverified_skills=unverified,
        suggestions=tuple(suggestions),
        reasoning=reasoning,
    )


async def verify_account(
    store: Store,
    account_id: str,
    request: VerificationRequest,
    *,
    rng: random.Random | None = None,
    max_attempts: int | None = None,
) -> tuple[Account, VerificationResult]:
    """Run the verification and record its outcome and evidence links."""
    result = verify_skills(request, rng)

    async def attempt() -> Account:
        async with store.transaction():
            account = await store.accounts.get(account_id)
            if account is None:
                raise NotFoundError(f"account {account_id} not found")
            return await store.accounts.update(
                replace(
                    account,
                    skills=request.claimed_skills or account.skills,
                    linkedin_url=request.linkedin_url,
                    github_url=request.github_url,
                    portfolio_url=request.portfolio_url,
                    other_links=request.other_links,
                    skills_verified=result.is_verified,
                    verification_status=(
                        "verified" if result.is_verified else "unverified"
                    ),
                ),
                expected_version=account.version,
            )

    account = await run_with_cas("account.verify", attempt, max_attempts=max_attempts)
    logger.info(
        "Skill verification account=%s verified=%s confidence=%.2f",
        account_id,
        result.is_verified,
        result.confidence,
        extra={"account_id": account_id},
    )
    return account, result
