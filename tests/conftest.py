from __future__ import annotations

import asyncio
import sys
from dataclasses import replace
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from skillhub.api.dependencies import memory_store
from skillhub.main import app
from skillhub.models.account import Account
from skillhub.models.course import Course
from skillhub.models.project import Project
from skillhub.repos.store import InMemoryStore
from skillhub.services import token_service
from skillhub.services.cache import cache_service

# Ensure repo root is on sys.path so `import skillhub` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_memory_store() -> None:
    """Clear the process-wide store the routers use."""
    memory_store.clear()


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def store() -> InMemoryStore:
    """A private store for service-level tests."""
    return InMemoryStore()


def mint_token(
    sub: str = "test-user",
    roles: list[str] | None = None,
    name: str = "",
    email: str = "",
) -> str:
    """Create a valid ES256 JWT the way the identity provider would."""
    return token_service.create_access_token(
        sub=sub, name=name, email=email or f"{sub}@example.com", roles=roles
    )


def auth(sub: str = "test-user", **claims) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(sub, **claims)}"}


@pytest.fixture
def token() -> str:
    return mint_token()


# ---------------------------------------------------------------------------
# Seeding helpers (service tests)
# ---------------------------------------------------------------------------


def seed_account(
    store: InMemoryStore, account_id: str, balance: int = 0, **fields
) -> Account:
    account = replace(
        Account.new(id=account_id, name=account_id, starting_bonus=balance),
        **fields,
    )
    asyncio.run(store.accounts.add(account))
    return account


def seed_course(
    store: InMemoryStore,
    course_id: str,
    teacher_id: str,
    svc_value: int = 100,
) -> Course:
    course = replace(
        Course.new(title=course_id, teacher_id=teacher_id, svc_value=svc_value),
        id=course_id,
    )
    asyncio.run(store.courses.add(course))
    return course


def seed_project(
    store: InMemoryStore,
    project_id: str,
    creator_id: str,
    max_members: int = 3,
    members: tuple[str, ...] = (),
    status: str = "open",
) -> Project:
    project = replace(
        Project.new(
            title=project_id,
            description="build something",
            creator_id=creator_id,
            max_members=max_members,
        ),
        id=project_id,
        current_members=(creator_id, *members),
        status=status,
    )
    asyncio.run(store.projects.add(project))
    return project
