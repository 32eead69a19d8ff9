from __future__ import annotations

import asyncio

import pytest

from skillhub.repos.store import InMemoryStore
from skillhub.services import membership_service, project_registry
from skillhub.services.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from tests.conftest import seed_account, seed_project


def _create(store: InMemoryStore, **kw):
    fields = {
        "creator_id": "c",
        "title": "Open-source synth",
        "description": "A modular synth in the browser",
        "max_members": 4,
    }
    fields.update(kw)
    return asyncio.run(project_registry.create_project(store, **fields))


def test_create_project_starts_open_with_creator(store: InMemoryStore) -> None:
    seed_account(store, "c")

    project = _create(store, tags=("audio",), difficulty_level="advanced")

    assert project.current_members == ("c",)
    assert project.status == "open"
    assert project.max_members == 4
    assert project.difficulty_level == "advanced"
    assert asyncio.run(project_registry.get_project(store, project.id)) == project


@pytest.mark.parametrize(
    "bad",
    [
        {"title": " "},
        {"description": ""},
        {"max_members": 1},
        {"difficulty_level": "expert"},
    ],
)
def test_create_project_validation(store: InMemoryStore, bad: dict) -> None:
    seed_account(store, "c")

    with pytest.raises(ValidationError):
        _create(store, **bad)


def test_create_project_unknown_creator(store: InMemoryStore) -> None:
    with pytest.raises(NotFoundError):
        _create(store)


def test_get_project_unknown(store: InMemoryStore) -> None:
    with pytest.raises(NotFoundError):
        asyncio.run(project_registry.get_project(store, "missing"))


def test_list_user_projects_includes_joined(store: InMemoryStore) -> None:
    seed_account(store, "c")
    seed_account(store, "u2")
    mine = _create(store)
    _create(store, creator_id="c", title="Another")
    theirs = _create(store, creator_id="u2", title="Theirs")
    asyncio.run(membership_service.join(store, mine.id, "u2"))

    projects = asyncio.run(project_registry.list_user_projects(store, "u2"))

    assert {p.id for p in projects} == {mine.id, theirs.id}


def _update(store: InMemoryStore, editor_id: str, changes: dict):
    return asyncio.run(
        project_registry.update_project(
            store, "p1", editor_id=editor_id, changes=changes
        )
    )


def test_update_project_details_and_media(store: InMemoryStore) -> None:
    seed_project(store, "p1", "c", members=("u2",), status="in-progress")

    updated = _update(
        store,
        "c",
        {
            "title": "Synth v2",
            "tags": ["audio", "wasm"],
            "gallery_images": ["https://img/1.png"],
            "media_files": ["https://files/demo.wav"],
            "deadline": "2026-12-01",
        },
    )

    assert updated.title == "Synth v2"
    assert updated.tags == ("audio", "wasm")
    assert updated.gallery_images == ("https://img/1.png",)
    assert updated.media_files == ("https://files/demo.wav",)
    assert updated.deadline == "2026-12-01"
    assert updated.current_members == ("c", "u2")
    assert updated.status == "in-progress"
    assert asyncio.run(project_registry.get_project(store, "p1")) == updated


def test_update_project_clears_nullable_field(store: InMemoryStore) -> None:
    seed_project(store, "p1", "c")
    _update(store, "c", {"contact_info": "c@example.com"})

    updated = _update(store, "c", {"contact_info": None})

    assert updated.contact_info is None


def test_update_project_by_non_creator_denied(store: InMemoryStore) -> None:
    seed_project(store, "p1", "c", members=("u2",))

    with pytest.raises(PermissionDeniedError):
        _update(store, "u2", {"title": "Mine now"})

    assert asyncio.run(project_registry.get_project(store, "p1")).title == "p1"


@pytest.mark.parametrize(
    "changes",
    [
        {"current_members": ["c", "x"]},
        {"status": "completed"},
        {"creator_id": "x"},
        {"max_members": 10},
        {"title": "  "},
        {"title": None},
        {"difficulty_level": "expert"},
    ],
)
def test_update_project_rejects_protected_or_invalid(
    store: InMemoryStore, changes: dict
) -> None:
    seed_project(store, "p1", "c")

    with pytest.raises(ValidationError):
        _update(store, "c", changes)


def test_update_unknown_project(store: InMemoryStore) -> None:
    with pytest.raises(NotFoundError):
        _update(store, "c", {"title": "x"})
