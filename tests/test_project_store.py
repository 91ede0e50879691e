import pytest

from miniapp_builder.models.project import ProjectStatus
from miniapp_builder.project_store import (
    InMemoryProjectStore,
    ProjectConflictError,
    ProjectNotEditableError,
    ProjectNotFoundError,
)

ALICE = "0x" + "a" * 40
BOB = "0x" + "b" * 40


def create(store: InMemoryProjectStore, owner: str = ALICE, slug: str = "my-app", plan: str = "basic"):
    return store.create_project(owner_wallet=owner, name="My App", project_slug=slug, plan_id=plan)


def test_new_projects_start_as_empty_drafts():
    store = InMemoryProjectStore()
    project = create(store)

    assert project.status is ProjectStatus.draft
    assert project.config_json == {}
    assert store.get_project(project.id) == project


def test_slug_is_unique_per_owner():
    store = InMemoryProjectStore()
    create(store)

    with pytest.raises(ProjectConflictError):
        create(store)
    assert create(store, owner=BOB).owner_wallet == BOB


def test_find_and_list_by_owner():
    store = InMemoryProjectStore()
    first = create(store, slug="first-app")
    second = create(store, slug="second-app")
    create(store, owner=BOB, slug="first-app")

    assert store.find_by_slug(owner_wallet=ALICE, project_slug="first-app").id == first.id
    assert store.find_by_slug(owner_wallet=ALICE, project_slug="missing") is None
    assert {p.id for p in store.list_projects(owner_wallet=ALICE)} == {first.id, second.id}


def test_update_draft_replaces_name_and_configuration():
    store = InMemoryProjectStore()
    project = create(store)
    config = {"components": [{"type": "text", "content": "hi"}]}

    updated = store.update_draft(project.id, owner_wallet=ALICE, name="Renamed", config_json=config)

    assert updated.name == "Renamed"
    assert updated.config_json == config
    assert updated.updated_at >= project.updated_at
    assert store.get_project(project.id).config_json == config


def test_returned_records_are_copies():
    store = InMemoryProjectStore()
    project = create(store)

    project.name = "mutated locally"

    assert store.get_project(project.id).name == "My App"


def test_published_projects_are_immutable():
    store = InMemoryProjectStore()
    project = create(store)

    published = store.publish(project.id, owner_wallet=ALICE)
    assert published.status is ProjectStatus.published

    with pytest.raises(ProjectNotEditableError):
        store.update_draft(project.id, owner_wallet=ALICE, name="Again", config_json={})
    with pytest.raises(ProjectNotEditableError):
        store.publish(project.id, owner_wallet=ALICE)


def test_only_the_owner_can_edit():
    store = InMemoryProjectStore()
    project = create(store)

    with pytest.raises(ProjectNotFoundError):
        store.update_draft(project.id, owner_wallet=BOB, name="Stolen", config_json={})
    with pytest.raises(ProjectNotFoundError):
        store.publish("missing-id", owner_wallet=ALICE)
