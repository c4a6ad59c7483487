"""Tests for vault operations."""

from datetime import date, timedelta
from unittest.mock import patch

import pytest

from ideavault.backends import MemoryBackend
from ideavault.errors import NotFoundError, StorageError, ValidationError
from ideavault.models import IdeaStatus, ProjectStatus, TaskPriority, TaskStatus
from ideavault.vault import Vault

TODAY = date(2026, 3, 15)


def test_create_and_get(vault: Vault) -> None:
    """Test creating and reading back each kind."""
    idea = vault.create_idea("Idea", description="d", tags=["a", "a", "b"], status="active")
    project = vault.create_project("Project", milestone="v1", url="https://p", repo_url="https://git/p")
    task = vault.create_task("Task", priority="urgent", due_date="2026-04-01")

    assert vault.get_idea(idea.id) == idea
    assert vault.get_idea(idea.id).tags == ["a", "b"]
    assert vault.get_idea(idea.id).status == IdeaStatus.ACTIVE
    assert vault.get_project(project.id).milestone == "v1"
    assert vault.get_task(task.id).priority == TaskPriority.URGENT
    assert vault.get_task(task.id).due_date == date(2026, 4, 1)


def test_get_missing(vault: Vault) -> None:
    """Test that reading an absent id fails."""
    with pytest.raises(NotFoundError):
        vault.get_project("nope")


def test_create_invalid_values_saves_nothing(vault: Vault, backend: MemoryBackend) -> None:
    """Test that validation happens before anything is stored."""
    with pytest.raises(ValidationError):
        vault.create_task("Task", priority="someday")
    with pytest.raises(ValidationError):
        vault.create_task("Task", due_date="tomorrow")
    with pytest.raises(ValidationError):
        vault.create_idea("")
    assert backend.save_count == 0


def test_create_with_links(vault: Vault) -> None:
    """Test that links given at creation are established on both sides."""
    idea = vault.create_idea("Idea")
    project = vault.create_project("Project", idea_ids=[idea.id])
    assert vault.get_project(project.id).idea_ids == [idea.id]
    assert vault.get_idea(idea.id).project_id == project.id

    second = vault.create_idea("Second idea", project_id=project.id)
    assert vault.get_project(project.id).idea_ids == [idea.id, second.id]

    task = vault.create_task("Task", project_id=project.id, idea_id=idea.id)
    assert (task.project_id, task.idea_id) == (project.id, idea.id)
    assert task.created_at == task.updated_at


def test_create_with_missing_link_target(vault: Vault, backend: MemoryBackend) -> None:
    """Test that a dangling reference cannot be created."""
    with pytest.raises(NotFoundError):
        vault.create_task("Task", project_id="nope")
    with pytest.raises(NotFoundError):
        vault.create_idea("Idea", project_id="nope")
    with pytest.raises(NotFoundError):
        vault.create_project("Project", idea_ids=["nope"])
    assert backend.save_count == 0
    assert vault.list_tasks() == [] and vault.list_ideas() == [] and vault.list_projects() == []


def test_update_clear_description(vault: Vault) -> None:
    """Test that clearing a field leaves every other field except updated_at alone."""
    idea = vault.create_idea("Idea", description="to go", tags=["keep"], status="active")

    updated = vault.update_idea(idea.id, clear=["description"])

    assert updated.description is None
    assert updated.updated_at >= idea.updated_at
    before, after = idea.to_dict(), updated.to_dict()
    for key in ("description", "updated_at"):
        before.pop(key)
        after.pop(key)
    assert before == after
    assert vault.get_idea(idea.id) == updated


def test_update_several_fields(vault: Vault) -> None:
    """Test a partial edit touching several task fields."""
    task = vault.create_task("Task", tags=["a"], due_date="2026-04-01")
    updated = vault.update_task(
        task.id, title="Renamed", status="ip", priority="low", add_tags=["b"], remove_tags=["a"], clear=["due_date"]
    )
    assert updated.title == "Renamed"
    assert updated.status == TaskStatus.IN_PROGRESS
    assert updated.priority == TaskPriority.LOW
    assert updated.tags == ["b"]
    assert updated.due_date is None


def test_update_project_fields(vault: Vault) -> None:
    """Test project-specific updates and clears."""
    project = vault.create_project("Project", url="https://old", milestone="m1")
    updated = vault.update_project(project.id, status="on-hold", milestone="m2", clear=["url"])
    assert updated.status == ProjectStatus.ON_HOLD
    assert updated.milestone == "m2"
    assert updated.url is None


def test_update_rejects_bad_input_without_saving(vault: Vault, backend: MemoryBackend) -> None:
    """Test that a failing update leaves the stored entity unchanged."""
    idea = vault.create_idea("Idea", description="d")
    saves = backend.save_count

    with pytest.raises(ValidationError):
        vault.update_idea(idea.id, title="New title", status="bogus")
    with pytest.raises(ValidationError, match="Cannot clear"):
        vault.update_idea(idea.id, clear=["milestone"])
    with pytest.raises(ValidationError, match="both set and clear"):
        vault.update_idea(idea.id, description="x", clear=["description"])
    with pytest.raises(NotFoundError):
        vault.update_idea("nope", title="x")

    assert backend.save_count == saves
    assert vault.get_idea(idea.id) == idea


def test_update_without_changes(vault: Vault, backend: MemoryBackend) -> None:
    """Test that an empty update returns the entity and saves nothing."""
    idea = vault.create_idea("Idea")
    saves = backend.save_count
    assert vault.update_idea(idea.id) == idea
    assert backend.save_count == saves


def test_list_tasks_filters(vault: Vault) -> None:
    """Test filtered listing through the vault."""
    vault.create_task("todo high", priority="high")
    vault.create_task("todo low", priority="low")
    vault.create_task("late", due_date=TODAY - timedelta(days=1))
    vault.create_task("late but done", due_date=TODAY - timedelta(days=1), status="done")

    assert [t.title for t in vault.list_tasks(status="todo", priority="high")] == ["todo high"]
    assert [t.title for t in vault.list_tasks(overdue=True)] == ["late"]


def test_list_invalid_filter_does_not_load(vault: Vault, backend: MemoryBackend) -> None:
    """Test that filter validation happens before storage is read."""
    with patch.object(backend, "load_all") as load_all:
        with pytest.raises(ValidationError):
            vault.list_tasks(status="finished")
    load_all.assert_not_called()


def test_delete_project_cascade(vault: Vault) -> None:
    """Test that deleting a project voids references to it."""
    project = vault.create_project("Project")
    idea = vault.create_idea("Idea", project_id=project.id)
    task = vault.create_task("Task", project_id=project.id)

    vault.delete_project(project.id)

    assert vault.get_idea(idea.id).project_id is None
    assert vault.get_task(task.id).project_id is None
    with pytest.raises(NotFoundError):
        vault.get_project(project.id)


def test_delete_idea_cascade(vault: Vault) -> None:
    """Test that deleting an idea voids references to it."""
    idea = vault.create_idea("Idea")
    project = vault.create_project("Project", idea_ids=[idea.id])
    task = vault.create_task("Task", idea_id=idea.id)

    vault.delete_idea(idea.id)

    assert vault.get_project(project.id).idea_ids == []
    assert vault.get_task(task.id).idea_id is None


def test_delete_task(vault: Vault) -> None:
    """Test plain task deletion."""
    task = vault.create_task("Task")
    assert vault.delete_task(task.id).id == task.id
    assert vault.list_tasks() == []


def test_storage_errors_propagate(vault: Vault, backend: MemoryBackend) -> None:
    """Test that storage failures reach the caller unchanged."""
    error = StorageError("disk gone")
    with patch.object(backend, "load_all", side_effect=error):
        with pytest.raises(StorageError) as excinfo:
            vault.list_ideas()
    assert excinfo.value is error


def test_link_pass_throughs(vault: Vault) -> None:
    """Test the vault link operations."""
    idea = vault.create_idea("Idea")
    project = vault.create_project("Project")
    task = vault.create_task("Task")

    vault.link_idea_to_project(project.id, idea.id)
    vault.link_task_to_project(task.id, project.id)
    vault.link_task_to_idea(task.id, idea.id)
    assert [i.id for i in vault.project_ideas(project.id)] == [idea.id]
    assert [t.id for t in vault.project_tasks(project.id)] == [task.id]

    vault.unlink_idea_from_project(project.id, idea.id)
    vault.unlink_task_from_project(task.id)
    vault.unlink_task_from_idea(task.id)
    assert vault.project_ideas(project.id) == []
    assert vault.project_tasks(project.id) == []


def test_search_through_vault(vault: Vault) -> None:
    """Test searching stored entities."""
    idea = vault.create_idea("Build a personal knowledge base")
    project = vault.create_project("Knowledge Graph Tool")

    assert [r.entity.id for r in vault.search("knowledge")] == [idea.id, project.id]
    assert [r.entity.id for r in vault.search("knowledge", scope="ideas")] == [idea.id]


def test_tag_counts(vault: Vault) -> None:
    """Test tag usage across all kinds."""
    vault.create_idea("Idea", tags=["pkm", "rust"])
    vault.create_project("Project", tags=["rust"])
    vault.create_task("Task", tags=["@home"])
    assert vault.tag_counts() == {"@home": 1, "pkm": 1, "rust": 2}
