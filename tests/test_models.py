"""Tests for data models."""

from datetime import date, datetime, timedelta, timezone

import pytest

from ideavault.errors import ValidationError
from ideavault.models import (
    Idea,
    IdeaStatus,
    Project,
    ProjectStatus,
    Task,
    TaskPriority,
    TaskStatus,
    normalize_tags,
    parse_date,
)


def test_idea_creation() -> None:
    """Test idea creation with defaults."""
    idea = Idea.new("Test Idea")
    assert idea.title == "Test Idea"
    assert idea.description is None
    assert idea.tags == []
    assert idea.status == IdeaStatus.BRAINSTORMING
    assert idea.project_id is None
    assert idea.created_at == idea.updated_at
    assert idea.id


def test_ids_are_unique() -> None:
    """Test that every new entity gets its own id."""
    ids = {Idea.new("Same title").id for _ in range(50)}
    assert len(ids) == 50


def test_project_and_task_defaults() -> None:
    """Test project and task defaults."""
    project = Project.new("Knowledge Graph Tool")
    assert project.status == ProjectStatus.PLANNING
    assert project.idea_ids == []
    assert project.milestone is None and project.url is None and project.repo_url is None

    task = Task.new("Write importer")
    assert task.status == TaskStatus.TODO
    assert task.priority == TaskPriority.MEDIUM
    assert task.due_date is None
    assert task.created_at == task.updated_at


def test_task_creation_with_options() -> None:
    """Test building a task with everything supplied at once."""
    task = Task.new(
        "  Ship it  ",
        description="release notes",
        tags=["@work", "@work", "deep"],
        priority="h",
        due_date="2026-04-01",
    )
    assert task.title == "Ship it"
    assert task.priority == TaskPriority.HIGH
    assert task.due_date == date(2026, 4, 1)
    assert task.tags == ["@work", "deep"]


@pytest.mark.parametrize("title", ["", "   ", None])
def test_empty_title_rejected(title) -> None:
    """Test that a title is required."""
    with pytest.raises(ValidationError):
        Idea.new(title)


def test_set_title_rejects_empty() -> None:
    """Test that a title cannot be emptied by an update."""
    idea = Idea.new("Keep me")
    with pytest.raises(ValidationError):
        idea.set_title(" ")
    assert idea.title == "Keep me"


def test_status_parsing() -> None:
    """Test canonical values and aliases for every enum."""
    assert IdeaStatus.parse("active") == IdeaStatus.ACTIVE
    assert ProjectStatus.parse("on-hold") == ProjectStatus.ON_HOLD
    assert ProjectStatus.parse("InProgress") == ProjectStatus.IN_PROGRESS
    assert TaskStatus.parse("x") == TaskStatus.DONE
    assert TaskStatus.parse("In-Progress") == TaskStatus.IN_PROGRESS
    assert TaskPriority.parse("critical") == TaskPriority.URGENT
    assert TaskPriority.parse(TaskPriority.LOW) == TaskPriority.LOW


@pytest.mark.parametrize(
    ("parser", "value"),
    [
        (IdeaStatus.parse, "done"),
        (ProjectStatus.parse, "archived"),
        (TaskStatus.parse, "finished"),
        (TaskPriority.parse, "whenever"),
        (TaskStatus.parse, 3),
    ],
)
def test_invalid_enum_values(parser, value) -> None:
    """Test that unknown values raise ValidationError."""
    with pytest.raises(ValidationError, match="Must be one of"):
        parser(value)


def test_setters_advance_updated_at(clock) -> None:
    """Test that every setter moves the modification timestamp forward."""
    task = Task.new("Tick")
    created = task.created_at

    for mutate in (
        lambda: task.set_status("done"),
        lambda: task.set_priority("high"),
        lambda: task.set_due_date("2026-05-01"),
        lambda: task.add_tag("x"),
        lambda: task.clear_due_date(),
        lambda: task.set_project("p-1"),
    ):
        before = task.updated_at
        mutate()
        assert task.updated_at > before

    assert task.created_at == created


def test_setting_same_value_still_counts_as_mutation(clock) -> None:
    """Test that a setter called with the current value still advances the timestamp."""
    idea = Idea.new("Same")
    before = idea.updated_at
    idea.set_status(IdeaStatus.BRAINSTORMING)
    assert idea.updated_at > before


def test_updated_at_never_decreases() -> None:
    """Test that a clock behind the stored timestamp does not move it backwards."""
    idea = Idea.new("Future")
    future = datetime.now(timezone.utc) + timedelta(days=1)
    idea.updated_at = future
    idea.set_description("later")
    assert idea.updated_at == future


def test_failed_setter_leaves_entity_unchanged() -> None:
    """Test that an invalid value does not touch the entity."""
    idea = Idea.new("Stable")
    before = idea.updated_at
    with pytest.raises(ValidationError):
        idea.set_status("bogus")
    assert idea.status == IdeaStatus.BRAINSTORMING
    assert idea.updated_at == before


def test_tags_are_a_case_sensitive_set() -> None:
    """Test tag normalization."""
    assert normalize_tags(["a", "A", "a", " b ", ""]) == ["a", "A", "b"]

    idea = Idea.new("Tagged", tags=["rust"])
    idea.add_tag("rust")
    idea.add_tag("Rust")
    assert idea.tags == ["rust", "Rust"]
    idea.remove_tag("rust")
    assert idea.tags == ["Rust"]
    idea.clear_tags()
    assert idea.tags == []


def test_clear_optional_fields() -> None:
    """Test clearing optional project fields."""
    project = Project.new("P", description="d", milestone="m", url="https://x", repo_url="https://git/x")
    for name in ("description", "milestone", "url", "repo_url"):
        project.clear(name)
    assert (project.description, project.milestone, project.url, project.repo_url) == (None, None, None, None)


def test_clear_unknown_field() -> None:
    """Test that clearing a field the kind does not have fails."""
    idea = Idea.new("No milestone here")
    with pytest.raises(ValidationError, match="Cannot clear 'milestone'"):
        idea.clear("milestone")


def test_project_idea_links_are_unique() -> None:
    """Test that a project holds each idea id once."""
    project = Project.new("P")
    project.add_idea("i-1")
    project.add_idea("i-2")
    project.add_idea("i-1")
    assert project.idea_ids == ["i-1", "i-2"]
    project.remove_idea("i-3")
    assert project.idea_ids == ["i-1", "i-2"]


def test_task_overdue() -> None:
    """Test the overdue rule."""
    today = date(2026, 3, 15)
    task = Task.new("Late", due_date=today - timedelta(days=1))
    assert task.is_overdue(today)

    task.set_status("done")
    assert not task.is_overdue(today)

    assert not Task.new("Due today", due_date=today).is_overdue(today)
    assert not Task.new("No due date").is_overdue(today)


def test_parse_date() -> None:
    """Test date parsing."""
    assert parse_date("2026-01-31") == date(2026, 1, 31)
    assert parse_date(datetime(2026, 1, 31, 8, 30)) == date(2026, 1, 31)
    with pytest.raises(ValidationError, match="YYYY-MM-DD"):
        parse_date("31/01/2026")


def test_record_round_trip() -> None:
    """Test that a fully populated task survives to_dict/from_dict."""
    task = Task.new("Round trip", description="d", tags=["a"], priority="urgent", due_date="2026-02-02")
    task.set_project("p-1")
    task.set_idea("i-1")
    assert Task.from_dict(task.to_dict()) == task


def test_title_stored_as_given() -> None:
    """Test that surrounding whitespace in a title is kept."""
    idea = Idea.new("  Padded title ")
    assert idea.title == "  Padded title "
    idea.set_title(" Renamed")
    assert idea.title == " Renamed"
    assert Idea.from_dict(idea.to_dict()).title == " Renamed"
