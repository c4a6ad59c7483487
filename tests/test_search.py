"""Tests for the search engine."""

from datetime import datetime, timezone

import pytest

from ideavault.errors import ValidationError
from ideavault.models import EntityKind, Idea, Project, Task
from ideavault.repository import Collections
from ideavault.search import SearchScope, search


@pytest.fixture
def collections() -> Collections:
    idea = Idea.new("Build a personal knowledge base", tags=["pkm", "notes"])
    project = Project.new("Knowledge Graph Tool", description="Graph of notes", tags=["graph"])
    task = Task.new("Write importer", description="Import knowledge from markdown", tags=["pkm"])
    other = Idea.new("Learn pottery", tags=["hobby"])
    return Collections(ideas=[idea, other], projects=[project], tasks=[task])


def titles(results) -> list[str]:
    return [result.entity.title for result in results]


def test_search_all_kinds(collections: Collections) -> None:
    """Test that the default scope searches ideas, projects and tasks."""
    results = search(collections, "knowledge")
    assert titles(results) == ["Build a personal knowledge base", "Knowledge Graph Tool", "Write importer"]
    assert [r.kind for r in results] == [EntityKind.IDEA, EntityKind.PROJECT, EntityKind.TASK]


def test_search_is_case_insensitive(collections: Collections) -> None:
    """Test that query case does not matter."""
    assert titles(search(collections, "KNOWLEDGE")) == titles(search(collections, "knowledge"))


def test_ideas_scope(collections: Collections) -> None:
    """Test narrowing the search to ideas."""
    assert titles(search(collections, "knowledge", scope=SearchScope.IDEAS)) == ["Build a personal knowledge base"]
    assert titles(search(collections, "knowledge", scope="projects")) == ["Knowledge Graph Tool"]


def test_matched_fields(collections: Collections) -> None:
    """Test that results report where the query was found."""
    results = search(collections, "notes")
    assert [(r.entity.title, r.matched) for r in results] == [
        ("Build a personal knowledge base", ["tag:notes"]),
        ("Knowledge Graph Tool", ["description"]),
    ]


def test_tags_scope_matches_tag_text_only(collections: Collections) -> None:
    """Test that the tags scope ignores titles and descriptions but returns entities."""
    assert titles(search(collections, "graph", scope="tags")) == ["Knowledge Graph Tool"]
    assert search(collections, "importer", scope="tags") == []
    assert titles(search(collections, "PKM", scope="tags")) == ["Build a personal knowledge base", "Write importer"]


def test_with_tags_requires_all(collections: Collections) -> None:
    """Test that every required tag must be present, alongside the text match."""
    assert titles(search(collections, "", with_tags=["pkm", "notes"])) == ["Build a personal knowledge base"]
    assert titles(search(collections, "importer", with_tags=["pkm"])) == ["Write importer"]
    assert search(collections, "pottery", with_tags=["pkm"]) == []


def test_empty_query_matches_everything_in_scope(collections: Collections) -> None:
    """Test pure filter mode."""
    assert len(search(collections, "")) == 4
    assert titles(search(collections, "", scope="ideas")) == ["Build a personal knowledge base", "Learn pottery"]


def test_whitespace_is_part_of_the_query(collections: Collections) -> None:
    """Test that spaces in the query are matched literally."""
    collections.ideas.append(Idea.new("alpha"))
    assert titles(search(collections, " ", scope="ideas")) == ["Build a personal knowledge base", "Learn pottery"]
    assert titles(search(collections, " pottery", scope="ideas")) == ["Learn pottery"]
    assert search(collections, "  ", scope="ideas") == []


def test_date_range(collections: Collections) -> None:
    """Test that the creation date range is inclusive and may be one-sided."""
    for day, entity in enumerate([*collections.ideas, *collections.projects, *collections.tasks], start=1):
        entity.created_at = datetime(2026, 1, day, 9, 0, tzinfo=timezone.utc)

    assert titles(search(collections, date_from="2026-01-02", date_to="2026-01-03")) == [
        "Learn pottery",
        "Knowledge Graph Tool",
    ]
    assert titles(search(collections, date_to="2026-01-01")) == ["Build a personal knowledge base"]
    assert titles(search(collections, date_from="2026-01-04")) == ["Write importer"]


def test_groups_ordered_by_creation(collections: Collections) -> None:
    """Test that each group is sorted by creation time regardless of stored order."""
    first, second = collections.ideas
    first.created_at = datetime(2026, 2, 1, tzinfo=timezone.utc)
    second.created_at = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert titles(search(collections, "", scope="ideas")) == ["Learn pottery", "Build a personal knowledge base"]


def test_status_filter(collections: Collections) -> None:
    """Test that a status applies to the kinds that know it."""
    collections.tasks[0].set_status("done")
    collections.projects[0].set_status("completed")
    # "done" is a task status and a project status alias
    assert titles(search(collections, "", status="done")) == ["Knowledge Graph Tool", "Write importer"]
    assert titles(search(collections, "", status="brainstorming")) == [
        "Build a personal knowledge base",
        "Learn pottery",
    ]
    with pytest.raises(ValidationError):
        search(collections, "", status="exploding")
    with pytest.raises(ValidationError):
        search(collections, "", status="todo", scope="ideas")


def test_invalid_scope(collections: Collections) -> None:
    """Test that an unknown scope is rejected."""
    with pytest.raises(ValidationError, match="search scope"):
        search(collections, "x", scope="everything")
