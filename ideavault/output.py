"""Text and JSON rendering for CLI output."""

import json
from collections.abc import Iterable
from typing import Any

from ideavault.models import Entity, Idea, Project, Task
from ideavault.search import SearchResult


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated option value, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def summary_line(entity: Entity) -> str:
    """One-line description of an entity."""
    line = f"{entity.id}  [{entity.status.value}] {entity.title}"  # type: ignore[attr-defined]
    if isinstance(entity, Task):
        line += f" ({entity.priority.value})"
        if entity.due_date:
            line += f" due {entity.due_date.isoformat()}"
            if entity.is_overdue():
                line += " OVERDUE"
    if entity.tags:
        line += " #" + " #".join(entity.tags)
    return line


def detail_lines(entity: Entity) -> list[str]:
    """All fields of an entity, one per line."""
    lines = [
        f"ID: {entity.id}",
        f"Title: {entity.title}",
        f"Status: {entity.status.value}",  # type: ignore[attr-defined]
        f"Description: {entity.description or 'No description'}",
        f"Tags: {', '.join(entity.tags) if entity.tags else 'None'}",
    ]
    if isinstance(entity, Idea):
        lines.append(f"Project: {entity.project_id or 'None'}")
    elif isinstance(entity, Project):
        lines.append(f"Milestone: {entity.milestone or 'None'}")
        lines.append(f"URL: {entity.url or 'None'}")
        lines.append(f"Repository: {entity.repo_url or 'None'}")
        lines.append(f"Ideas: {len(entity.idea_ids)}")
    elif isinstance(entity, Task):
        lines.append(f"Priority: {entity.priority.value}")
        lines.append(f"Due: {entity.due_date.isoformat() if entity.due_date else 'Not set'}")
        lines.append(f"Project: {entity.project_id or 'None'}")
        lines.append(f"Idea: {entity.idea_id or 'None'}")
    lines.append(f"Created: {entity.created_at:%Y-%m-%d %H:%M}")
    lines.append(f"Updated: {entity.updated_at:%Y-%m-%d %H:%M}")
    return lines


def print_entity(entity: Entity, as_json: bool = False) -> None:
    if as_json:
        print(to_json(entity.to_dict()))  # type: ignore[attr-defined]
        return
    for line in detail_lines(entity):
        print(line)


def print_entities(entities: Iterable[Entity], label: str, as_json: bool = False) -> None:
    entities = list(entities)
    if as_json:
        print(to_json([entity.to_dict() for entity in entities]))  # type: ignore[attr-defined]
        return
    if not entities:
        print(f"No {label} found")
        return
    print(f"Found {len(entities)} {label}:\n")
    for entity in entities:
        print(summary_line(entity))


def print_search_results(results: list[SearchResult], as_json: bool = False) -> None:
    if as_json:
        records = [
            {"kind": result.kind.value, "matched": result.matched, **result.entity.to_dict()}  # type: ignore[attr-defined]
            for result in results
        ]
        print(to_json(records))
        return
    if not results:
        print("No results found.")
        return
    print(f"Found {len(results)} result(s):\n")
    for result in results:
        matched = f"  (matched: {', '.join(result.matched)})" if result.matched else ""
        print(f"{result.kind.value:<8} {summary_line(result.entity)}{matched}")
