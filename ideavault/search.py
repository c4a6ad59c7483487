"""Free-text search across ideas, projects and tasks."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from ideavault.errors import ValidationError
from ideavault.filters import Bound, check_range, created_between
from ideavault.models import ENTITY_TYPES, Entity, EntityKind, normalize_tags
from ideavault.repository import Collections

logger = structlog.get_logger()

# Results are grouped in this order, then sorted by creation time.
RESULT_ORDER = (EntityKind.IDEA, EntityKind.PROJECT, EntityKind.TASK)


class SearchScope(str, Enum):
    """Which entity kinds take part in a search, and which text is matched."""

    ALL = "all"
    IDEAS = "ideas"
    PROJECTS = "projects"
    TASKS = "tasks"
    TAGS = "tags"

    @property
    def kinds(self) -> tuple[EntityKind, ...]:
        return {
            SearchScope.IDEAS: (EntityKind.IDEA,),
            SearchScope.PROJECTS: (EntityKind.PROJECT,),
            SearchScope.TASKS: (EntityKind.TASK,),
        }.get(self, RESULT_ORDER)

    @classmethod
    def parse(cls, value: Any) -> "SearchScope":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            choices = ", ".join(scope.value for scope in cls)
            raise ValidationError(f"Invalid search scope '{value}'. Must be one of: {choices}") from e


@dataclass
class SearchResult:
    """An entity that matched a search, with the fields the query was found in."""

    kind: EntityKind
    entity: Entity
    matched: list[str] = field(default_factory=list)


def _text_matches(entity: Entity, needle: str, tags_only: bool) -> list[str]:
    matched = []
    if not tags_only:
        if needle in entity.title.lower():
            matched.append("title")
        if entity.description and needle in entity.description.lower():
            matched.append("description")
    matched.extend(f"tag:{tag}" for tag in entity.tags if needle in tag.lower())
    return matched


def _status_filters(status: Any, kinds: Iterable[EntityKind]) -> dict[EntityKind, Any]:
    """Resolve a status string against each kind's status enum.

    A status only has to be valid for one of the kinds in scope; entities of
    kinds that do not know the status are excluded.
    """
    resolved = {}
    for kind in kinds:
        try:
            resolved[kind] = ENTITY_TYPES[kind].status_type.parse(status)  # type: ignore[attr-defined]
        except ValidationError:
            continue
    if not resolved:
        raise ValidationError(f"Invalid status '{status}' for {', '.join(kind.plural for kind in kinds)}")
    return resolved


def search(
    collections: Collections,
    query: str = "",
    scope: SearchScope | str = SearchScope.ALL,
    with_tags: Iterable[str] = (),
    status: Any = None,
    date_from: Bound = None,
    date_to: Bound = None,
) -> list[SearchResult]:
    """Search entities by case-insensitive substring.

    The query is matched against title, description and each tag; with the
    ``tags`` scope it is matched against tags only, across all kinds. An
    empty query matches everything in scope. ``with_tags`` requires every
    listed tag to be present (exact match). The date range applies to
    ``created_at`` and is inclusive.

    Returns:
        Matches grouped as ideas, projects, tasks, each group in creation order
    """
    scope = SearchScope.parse(scope)
    required_tags = normalize_tags(with_tags)
    start, end = check_range(date_from, date_to)
    statuses = _status_filters(status, scope.kinds) if status is not None else None
    needle = (query or "").lower()
    logger.debug("Searching", query=needle, scope=scope.value, with_tags=required_tags, status=status)

    results: list[SearchResult] = []
    for kind in RESULT_ORDER:
        if kind not in scope.kinds:
            continue
        if statuses is not None and kind not in statuses:
            continue

        group = []
        for entity in collections.of(kind):
            if statuses is not None and entity.status != statuses[kind]:
                continue
            if not all(tag in entity.tags for tag in required_tags):
                continue
            if not created_between(entity, start, end):
                continue
            matched = _text_matches(entity, needle, scope is SearchScope.TAGS) if needle else []
            if needle and not matched:
                continue
            group.append(SearchResult(kind=kind, entity=entity, matched=matched))

        group.sort(key=lambda result: result.entity.created_at)
        results.extend(group)

    logger.debug("Search finished", results=len(results))
    return results
