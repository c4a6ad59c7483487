"""Predicate filtering over loaded entity collections."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, TypeVar

import structlog

from ideavault.errors import ValidationError
from ideavault.models import ENTITY_TYPES, Entity, EntityKind, TaskPriority, parse_date, parse_timestamp

logger = structlog.get_logger()

E = TypeVar("E", bound=Entity)

Bound = date | datetime | str | None

_TASK_ONLY = ("priority", "idea_id", "overdue")
_PROJECT_REFERENCE_KINDS = (EntityKind.IDEA, EntityKind.TASK)


def parse_bound(value: Bound) -> date | datetime | None:
    """Parse a date-range bound; strings may be a date or a full ISO timestamp."""
    if value is None or isinstance(value, (date, datetime)):
        return value
    text = str(value).strip()
    if len(text) == 10:
        return parse_date(text)
    return parse_timestamp(text)


def _before(created_at: datetime, bound: date | datetime) -> bool:
    if isinstance(bound, datetime):
        return created_at < parse_timestamp(bound)
    return created_at.date() < bound


def _after(created_at: datetime, bound: date | datetime) -> bool:
    if isinstance(bound, datetime):
        return created_at > parse_timestamp(bound)
    return created_at.date() > bound


def created_between(entity: Entity, date_from: date | datetime | None, date_to: date | datetime | None) -> bool:
    """Check ``created_at`` against an inclusive range; a missing bound is open.

    Date bounds compare whole days, datetime bounds compare instants.
    """
    if date_from is not None and _before(entity.created_at, date_from):
        return False
    if date_to is not None and _after(entity.created_at, date_to):
        return False
    return True


def check_range(date_from: Bound, date_to: Bound) -> tuple[date | datetime | None, date | datetime | None]:
    """Parse both ends of a creation-date range and make sure it is not inverted."""
    start, end = parse_bound(date_from), parse_bound(date_to)
    if start is not None and end is not None:
        start_day = start.date() if isinstance(start, datetime) else start
        end_day = end.date() if isinstance(end, datetime) else end
        if start_day > end_day:
            raise ValidationError(f"Date range start {start_day} is after end {end_day}")
    return start, end


@dataclass
class FilterSpec:
    """Independent filter predicates, combined with AND. ``None`` means no constraint."""

    status: Any = None
    tag: str | None = None
    priority: Any = None
    project_id: str | None = None
    idea_id: str | None = None
    overdue: bool = False
    created_from: Bound = None
    created_to: Bound = None

    def compile(self, kind: EntityKind, today: date | None = None) -> list[Callable[[Any], bool]]:
        """Validate the spec for an entity kind and build its predicates.

        Raises:
            ValidationError: For unknown enum values, malformed dates, or
                fields that do not apply to ``kind``
        """
        if kind is not EntityKind.TASK:
            for name in _TASK_ONLY:
                if getattr(self, name):
                    raise ValidationError(f"Filter '{name}' only applies to tasks")
        if self.project_id and kind not in _PROJECT_REFERENCE_KINDS:
            raise ValidationError(f"Filter 'project_id' does not apply to {kind.plural}")

        predicates: list[Callable[[Any], bool]] = []

        if self.status is not None:
            status = ENTITY_TYPES[kind].status_type.parse(self.status)  # type: ignore[attr-defined]
            predicates.append(lambda e: e.status == status)
        if self.tag is not None:
            tag = self.tag
            predicates.append(lambda e: tag in e.tags)
        if self.priority is not None:
            priority = TaskPriority.parse(self.priority)
            predicates.append(lambda e: e.priority == priority)
        if self.project_id is not None:
            project_id = self.project_id
            predicates.append(lambda e: e.project_id == project_id)
        if self.idea_id is not None:
            idea_id = self.idea_id
            predicates.append(lambda e: e.idea_id == idea_id)
        if self.overdue:
            predicates.append(lambda e: e.is_overdue(today))
        if self.created_from is not None or self.created_to is not None:
            start, end = check_range(self.created_from, self.created_to)
            predicates.append(lambda e: created_between(e, start, end))

        return predicates


def filter_entities(items: Sequence[E], spec: FilterSpec, kind: EntityKind, today: date | None = None) -> list[E]:
    """Return the items matching every predicate in ``spec``, in input order.

    Args:
        items: Loaded entities, all of kind ``kind``
        spec: Filter specification
        kind: Entity kind of ``items``
        today: Reference date for the overdue check (defaults to the current date)

    Raises:
        ValidationError: If the spec is invalid; raised before any item is examined
    """
    predicates = spec.compile(kind, today)
    result = [item for item in items if all(predicate(item) for predicate in predicates)]
    logger.debug("Filtered entities", kind=kind.value, total=len(items), matched=len(result))
    return result
