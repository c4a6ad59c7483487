"""Data models for IdeaVault: ideas, projects and tasks."""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, ClassVar

from ideavault.errors import ValidationError


def utcnow() -> datetime:
    """Return the current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a fresh entity identifier."""
    return str(uuid.uuid4())


class EntityKind(str, Enum):
    """The three kinds of entity stored in a vault."""

    IDEA = "idea"
    PROJECT = "project"
    TASK = "task"

    @property
    def plural(self) -> str:
        return f"{self.value}s"


def _parse_enum(enum_cls: type[Enum], value: Any, aliases: dict[str, str], label: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        for member in enum_cls:
            if member.value.lower() == key:
                return member
        if key in aliases:
            return enum_cls(aliases[key])
    choices = ", ".join(member.value for member in enum_cls)
    raise ValidationError(f"Invalid {label} '{value}'. Must be one of: {choices}")


_PROJECT_STATUS_ALIASES = {
    "in-progress": "InProgress",
    "progress": "InProgress",
    "complete": "Completed",
    "done": "Completed",
    "on-hold": "OnHold",
    "hold": "OnHold",
}

_TASK_STATUS_ALIASES = {
    "t": "todo",
    "in-progress": "inprogress",
    "progress": "inprogress",
    "ip": "inprogress",
    "block": "blocked",
    "b": "blocked",
    "complete": "done",
    "d": "done",
    "x": "done",
    "cancel": "cancelled",
    "c": "cancelled",
}

_TASK_PRIORITY_ALIASES = {
    "l": "low",
    "m": "medium",
    "med": "medium",
    "h": "high",
    "u": "urgent",
    "crit": "urgent",
    "critical": "urgent",
}


class IdeaStatus(str, Enum):
    BRAINSTORMING = "Brainstorming"
    ACTIVE = "Active"
    COMPLETED = "Completed"
    ARCHIVED = "Archived"

    @classmethod
    def parse(cls, value: Any) -> "IdeaStatus":
        """Parse an idea status, raising ValidationError for unknown values."""
        return _parse_enum(cls, value, {}, "idea status")


class ProjectStatus(str, Enum):
    PLANNING = "Planning"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    ON_HOLD = "OnHold"

    @classmethod
    def parse(cls, value: Any) -> "ProjectStatus":
        """Parse a project status, raising ValidationError for unknown values."""
        return _parse_enum(cls, value, _PROJECT_STATUS_ALIASES, "project status")


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "inprogress"
    BLOCKED = "blocked"
    DONE = "done"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: Any) -> "TaskStatus":
        """Parse a task status, raising ValidationError for unknown values."""
        return _parse_enum(cls, value, _TASK_STATUS_ALIASES, "task status")

    @property
    def is_closed(self) -> bool:
        return self in (TaskStatus.DONE, TaskStatus.CANCELLED)


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def parse(cls, value: Any) -> "TaskPriority":
        """Parse a task priority, raising ValidationError for unknown values."""
        return _parse_enum(cls, value, _TASK_PRIORITY_ALIASES, "task priority")


def parse_date(value: date | str) -> date:
    """Parse a calendar date in YYYY-MM-DD form.

    Args:
        value: A date, or its ISO string representation

    Returns:
        The parsed date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError(f"Invalid date '{value}'. Use YYYY-MM-DD") from e


def parse_timestamp(value: datetime | str) -> datetime:
    """Parse an ISO timestamp, treating naive values as UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip())
        except ValueError as e:
            raise ValidationError(f"Invalid timestamp '{value}'") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Strip tags, drop empty ones and collapse duplicates keeping first occurrence."""
    if isinstance(tags, str):
        tags = [tags]
    result: list[str] = []
    for tag in tags:
        tag = str(tag).strip()
        if tag and tag not in result:
            result.append(tag)
    return result


def _require_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title must not be empty")
    return title


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _optional_id(value: Any) -> str | None:
    return str(value) if value else None


@dataclass
class Entity:
    """Fields and behaviour shared by ideas, projects and tasks.

    Every mutating method advances ``updated_at``, even when the new value
    equals the current one. ``updated_at`` never moves backwards.
    """

    kind: ClassVar[EntityKind]
    status_type: ClassVar[type[Enum]]
    clearable_fields: ClassVar[tuple[str, ...]] = ("description", "tags")

    id: str
    title: str
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def touch(self) -> None:
        """Advance the modification timestamp."""
        now = utcnow()
        if now > self.updated_at:
            self.updated_at = now

    def set_title(self, title: str) -> None:
        self.title = _require_title(title)
        self.touch()

    def set_description(self, description: str | None) -> None:
        self.description = _optional_text(description)
        self.touch()

    def clear_description(self) -> None:
        self.set_description(None)

    def set_status(self, status: Any) -> None:
        self.status = self.status_type.parse(status)  # type: ignore[attr-defined]
        self.touch()

    def set_tags(self, tags: Iterable[str]) -> None:
        self.tags = normalize_tags(tags)
        self.touch()

    def add_tag(self, tag: str) -> None:
        self.tags = normalize_tags([*self.tags, tag])
        self.touch()

    def remove_tag(self, tag: str) -> None:
        self.tags = [t for t in self.tags if t != tag.strip()]
        self.touch()

    def clear_tags(self) -> None:
        self.set_tags([])

    def clear(self, field_name: str) -> None:
        """Reset an optional field to absent/empty.

        Args:
            field_name: One of the entity's ``clearable_fields``
        """
        check_clearable(type(self), [field_name])
        getattr(self, f"clear_{field_name}")()

    def _common_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
            "status": self.status.value,  # type: ignore[attr-defined]
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @staticmethod
    def _common_fields(data: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": str(data["id"]),
            "title": _require_title(data["title"]),
            "description": _optional_text(data.get("description")),
            "tags": normalize_tags(data.get("tags") or []),
            "created_at": parse_timestamp(data["created_at"]),
            "updated_at": parse_timestamp(data["updated_at"]),
        }


def check_clearable(entity_cls: type[Entity], fields: Iterable[str]) -> list[str]:
    """Validate a list of field names against what an entity kind can clear."""
    fields = list(fields)
    for name in fields:
        if name not in entity_cls.clearable_fields:
            raise ValidationError(
                f"Cannot clear '{name}'. Valid fields: {', '.join(entity_cls.clearable_fields)}"
            )
    return fields


@dataclass
class Idea(Entity):
    """A thought or concept, optionally attached to one project."""

    kind: ClassVar[EntityKind] = EntityKind.IDEA
    status_type: ClassVar[type[Enum]] = IdeaStatus

    status: IdeaStatus = IdeaStatus.BRAINSTORMING
    project_id: str | None = None

    @classmethod
    def new(
        cls,
        title: str,
        description: str | None = None,
        tags: Iterable[str] = (),
        status: IdeaStatus | str | None = None,
    ) -> "Idea":
        """Build a fresh idea with a new id and matching timestamps."""
        now = utcnow()
        return cls(
            id=new_id(),
            title=_require_title(title),
            description=_optional_text(description),
            tags=normalize_tags(tags),
            status=IdeaStatus.parse(status) if status is not None else IdeaStatus.BRAINSTORMING,
            created_at=now,
            updated_at=now,
        )

    def set_project(self, project_id: str) -> None:
        self.project_id = project_id
        self.touch()

    def clear_project(self) -> None:
        self.project_id = None
        self.touch()

    def to_dict(self) -> dict[str, Any]:
        data = self._common_dict()
        data["project_id"] = self.project_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Idea":
        return cls(
            **cls._common_fields(data),
            status=IdeaStatus.parse(data["status"]),
            project_id=_optional_id(data.get("project_id")),
        )


@dataclass
class Project(Entity):
    """A goal that groups ideas together."""

    kind: ClassVar[EntityKind] = EntityKind.PROJECT
    status_type: ClassVar[type[Enum]] = ProjectStatus
    clearable_fields: ClassVar[tuple[str, ...]] = ("description", "milestone", "url", "repo_url", "tags")

    status: ProjectStatus = ProjectStatus.PLANNING
    milestone: str | None = None
    url: str | None = None
    repo_url: str | None = None
    idea_ids: list[str] = field(default_factory=list)

    @classmethod
    def new(
        cls,
        title: str,
        description: str | None = None,
        tags: Iterable[str] = (),
        status: ProjectStatus | str | None = None,
        milestone: str | None = None,
        url: str | None = None,
        repo_url: str | None = None,
    ) -> "Project":
        """Build a fresh project with a new id and matching timestamps."""
        now = utcnow()
        return cls(
            id=new_id(),
            title=_require_title(title),
            description=_optional_text(description),
            tags=normalize_tags(tags),
            status=ProjectStatus.parse(status) if status is not None else ProjectStatus.PLANNING,
            milestone=_optional_text(milestone),
            url=_optional_text(url),
            repo_url=_optional_text(repo_url),
            created_at=now,
            updated_at=now,
        )

    def set_milestone(self, milestone: str | None) -> None:
        self.milestone = _optional_text(milestone)
        self.touch()

    def clear_milestone(self) -> None:
        self.set_milestone(None)

    def set_url(self, url: str | None) -> None:
        self.url = _optional_text(url)
        self.touch()

    def clear_url(self) -> None:
        self.set_url(None)

    def set_repo_url(self, repo_url: str | None) -> None:
        self.repo_url = _optional_text(repo_url)
        self.touch()

    def clear_repo_url(self) -> None:
        self.set_repo_url(None)

    def add_idea(self, idea_id: str) -> None:
        if idea_id not in self.idea_ids:
            self.idea_ids.append(idea_id)
        self.touch()

    def remove_idea(self, idea_id: str) -> None:
        self.idea_ids = [i for i in self.idea_ids if i != idea_id]
        self.touch()

    def to_dict(self) -> dict[str, Any]:
        data = self._common_dict()
        data.update(
            {
                "milestone": self.milestone,
                "url": self.url,
                "repo_url": self.repo_url,
                "idea_ids": list(self.idea_ids),
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        idea_ids: list[str] = []
        for idea_id in data.get("idea_ids") or []:
            if str(idea_id) not in idea_ids:
                idea_ids.append(str(idea_id))
        return cls(
            **cls._common_fields(data),
            status=ProjectStatus.parse(data["status"]),
            milestone=_optional_text(data.get("milestone")),
            url=_optional_text(data.get("url")),
            repo_url=_optional_text(data.get("repo_url")),
            idea_ids=idea_ids,
        )


@dataclass
class Task(Entity):
    """A unit of work, optionally tied to one project and one idea."""

    kind: ClassVar[EntityKind] = EntityKind.TASK
    status_type: ClassVar[type[Enum]] = TaskStatus
    clearable_fields: ClassVar[tuple[str, ...]] = ("description", "due_date", "tags")

    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = None
    project_id: str | None = None
    idea_id: str | None = None

    @classmethod
    def new(
        cls,
        title: str,
        description: str | None = None,
        tags: Iterable[str] = (),
        status: TaskStatus | str | None = None,
        priority: TaskPriority | str | None = None,
        due_date: date | str | None = None,
    ) -> "Task":
        """Build a fresh task with a new id and matching timestamps."""
        now = utcnow()
        return cls(
            id=new_id(),
            title=_require_title(title),
            description=_optional_text(description),
            tags=normalize_tags(tags),
            status=TaskStatus.parse(status) if status is not None else TaskStatus.TODO,
            priority=TaskPriority.parse(priority) if priority is not None else TaskPriority.MEDIUM,
            due_date=parse_date(due_date) if due_date is not None else None,
            created_at=now,
            updated_at=now,
        )

    def set_priority(self, priority: Any) -> None:
        self.priority = TaskPriority.parse(priority)
        self.touch()

    def set_due_date(self, due_date: date | str | None) -> None:
        self.due_date = parse_date(due_date) if due_date is not None else None
        self.touch()

    def clear_due_date(self) -> None:
        self.set_due_date(None)

    def set_project(self, project_id: str) -> None:
        self.project_id = project_id
        self.touch()

    def clear_project(self) -> None:
        self.project_id = None
        self.touch()

    def set_idea(self, idea_id: str) -> None:
        self.idea_id = idea_id
        self.touch()

    def clear_idea(self) -> None:
        self.idea_id = None
        self.touch()

    def is_overdue(self, today: date | None = None) -> bool:
        """Whether the task is past its due date and still open."""
        if self.due_date is None or self.status.is_closed:
            return False
        return self.due_date < (today or date.today())

    def to_dict(self) -> dict[str, Any]:
        data = self._common_dict()
        data.update(
            {
                "priority": self.priority.value,
                "due_date": self.due_date.isoformat() if self.due_date else None,
                "project_id": self.project_id,
                "idea_id": self.idea_id,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        due_date = data.get("due_date")
        return cls(
            **cls._common_fields(data),
            status=TaskStatus.parse(data["status"]),
            priority=TaskPriority.parse(data.get("priority") or TaskPriority.MEDIUM),
            due_date=parse_date(due_date) if due_date else None,
            project_id=_optional_id(data.get("project_id")),
            idea_id=_optional_id(data.get("idea_id")),
        )


ENTITY_TYPES: dict[EntityKind, type[Entity]] = {
    EntityKind.IDEA: Idea,
    EntityKind.PROJECT: Project,
    EntityKind.TASK: Task,
}
