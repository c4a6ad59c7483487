"""Repository interface for persisting entity collections."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import structlog

from ideavault.errors import NotFoundError, StorageError, ValidationError
from ideavault.models import ENTITY_TYPES, Entity, EntityKind, Idea, Project, Task

logger = structlog.get_logger()


def decode_collection(kind: EntityKind, records: Any) -> list[Entity]:
    """Turn raw records into entities of the given kind.

    Raises:
        StorageError: If the records are not a well-formed collection for ``kind``
    """
    if not isinstance(records, list):
        raise StorageError(f"Malformed {kind.value} collection: expected a list of records")
    entity_cls = ENTITY_TYPES[kind]
    entities: list[Entity] = []
    seen: set[str] = set()
    for index, record in enumerate(records):
        try:
            entity = entity_cls.from_dict(record)  # type: ignore[attr-defined]
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise StorageError(f"Malformed {kind.value} record at index {index}: {e}") from e
        if entity.id in seen:
            raise StorageError(f"Duplicate {kind.value} id {entity.id}")
        seen.add(entity.id)
        entities.append(entity)
    return entities


def encode_collection(items: list[Entity]) -> list[dict[str, Any]]:
    """Turn entities into plain records."""
    return [item.to_dict() for item in items]  # type: ignore[attr-defined]


@dataclass
class Collections:
    """All three entity collections loaded together for one operation."""

    ideas: list[Idea] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    def of(self, kind: EntityKind) -> list[Any]:
        return {
            EntityKind.IDEA: self.ideas,
            EntityKind.PROJECT: self.projects,
            EntityKind.TASK: self.tasks,
        }[kind]

    def find(self, kind: EntityKind, entity_id: str) -> Any:
        """Return the entity with the given id.

        Raises:
            NotFoundError: If no entity of that kind has the id
        """
        for entity in self.of(kind):
            if entity.id == entity_id:
                return entity
        raise NotFoundError(kind.value, entity_id)

    def contains(self, kind: EntityKind, entity_id: str) -> bool:
        return any(entity.id == entity_id for entity in self.of(kind))

    def remove(self, kind: EntityKind, entity_id: str) -> Any:
        entity = self.find(kind, entity_id)
        self.of(kind).remove(entity)
        return entity

    def as_dict(self) -> dict[EntityKind, list[Entity]]:
        return {kind: list(self.of(kind)) for kind in EntityKind}


class Repository(ABC):
    """Abstract base class for entity storage backends.

    A repository stores one collection per entity kind. Saving a collection
    replaces it wholesale; readers never observe a half-written collection.
    """

    @abstractmethod
    def load_all(self, kind: EntityKind) -> list[Entity]:
        """Load every entity of a kind in stored order."""
        pass

    @abstractmethod
    def save_all(self, kind: EntityKind, items: list[Entity]) -> None:
        """Replace the stored collection of a kind."""
        pass

    def save_collections(self, collections: dict[EntityKind, list[Entity]]) -> None:
        """Persist several collections as one logical unit.

        The base implementation saves them one after another. Backends that
        can stage writes override this to make the group all-or-nothing.
        """
        for kind, items in collections.items():
            self.save_all(kind, items)

    def find_by_id(self, kind: EntityKind, entity_id: str) -> Entity:
        """Load the entity of a kind with the given id.

        Raises:
            NotFoundError: If the id is absent
        """
        logger.debug("Looking up entity", kind=kind.value, entity_id=entity_id)
        for entity in self.load_all(kind):
            if entity.id == entity_id:
                return entity
        raise NotFoundError(kind.value, entity_id)

    def exists(self, kind: EntityKind, entity_id: str) -> bool:
        """Check whether an entity of a kind with the given id is stored."""
        return any(entity.id == entity_id for entity in self.load_all(kind))

    def load_collections(self) -> Collections:
        """Load all three collections at once."""
        return Collections(
            ideas=self.load_all(EntityKind.IDEA),  # type: ignore[arg-type]
            projects=self.load_all(EntityKind.PROJECT),  # type: ignore[arg-type]
            tasks=self.load_all(EntityKind.TASK),  # type: ignore[arg-type]
        )
