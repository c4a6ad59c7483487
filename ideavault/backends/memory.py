"""In-memory backend, mainly for tests and dry runs."""

import copy
from typing import Any

import structlog

from ideavault.models import EntityKind, Entity
from ideavault.repository import Repository, decode_collection, encode_collection

logger = structlog.get_logger()


class MemoryBackend(Repository):
    """Backend that keeps serialized records in a dictionary.

    Records are stored encoded, so entities handed out by ``load_all`` never
    share state with what is stored.
    """

    def __init__(self) -> None:
        self._records: dict[EntityKind, list[dict[str, Any]]] = {kind: [] for kind in EntityKind}
        self.save_count = 0

    def load_all(self, kind: EntityKind) -> list[Entity]:
        logger.debug("Loading collection from memory", kind=kind.value, count=len(self._records[kind]))
        return decode_collection(kind, copy.deepcopy(self._records[kind]))

    def save_all(self, kind: EntityKind, items: list[Entity]) -> None:
        self._records[kind] = encode_collection(items)
        self.save_count += 1
        logger.debug("Saved collection to memory", kind=kind.value, count=len(items))
