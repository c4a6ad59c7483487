"""JSON file backend storing one file per entity collection."""

import json
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import structlog

from ideavault.errors import StorageError
from ideavault.models import Entity, EntityKind
from ideavault.repository import Repository, decode_collection, encode_collection

logger = structlog.get_logger()


class JsonFileBackend(Repository):
    """File-based backend writing ``ideas.json``, ``projects.json`` and ``tasks.json``.

    Files are written to a temporary sibling and swapped in with ``os.replace``,
    so a reader sees either the old or the new collection, never a partial one.
    """

    def __init__(self, data_dir: Path | str, backup_enabled: bool = False, max_backups: int = 10) -> None:
        """Initialize JSON file backend.

        Args:
            data_dir: Directory holding the collection files (created if missing)
            backup_enabled: Copy each collection file to ``backups/`` before overwriting it
            max_backups: Number of backups kept per collection
        """
        self.data_dir = Path(data_dir).expanduser()
        self.backup_enabled = backup_enabled
        self.max_backups = max_backups
        logger.debug("Initializing JSON file backend", data_dir=str(self.data_dir), backup_enabled=backup_enabled)

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create data directory", data_dir=str(self.data_dir), error=str(e))
            raise StorageError(f"Failed to create data directory {self.data_dir}: {e}") from e

    @property
    def backup_dir(self) -> Path:
        return self.data_dir / "backups"

    def path_for(self, kind: EntityKind) -> Path:
        return self.data_dir / f"{kind.plural}.json"

    def load_all(self, kind: EntityKind) -> list[Entity]:
        path = self.path_for(kind)
        if not path.exists():
            logger.debug("Collection file does not exist, returning empty collection", path=str(path))
            return []

        try:
            with open(path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except OSError as e:
            logger.error("Failed to read collection file", path=str(path), error=str(e))
            raise StorageError(f"Failed to read {kind.plural} file {path}: {e}") from e
        except UnicodeDecodeError as e:
            logger.error("Collection file is not valid UTF-8", path=str(path), error=str(e))
            raise StorageError(f"Failed to decode {kind.plural} file {path}: {e}") from e
        except json.JSONDecodeError as e:
            logger.error("Failed to parse collection file", path=str(path), error=str(e))
            raise StorageError(f"Failed to parse {kind.plural} JSON in {path}: {e}") from e

        entities = decode_collection(kind, records)
        logger.debug("Collection loaded", kind=kind.value, count=len(entities))
        return entities

    def save_all(self, kind: EntityKind, items: list[Entity]) -> None:
        self.save_collections({kind: items})

    def save_collections(self, collections: dict[EntityKind, list[Entity]]) -> None:
        """Write every collection, swapping all files in only once each one is staged.

        If a swap fails part-way, files already swapped are restored to their
        previous content before ``StorageError`` is raised.
        """
        staged: list[tuple[Path, Path]] = []
        try:
            for kind, items in collections.items():
                staged.append((self._stage(kind, items), self.path_for(kind)))
            previous = {target: target.read_bytes() if target.exists() else None for _, target in staged}
            if self.backup_enabled:
                for kind in collections:
                    self._backup(kind)
        except (OSError, TypeError, ValueError) as e:
            self._discard([tmp for tmp, _ in staged])
            logger.error("Failed to stage collections", error=str(e))
            raise StorageError(f"Failed to write collections: {e}") from e

        replaced: list[Path] = []
        try:
            for tmp, target in staged:
                os.replace(tmp, target)
                replaced.append(target)
        except OSError as e:
            logger.error("Failed to replace collection file, rolling back", error=str(e), replaced=len(replaced))
            self._discard([tmp for tmp, target in staged if target not in replaced])
            self._restore(replaced, previous)
            raise StorageError(f"Failed to write collections: {e}") from e

        logger.info("Collections saved", kinds=[kind.value for kind in collections])

    def _stage(self, kind: EntityKind, items: list[Entity]) -> Path:
        records = encode_collection(items)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=self.data_dir, prefix=f".{kind.plural}-", suffix=".tmp", delete=False
        ) as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        return Path(f.name)

    def _restore(self, targets: list[Path], previous: dict[Path, bytes | None]) -> None:
        for target in targets:
            content = previous[target]
            try:
                if content is None:
                    target.unlink(missing_ok=True)
                    continue
                with tempfile.NamedTemporaryFile(dir=self.data_dir, suffix=".tmp", delete=False) as f:
                    f.write(content)
                os.replace(f.name, target)
            except OSError as e:
                logger.error("Failed to restore collection file", path=str(target), error=str(e))

    def _discard(self, paths: list[Path]) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Failed to remove temporary file", path=str(path), error=str(e))

    def _backup(self, kind: EntityKind) -> None:
        source = self.path_for(kind)
        if not source.exists():
            return

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        target = self.backup_dir / f"{kind.plural}-{stamp}.json"
        shutil.copy2(source, target)
        logger.debug("Collection backed up", kind=kind.value, backup=str(target))

        backups = sorted(self.backup_dir.glob(f"{kind.plural}-*.json"))
        for stale in backups[: max(len(backups) - self.max_backups, 0)]:
            stale.unlink()
            logger.debug("Removed old backup", backup=str(stale))
