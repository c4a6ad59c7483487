"""Backend implementations."""

from ideavault.backends.json_file import JsonFileBackend
from ideavault.backends.memory import MemoryBackend

__all__ = ["JsonFileBackend", "MemoryBackend"]
