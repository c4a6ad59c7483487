"""Shared fixtures."""

from datetime import date, datetime, timedelta, timezone

import pytest

from ideavault.backends import MemoryBackend
from ideavault.vault import Vault

TODAY = date(2026, 3, 15)


@pytest.fixture
def backend() -> MemoryBackend:
    """Create an empty in-memory backend."""
    return MemoryBackend()


@pytest.fixture
def vault(backend: MemoryBackend) -> Vault:
    """Create a vault with a fixed current date."""
    return Vault(backend, today=lambda: TODAY)


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch):
    """Make ``utcnow`` advance one second per call, starting at a fixed instant."""
    state = {"now": datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)}

    def tick() -> datetime:
        state["now"] += timedelta(seconds=1)
        return state["now"]

    monkeypatch.setattr("ideavault.models.utcnow", tick)
    return state
