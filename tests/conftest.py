"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from companion.bot.session import reset_sessions
from companion.memory.models import Memory
from companion.memory.store import MemoryStore

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


class FakeEmbedder:
    """Deterministic embedder: known texts map to fixed vectors, others to *default*."""

    def __init__(self, vectors: dict[str, list[float]] | None = None,
                 default: list[float] | None = None) -> None:
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0, 0.0]
        self.calls: list[str] = []

    @property
    def dimensions(self) -> int:
        return len(self.default)

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        return self.vectors.get(text, self.default)


def make_memory(
    memory_id: str,
    content: str = "a memory about something",
    importance: float = 0.5,
    age_days: float = 0,
    user_id: str = "u1",
) -> Memory:
    created = NOW - timedelta(days=age_days)
    return Memory(
        id=memory_id,
        user_id=user_id,
        content=content,
        importance=importance,
        created_at=created,
        last_accessed=created,
    )


@pytest.fixture(autouse=False)
def _no_turso(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure tests use local file, not remote Turso."""
    monkeypatch.setattr("companion.config.settings.turso_database_url", "")


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def store(tmp_path, embedder, _no_turso) -> MemoryStore:
    """A MemoryStore on a throwaway libSQL file."""
    return MemoryStore(db_path=tmp_path / "memories.db", embedder=embedder)


@pytest.fixture(autouse=True)
def _fresh_sessions():
    reset_sessions()
    yield
    reset_sessions()
