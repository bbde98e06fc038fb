"""MemoryStore: per-user memory rows in libSQL with vector similarity search.

Embeddings live in an ``F32_BLOB`` column and are ranked inside the
database with ``vector_distance_cos``, so a similarity query returns at
most *limit* rows and never ships vectors back to Python.  The other
queries do not select the embedding column at all.

Writes are best-effort: ``save()`` logs and swallows every failure so a
conversation turn never fails because a memory could not be stored.
Deletes are user-initiated and raise on failure.  Reads raise as well;
callers that can live without memories (the context composer) treat a
failed read as an empty result.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections import Counter
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from companion.db import connection
from companion.memory.embeddings import Embedder
from companion.memory.models import Memory, MemorySummary
from companion.memory.tags import extract_tags

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

MIN_SAVE_IMPORTANCE = 0.4
RECENT_MIN_IMPORTANCE = 0.5
IMPORTANT_MIN_IMPORTANCE = 0.4
TAGGED_MIN_IMPORTANCE = 0.6
SIMILARITY_THRESHOLD = 0.5
MIN_SIMILARITY_QUERY_LENGTH = 20
LIST_ALL_LIMIT = 50

SUMMARY_IMPORTANT = 0.7
SUMMARY_RECENT_DAYS = 7
SUMMARY_TOP_TAGS = 5

# {dimensions} is filled from the embedder; libSQL rejects vectors of any other length.
_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS user_memories (
    id            TEXT PRIMARY KEY,
    user_id       TEXT NOT NULL,
    content       TEXT NOT NULL,
    embedding     F32_BLOB({dimensions}) NOT NULL,
    importance    REAL NOT NULL,
    tags          TEXT NOT NULL DEFAULT '[]',
    created_at    TEXT NOT NULL,
    last_accessed TEXT NOT NULL
)
"""

_CREATE_INDEX = """
CREATE INDEX IF NOT EXISTS idx_user_memories_user_created
    ON user_memories (user_id, created_at)
"""

# Everything except the embedding blob.
_COLUMNS = "id, user_id, content, importance, tags, created_at, last_accessed"

_INSERT = """
INSERT INTO user_memories
    (id, user_id, content, embedding, importance, tags, created_at, last_accessed)
VALUES (?, ?, ?, vector32(?), ?, ?, ?, ?)
"""

_SELECT_SIMILAR = f"""
SELECT {_COLUMNS} FROM (
    SELECT {_COLUMNS}, vector_distance_cos(embedding, vector32(?)) AS distance
    FROM user_memories
    WHERE user_id = ?
)
WHERE distance <= ?
ORDER BY distance, created_at DESC
LIMIT ?
"""


class MemoryStoreError(Exception):
    """Raised when a user-initiated memory operation fails."""


class MemoryNotFoundError(MemoryStoreError):
    """Raised when deleting a memory id that does not exist."""


def _timestamp(dt: datetime) -> str:
    # Fixed-width so lexicographic ORDER BY matches chronological order.
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def _row_to_memory(row: tuple) -> Memory:
    return Memory(
        id=row[0],
        user_id=row[1],
        content=row[2],
        importance=row[3],
        tags=json.loads(row[4]) if row[4] else [],
        created_at=datetime.fromisoformat(row[5]),
        last_accessed=datetime.fromisoformat(row[6]),
    )


class MemoryStore:
    """Persists and queries memories for all users.

    Singleton accessed via ``MemoryStore.get()``.  Pass an explicit *db_path*
    (e.g. ``tmp_path / "test.db"``) and *embedder* for test isolation.
    """

    _instance: MemoryStore | None = None

    def __init__(self, db_path: Path | None = None, embedder: Embedder | None = None) -> None:
        self._db_path = db_path
        self._embedder = embedder
        self._initialised = False

    @classmethod
    def get(cls) -> MemoryStore:
        """Return the shared MemoryStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    @property
    def embedder(self) -> Embedder:
        if self._embedder is None:
            self._embedder = Embedder.get()
        return self._embedder

    # -- Internal helpers ------------------------------------------------------

    async def _ensure_schema(self) -> None:
        if self._initialised:
            return
        async with connection(self._db_path) as db:
            await db.execute(_CREATE_TABLE.format(dimensions=self.embedder.dimensions))
            await db.execute(_CREATE_INDEX)
            await db.commit()
        self._initialised = True

    async def _fetch(self, sql: str, params: tuple) -> list[Memory]:
        await self._ensure_schema()
        async with connection(self._db_path) as db:
            cursor = await db.execute(sql, params)
            rows = await cursor.fetchall()
        return [_row_to_memory(row) for row in rows]

    async def _select(self, where: str, params: tuple, order: str, limit: int) -> list[Memory]:
        return await self._fetch(
            f"SELECT {_COLUMNS} FROM user_memories WHERE {where} ORDER BY {order} LIMIT ?",
            (*params, limit),
        )

    # -- Write -----------------------------------------------------------------

    async def save(
        self,
        user_id: str,
        content: str,
        importance: float,
        created_at: datetime | None = None,
    ) -> Memory | None:
        """Store a memory if it is important enough.

        Returns the stored Memory, or None when skipped or when anything
        went wrong (failures are logged, never raised).
        """
        if importance < MIN_SAVE_IMPORTANCE:
            logger.debug("Skipping low-importance memory (%.2f)", importance)
            return None

        try:
            embedding = await self.embedder.embed(content)
            now = created_at or datetime.now(UTC)
            memory = Memory(
                id=str(uuid.uuid4()),
                user_id=user_id,
                content=content,
                embedding=embedding,
                importance=importance,
                tags=extract_tags(content),
                created_at=now,
                last_accessed=now,
            )
            await self._ensure_schema()
            async with connection(self._db_path) as db:
                await db.execute(
                    _INSERT,
                    (
                        memory.id,
                        memory.user_id,
                        memory.content,
                        json.dumps(memory.embedding),
                        memory.importance,
                        json.dumps(memory.tags),
                        _timestamp(memory.created_at),
                        _timestamp(memory.last_accessed),
                    ),
                )
                await db.commit()
        except Exception:
            logger.exception("Failed to save memory for user %s", user_id)
            return None

        logger.info("Memory saved (importance: %.2f): %s", importance, content[:50])
        return memory

    async def touch(self, memory_ids: list[str], when: datetime | None = None) -> None:
        """Refresh ``last_accessed`` for memories that were just recalled."""
        if not memory_ids:
            return
        await self._ensure_schema()
        placeholders = ", ".join("?" * len(memory_ids))
        stamp = _timestamp(when or datetime.now(UTC))
        async with connection(self._db_path) as db:
            await db.execute(
                f"UPDATE user_memories SET last_accessed = ? WHERE id IN ({placeholders})",
                (stamp, *memory_ids),
            )
            await db.commit()

    # -- Delete ----------------------------------------------------------------

    async def delete(self, memory_id: str) -> None:
        """Delete exactly one memory.

        Raises:
            MemoryNotFoundError: No memory has this id.
        """
        await self._ensure_schema()
        async with connection(self._db_path) as db:
            cursor = await db.execute("DELETE FROM user_memories WHERE id = ?", (memory_id,))
            await db.commit()
            deleted = cursor.rowcount
        if deleted == 0:
            raise MemoryNotFoundError(f"No memory with id {memory_id!r}")
        logger.info("Memory deleted: %s", memory_id)

    # -- Read ------------------------------------------------------------------

    async def query_recent(self, user_id: str, limit: int) -> list[Memory]:
        """Newest memories with importance >= 0.5."""
        memories = await self._select(
            "user_id = ? AND importance >= ?",
            (user_id, RECENT_MIN_IMPORTANCE),
            "created_at DESC",
            limit,
        )
        logger.debug("Retrieved %d recent memories", len(memories))
        return memories

    async def query_important(self, user_id: str, limit: int) -> list[Memory]:
        """Most important memories (>= 0.4), newest first among equals."""
        memories = await self._select(
            "user_id = ? AND importance >= ?",
            (user_id, IMPORTANT_MIN_IMPORTANCE),
            "importance DESC, created_at DESC",
            limit,
        )
        logger.debug("Retrieved %d important memories", len(memories))
        return memories

    async def query_similar(self, user_id: str, query_text: str, limit: int) -> list[Memory]:
        """Memories semantically close to *query_text*, most similar first.

        Queries shorter than 20 characters return nothing without calling
        the embedding service.
        """
        if len(query_text) < MIN_SIMILARITY_QUERY_LENGTH:
            return []

        query_embedding = await self.embedder.embed(query_text)
        # cosine distance = 1 - cosine similarity
        memories = await self._fetch(
            _SELECT_SIMILAR,
            (json.dumps(query_embedding), user_id, 1 - SIMILARITY_THRESHOLD, limit),
        )
        logger.debug("Vector search found %d similar memories", len(memories))
        return memories

    async def query_all(self, user_id: str) -> list[Memory]:
        """Every memory for the user, newest first, capped at 50."""
        return await self._select("user_id = ?", (user_id,), "created_at DESC", LIST_ALL_LIMIT)

    async def query_by_tags(self, user_id: str, tags: list[str], limit: int = 3) -> list[Memory]:
        """Important memories (>= 0.6) sharing at least one of *tags*."""
        if not tags:
            return []
        placeholders = ", ".join("?" * len(tags))
        return await self._select(
            "user_id = ? AND importance >= ? AND EXISTS ("
            f"SELECT 1 FROM json_each(user_memories.tags) WHERE json_each.value IN ({placeholders}))",
            (user_id, TAGGED_MIN_IMPORTANCE, *tags),
            "importance DESC, created_at DESC",
            limit,
        )

    async def query_by_message_tags(self, user_id: str, message: str, limit: int = 2) -> list[Memory]:
        """Tagged memories matching the tags extracted from *message*."""
        return await self.query_by_tags(user_id, extract_tags(message), limit)

    async def summary(self, user_id: str, now: datetime | None = None) -> MemorySummary:
        """Counts and most frequent tags over all of a user's memories."""
        now = now or datetime.now(UTC)
        try:
            await self._ensure_schema()
            async with connection(self._db_path) as db:
                cursor = await db.execute(
                    "SELECT importance, tags, created_at FROM user_memories WHERE user_id = ?",
                    (user_id,),
                )
                rows = await cursor.fetchall()
        except Exception:
            logger.exception("Failed to summarise memories for user %s", user_id)
            return MemorySummary()

        cutoff = now - timedelta(days=SUMMARY_RECENT_DAYS)
        tag_counts: Counter[str] = Counter()
        for row in rows:
            tag_counts.update(json.loads(row[1]) if row[1] else [])

        return MemorySummary(
            total=len(rows),
            important=sum(1 for row in rows if row[0] >= SUMMARY_IMPORTANT),
            recent=sum(1 for row in rows if datetime.fromisoformat(row[2]) > cutoff),
            top_tags=[tag for tag, _ in tag_counts.most_common(SUMMARY_TOP_TAGS)],
        )
