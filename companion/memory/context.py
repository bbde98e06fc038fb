"""Compose the bounded set of memories handed to reply generation.

Pipeline for one turn:

1. Gate out short or generic messages (no store queries at all).
2. Run the recent, important and similar queries concurrently.  Each
   branch has its own timeout and any failure becomes an empty list.
3. Merge, dedupe by id (first occurrence wins), expire stale low-value
   memories, drop irrelevant ones.
4. Rank by ``importance * 0.6 + recency * 0.4`` and keep the top four.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from companion.config import settings
from companion.memory.generic import is_generic
from companion.memory.relevance import is_relevant

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from companion.memory.models import Memory
    from companion.memory.store import MemoryStore

logger = logging.getLogger(__name__)

MIN_CONTEXT_MESSAGE_LENGTH = 20
RECENT_LIMIT = 2
IMPORTANT_LIMIT = 2
SIMILAR_LIMIT = 3
CONTEXT_LIMIT = 4

RECENCY_WINDOW_DAYS = 30
EXPIRY_DAYS = 30
NEVER_EXPIRES_IMPORTANCE = 0.8
IMPORTANCE_WEIGHT = 0.6
RECENCY_WEIGHT = 0.4


def recency_score(memory: Memory, now: datetime) -> float:
    """Linear decay from 1.0 at creation to 0.0 at 30 days."""
    return max(0.0, 1 - memory.age_days(now) / RECENCY_WINDOW_DAYS)


def composite_score(memory: Memory, now: datetime) -> float:
    return memory.importance * IMPORTANCE_WEIGHT + recency_score(memory, now) * RECENCY_WEIGHT


def is_expired(memory: Memory, now: datetime) -> bool:
    """Old memories drop out of recall unless they are highly important."""
    return memory.age_days(now) > EXPIRY_DAYS and memory.importance < NEVER_EXPIRES_IMPORTANCE


def dedupe(memories: list[Memory]) -> list[Memory]:
    """Drop repeated ids, keeping the first occurrence."""
    seen: set[str] = set()
    unique = []
    for memory in memories:
        if memory.id not in seen:
            seen.add(memory.id)
            unique.append(memory)
    return unique


def rank(candidates: list[Memory], current_message: str, now: datetime) -> list[Memory]:
    """Filter and order merged candidates into the final context window."""
    kept = [
        m for m in dedupe(candidates)
        if not is_expired(m, now) and is_relevant(m, current_message)
    ]
    kept.sort(key=lambda m: composite_score(m, now), reverse=True)
    return kept[:CONTEXT_LIMIT]


class ContextComposer:
    """Stateless per call; holds only its store and timeout."""

    def __init__(self, store: MemoryStore, timeout: float | None = None) -> None:
        self._store = store
        self._timeout = settings.memory_query_timeout if timeout is None else timeout

    async def _branch(self, name: str, query: Awaitable[list[Memory]]) -> list[Memory]:
        try:
            return await asyncio.wait_for(query, timeout=self._timeout)
        except TimeoutError:
            logger.warning("Memory query %r timed out after %.1fs", name, self._timeout)
        except Exception:
            logger.exception("Memory query %r failed", name)
        return []

    async def get_context(
        self,
        user_id: str,
        current_message: str,
        now: datetime | None = None,
    ) -> list[Memory]:
        """Return at most four memories relevant to *current_message*, best first."""
        if len(current_message) < MIN_CONTEXT_MESSAGE_LENGTH or is_generic(current_message):
            logger.debug("Skipping memory retrieval for generic/short message")
            return []

        recent, important, similar = await asyncio.gather(
            self._branch("recent", self._store.query_recent(user_id, RECENT_LIMIT)),
            self._branch("important", self._store.query_important(user_id, IMPORTANT_LIMIT)),
            self._branch(
                "similar", self._store.query_similar(user_id, current_message, SIMILAR_LIMIT)
            ),
        )

        context = rank([*recent, *important, *similar], current_message, now or datetime.now(UTC))
        logger.info(
            "Retrieved %d contextual memories for: %r", len(context), current_message[:30]
        )
        return context
