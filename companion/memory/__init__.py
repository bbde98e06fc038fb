"""Contextual memory engine: scoring, tagging, storage and recall."""

from companion.memory.context import ContextComposer
from companion.memory.embeddings import Embedder
from companion.memory.generic import is_generic
from companion.memory.importance import score_message, score_reply, score_text
from companion.memory.models import Memory, MemorySummary, Message
from companion.memory.relevance import is_relevant
from companion.memory.store import MemoryNotFoundError, MemoryStore, MemoryStoreError
from companion.memory.tags import extract_tags

__all__ = [
    "ContextComposer",
    "Embedder",
    "Memory",
    "MemoryNotFoundError",
    "MemoryStore",
    "MemoryStoreError",
    "MemorySummary",
    "Message",
    "extract_tags",
    "is_generic",
    "is_relevant",
    "score_message",
    "score_reply",
    "score_text",
]
