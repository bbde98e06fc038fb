"""Data models for memories and conversation messages."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MAX_TAGS = 5


def utc_now() -> datetime:
    return datetime.now(UTC)


class Message(BaseModel):
    """A single conversation turn."""

    id: str
    content: str
    sender: Literal["user", "companion"]
    timestamp: datetime = Field(default_factory=utc_now)
    technique: str | None = None
    mood: str | None = None


class Memory(BaseModel):
    """A durable fact inferred from conversation.

    Memories are never edited once stored, only deleted, so the model is
    frozen. ``last_accessed`` is informational and refreshed in the store.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    content: str
    embedding: list[float] = Field(default_factory=list)
    importance: float = Field(ge=0.0, le=1.0)
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)
    created_at: datetime
    last_accessed: datetime

    def age_days(self, now: datetime) -> float:
        """Fractional days elapsed since creation."""
        return (now - self.created_at).total_seconds() / 86400


class MemorySummary(BaseModel):
    """Aggregate counts over a user's stored memories."""

    total: int = 0
    important: int = 0
    recent: int = 0
    top_tags: list[str] = Field(default_factory=list)
