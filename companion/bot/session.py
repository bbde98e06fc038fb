"""In-memory conversation session with sliding window."""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Literal

from companion.config import settings
from companion.memory.models import Message

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Conversation history for a single user."""

    messages: list[Message] = field(default_factory=list)
    window_size: int = field(default_factory=lambda: settings.conversation_window_size)

    def add(self, sender: Literal["user", "companion"], content: str) -> Message:
        """Append a message and trim to the sliding window."""
        message = Message(id=f"msg_{uuid.uuid4().hex}", content=content, sender=sender)
        self.messages.append(message)
        if len(self.messages) > self.window_size:
            self.messages = self.messages[-self.window_size :]
        return message

    def history(self) -> list[Message]:
        """All turns except the newest one."""
        return self.messages[:-1]

    def clear(self) -> int:
        """Clear all messages. Returns the count of cleared messages."""
        count = len(self.messages)
        self.messages.clear()
        logger.debug("Cleared %d messages", count)
        return count


# Global session store keyed by user ID
_sessions: dict[str, Session] = {}


def get_session(user_id: str) -> Session:
    """Get or create a session for a user."""
    if user_id not in _sessions:
        _sessions[user_id] = Session()
    return _sessions[user_id]


def reset_sessions() -> None:
    """Drop every session (for testing)."""
    _sessions.clear()
