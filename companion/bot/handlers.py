"""Conversation turn pipeline: score, remember, recall, reply."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING

from companion.bot.session import get_session
from companion.config import settings
from companion.llm.client import generate_reply
from companion.llm.prompt import UserProfile
from companion.memory.context import ContextComposer
from companion.memory.importance import is_crisis, score_message, score_reply
from companion.memory.store import MemoryStore

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from companion.memory.models import Memory, Message

    ReplyGenerator = Callable[[str, list[Message], UserProfile, list[Memory]], Awaitable[str]]

logger = logging.getLogger(__name__)

CRISIS_RESPONSE = (
    "{name}, I'm really concerned about what you're sharing with me. "
    "Please reach out for immediate help: 988 (Suicide & Crisis Lifeline), "
    "text HOME to 741741 (Crisis Text Line), or 911 for emergency services. "
    "You don't have to go through this alone."
)
FALLBACK_RESPONSE = "I'm having trouble responding right now. Let's try again in a moment."

GREETING_MEMORY_LIMIT = 3
RETURNING_GREETING_WITH_TOPICS = "Hey {name}! Good to see you again. How are things going?"
RETURNING_GREETING = "Welcome back, {name}! How's your day been?"
FIRST_GREETINGS = (
    "Hey {name}! How's your day treating you?",
    "Hi {name}! What's been on your mind lately?",
    "Good to see you, {name}. How are you feeling today?",
)


class Companion:
    """Runs one conversational turn at a time for any user.

    Memory writes run as background tasks so a slow or failing store never
    delays the reply.  Pending writes are tracked in ``background_tasks``.
    """

    def __init__(
        self,
        store: MemoryStore | None = None,
        composer: ContextComposer | None = None,
        reply_generator: ReplyGenerator | None = None,
    ) -> None:
        self.store = store or MemoryStore.get()
        self.composer = composer or ContextComposer(self.store)
        self._generate = reply_generator or generate_reply
        self.background_tasks: set[asyncio.Task] = set()

    def _remember(self, user_id: str, content: str, importance: float) -> None:
        if not settings.memory_enabled:
            return
        task = asyncio.create_task(self.store.save(user_id, content, importance))
        self.background_tasks.add(task)
        task.add_done_callback(self.background_tasks.discard)

    async def drain(self) -> None:
        """Wait for pending memory writes (shutdown and tests)."""
        if self.background_tasks:
            await asyncio.gather(*self.background_tasks)

    async def greeting(self, user_id: str, profile: UserProfile | None = None) -> str:
        """Open a conversation, welcoming back users who have important memories.

        The greeting becomes the first companion message of the session.
        """
        profile = profile or UserProfile()
        memories: list[Memory] = []
        if settings.memory_enabled:
            try:
                memories = await self.store.query_important(user_id, GREETING_MEMORY_LIMIT)
            except Exception:
                logger.warning("Failed to load memories for greeting", exc_info=True)

        if not memories:
            template = random.choice(FIRST_GREETINGS)
        elif any(m.tags for m in memories):
            template = RETURNING_GREETING_WITH_TOPICS
        else:
            template = RETURNING_GREETING

        text = template.format(name=profile.name)
        get_session(user_id).add("companion", text)
        return text

    async def handle_message(
        self,
        user_id: str,
        text: str,
        profile: UserProfile | None = None,
    ) -> str:
        """Process one user message and return the companion's reply."""
        profile = profile or UserProfile()
        session = get_session(user_id)
        user_message = session.add("user", text)

        self._remember(user_id, text, score_message(user_message))

        memories: list[Memory] = []
        if settings.memory_enabled:
            memories = await self.composer.get_context(user_id, text)

        if is_crisis(text):
            logger.warning("Crisis language detected for user %s", user_id)
            reply = CRISIS_RESPONSE.format(name=profile.name)
        else:
            try:
                reply = await self._generate(text, session.history(), profile, memories)
            except Exception:
                logger.exception("Error generating response")
                session.add("companion", FALLBACK_RESPONSE)
                return FALLBACK_RESPONSE

        session.add("companion", reply)
        self._remember(user_id, f"{settings.companion_name}: {reply}", score_reply(reply))

        if memories:
            try:
                await self.store.touch([m.id for m in memories])
            except Exception:
                logger.warning("Failed to refresh last_accessed", exc_info=True)
        return reply

    async def list_memories(self, user_id: str) -> list[Memory]:
        """Every stored memory for the settings screen."""
        return await self.store.query_all(user_id)

    async def forget(self, memory_id: str) -> None:
        """Delete one memory. Raises MemoryNotFoundError if it does not exist."""
        await self.store.delete(memory_id)
