"""Async Claude API client for companion replies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import anthropic

from companion.config import settings
from companion.llm.prompt import build_reply_prompt

if TYPE_CHECKING:
    from companion.llm.prompt import UserProfile
    from companion.memory.models import Memory, Message

logger = logging.getLogger(__name__)

_client: anthropic.AsyncAnthropic | None = None


def _get_client() -> anthropic.AsyncAnthropic:
    """Lazily initialize the Anthropic client."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
    return _client


async def complete_text(
    messages: list[dict[str, Any]],
    *,
    system: str | None = None,
    model: str | None = None,
    max_tokens: int | None = None,
) -> str:
    """Single-shot Claude call, no tools and no streaming."""
    client = _get_client()
    kwargs: dict[str, Any] = {
        "model": model or settings.chat_model,
        "max_tokens": max_tokens or settings.reply_max_tokens,
        "messages": messages,
    }
    if system is not None:
        kwargs["system"] = system
    response = await client.messages.create(**kwargs)
    return response.content[0].text


async def generate_reply(
    user_message: str,
    recent_turns: list[Message],
    profile: UserProfile,
    memories: list[Memory],
) -> str:
    """Generate the companion's reply to *user_message*.

    Errors from the API propagate; the caller decides on a fallback.
    """
    prompt = build_reply_prompt(user_message, recent_turns, profile, memories)
    logger.debug("Generating reply with %d memories", len(memories))
    return await complete_text([{"role": "user", "content": prompt}])
