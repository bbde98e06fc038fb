"""Reply prompt assembly with recalled memories."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from companion.config import settings

if TYPE_CHECKING:
    from companion.memory.models import Memory, Message


STYLE_GUIDANCE: dict[str, str] = {
    "Casual Friend": "Be warm, casual, and supportive like a close friend",
    "Professional Therapist": "Be professional, structured, and use therapeutic techniques",
    "Caring Mentor": "Be wise, nurturing, and offer gentle guidance",
    "Supportive Coach": "Be encouraging, motivational, and action-oriented",
}
DEFAULT_STYLE_GUIDANCE = "Be warm and supportive"


class UserProfile(BaseModel):
    """What the companion knows about the person it is talking to."""

    name: str = "friend"
    bio: str = ""
    conversation_style: str = "Casual Friend"
    empathy_level: float = Field(default=0.7, ge=0.0, le=1.0)
    response_length: float = Field(default=0.6, ge=0.0, le=1.0)


def time_ago(created_at: datetime, now: datetime | None = None) -> str:
    """Human phrasing for a memory's age: today, yesterday, N days/weeks/months ago."""
    days = int(((now or datetime.now(UTC)) - created_at).total_seconds() // 86400)
    if days <= 0:
        return "today"
    if days == 1:
        return "yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        return f"{days // 7} weeks ago"
    return f"{days // 30} months ago"


def format_memories(memories: list[Memory], now: datetime | None = None) -> str:
    return "\n".join(f"- {m.content} ({time_ago(m.created_at, now)})" for m in memories)


def _length_guidance(response_length: float) -> str:
    if response_length < 0.5:
        return "Keep responses very brief (1 sentence max)"
    if response_length > 0.8:
        return "Provide detailed, thoughtful responses (2-3 sentences)"
    return "Keep responses moderate length (1-2 sentences)"


def _empathy_label(level: float) -> str:
    if level > 0.8:
        return "very caring"
    if level > 0.6:
        return "balanced"
    return "more direct"


def build_reply_prompt(
    user_message: str,
    recent_turns: list[Message],
    profile: UserProfile,
    memories: list[Memory],
    now: datetime | None = None,
) -> str:
    """Assemble the single-turn prompt for reply generation.

    Memories are included only when the composer returned any; the most
    recent ``prompt_history_turns`` turns are rendered as a transcript.
    """
    name = settings.companion_name
    history = recent_turns[-settings.prompt_history_turns :] if settings.prompt_history_turns else []
    transcript = "\n".join(
        f"{profile.name if m.sender == 'user' else name}: {m.content}" for m in history
    )

    sections = [
        f"You are {name}, a warm, caring AI companion.",
        f"USER: {profile.name}\nCURRENT MESSAGE: \"{user_message}\"",
        f"RECENT CONVERSATION:\n{transcript or 'This is the start of the conversation.'}",
    ]
    if memories:
        sections.append(f"RELEVANT CONTEXT FROM PAST:\n{format_memories(memories, now)}")
    if profile.bio:
        sections.append(f"USER BACKGROUND (use only when relevant): {profile.bio}")

    style = STYLE_GUIDANCE.get(profile.conversation_style, DEFAULT_STYLE_GUIDANCE)
    sections.append(
        "PERSONALITY & STYLE:\n"
        f"- {style}\n"
        f"- Empathy level: {round(profile.empathy_level * 100)}% "
        f"({_empathy_label(profile.empathy_level)})\n"
        f"- {_length_guidance(profile.response_length)}\n"
        "- Only bring up past context when it clearly relates to the current message"
    )
    sections.append(f"Respond as {name}, staying focused on what the user is saying right now.")
    return "\n\n".join(sections)
