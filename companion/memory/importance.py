"""Heuristic salience scoring for conversation messages.

The score decides whether a message is persisted as a memory at all, so
it must be a pure function of the text.  Structure: crisis override,
then generic/short override, then an additive score clamped to 1.0.
"""

from companion.memory.models import Message
from companion.memory.vocabulary import (
    CRISIS_KEYWORDS,
    GENERIC_PHRASES,
    PERSONAL_DISCLOSURES,
    SIGNIFICANT_EVENTS,
    STRONG_EMOTIONS,
)

BASE_SCORE = 0.3
PERSONAL_WEIGHT = 0.3
EMOTION_WEIGHT = 0.2
EVENT_WEIGHT = 0.15
LENGTH_TIERS: tuple[tuple[int, float], ...] = ((50, 0.1), (150, 0.1), (300, 0.1))

CRISIS_SCORE = 1.0
GENERIC_SCORE = 0.1
MIN_MEANINGFUL_LENGTH = 15

# Replies are scored by length alone.
REPLY_LONG_THRESHOLD = 100
REPLY_LONG_SCORE = 0.6
REPLY_SHORT_SCORE = 0.4


def is_crisis(content: str) -> bool:
    """True if the text contains any crisis keyword."""
    lower = content.lower()
    return any(keyword in lower for keyword in CRISIS_KEYWORDS)


def _is_trivial(content: str) -> bool:
    trimmed = content.strip()
    return len(trimmed) < MIN_MEANINGFUL_LENGTH or trimmed.lower() in GENERIC_PHRASES


def score_text(content: str) -> float:
    """Compute a 0-1 importance score for a piece of conversation text."""
    if is_crisis(content):
        return CRISIS_SCORE
    if _is_trivial(content):
        return GENERIC_SCORE

    lower = content.lower()
    score = BASE_SCORE
    score += PERSONAL_WEIGHT * sum(phrase in lower for phrase in PERSONAL_DISCLOSURES)
    score += EMOTION_WEIGHT * sum(word in lower for word in STRONG_EMOTIONS)
    score += EVENT_WEIGHT * sum(phrase in lower for phrase in SIGNIFICANT_EVENTS)
    for min_length, bonus in LENGTH_TIERS:
        if len(content) > min_length:
            score += bonus

    return min(score, 1.0)


def score_message(message: Message) -> float:
    return score_text(message.content)


def score_reply(reply: str) -> float:
    """Importance for the companion's own replies: longer replies matter more."""
    return REPLY_LONG_SCORE if len(reply) > REPLY_LONG_THRESHOLD else REPLY_SHORT_SCORE
