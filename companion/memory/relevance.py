"""Decide whether a recalled memory belongs in the current turn.

A memory passes when any one of three independent checks holds:

- it is important enough to always be relevant (importance > 0.8),
- it shares enough longer words with the message (overlap ratio >= 0.2),
- it mentions an emotion that the message also mentions.
"""

from companion.memory.models import Memory
from companion.memory.vocabulary import RELEVANCE_EMOTIONS

ALWAYS_RELEVANT_IMPORTANCE = 0.8
MIN_OVERLAP_RATIO = 0.2
MIN_TOKEN_LENGTH = 4


def _tokens(text: str) -> set[str]:
    return {token for token in text.lower().split() if len(token) >= MIN_TOKEN_LENGTH}


def word_overlap(first: str, second: str) -> float:
    """Shared tokens divided by the larger token set. Only tokens longer than 3 chars count."""
    a, b = _tokens(first), _tokens(second)
    largest = max(len(a), len(b))
    if largest == 0:
        return 0.0
    return len(a & b) / largest


def _emotions(text: str) -> set[str]:
    lower = text.lower()
    return {word for word in RELEVANCE_EMOTIONS if word in lower}


def shares_emotion(first: str, second: str) -> bool:
    return bool(_emotions(first) & _emotions(second))


def is_relevant(memory: Memory, current_message: str) -> bool:
    return (
        memory.importance > ALWAYS_RELEVANT_IMPORTANCE
        or word_overlap(memory.content, current_message) >= MIN_OVERLAP_RATIO
        or shares_emotion(memory.content, current_message)
    )
