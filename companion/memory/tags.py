"""Topical and relationship tags derived from free text."""

from companion.memory.models import MAX_TAGS
from companion.memory.vocabulary import (
    NAME_STOPWORDS,
    RELATIONSHIP_PATTERNS,
    TAG_EMOTIONS,
    TAG_TOPICS,
)


def _relationship_tags(content: str) -> list[str]:
    tags: list[str] = []
    claimed: list[tuple[int, int]] = []
    for pattern in RELATIONSHIP_PATTERNS:
        matched = []
        for match in pattern.finditer(content):
            start, end = match.span()
            if any(start < c_end and c_start < end for c_start, c_end in claimed):
                continue
            matched.append((start, end))
            name = match["name"].lower()
            if name in NAME_STOPWORDS:
                continue
            tags.append(f"person:{name}")
            tags.append(f"relationship:{match['role'].lower()}")
        claimed.extend(matched)
    return tags


def extract_tags(content: str) -> list[str]:
    """Return up to five unique tags for *content*, earliest matches first.

    Emotion words come first, then life-area topics, then ``person:`` /
    ``relationship:`` pairs captured from phrases like "my sister named
    Ana" or "Sam is my partner".
    """
    lower = content.lower()
    tags = [word for word in TAG_EMOTIONS if word in lower]
    tags.extend(word for word in TAG_TOPICS if word in lower)
    tags.extend(_relationship_tags(content))
    return list(dict.fromkeys(tags))[:MAX_TAGS]
