"""Detection of trivial utterances that never warrant memory recall."""

from companion.memory.vocabulary import GENERIC_MESSAGE_PATTERNS


def is_generic(text: str) -> bool:
    """True for greetings, acknowledgements and filler like "ok" or "how are you"."""
    stripped = text.strip()
    return any(pattern.fullmatch(stripped) for pattern in GENERIC_MESSAGE_PATTERNS)
