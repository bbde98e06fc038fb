"""Word lists and phrase patterns used by the memory heuristics.

Everything here is plain data so it can be localized or extended without
touching the scoring and filtering code.  Entries are lowercase and matched
as substrings of lowercased text unless noted otherwise.
"""

import re

# -- Tag extraction ----------------------------------------------------------

TAG_EMOTIONS: tuple[str, ...] = (
    "anxiety", "anxious", "depression", "depressed", "stress", "stressed",
    "happiness", "happy", "anger", "angry", "fear", "scared", "sadness", "sad",
    "panic", "worried", "excited", "calm", "peaceful", "frustrated", "overwhelmed",
)

TAG_TOPICS: tuple[str, ...] = (
    "work", "job", "career", "family", "parents", "relationship", "partner",
    "health", "money", "financial", "school", "college", "friends", "love",
    "home", "travel", "therapy", "medication", "sleep", "exercise",
)

# Matched against the unlowered text with re.IGNORECASE.  Each pattern
# captures a ``role`` ("sister", "partner") and a ``name``.  Earlier
# patterns win: a later match overlapping an earlier one is ignored.
RELATIONSHIP_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"my (?P<role>\w+) (?:named|called) (?P<name>\w+)", re.IGNORECASE),
    re.compile(r"(?P<name>\w+) is my (?P<role>\w+)", re.IGNORECASE),
    re.compile(r"my (?P<role>\w+) (?P<name>\w+)", re.IGNORECASE),
)

# Captured "names" that are really the next word of an ordinary phrase
# ("my job at", "my mood is").
NAME_STOPWORDS: frozenset[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "so", "is", "was", "are", "were",
    "be", "been", "has", "had", "have", "do", "does", "did", "will", "would",
    "can", "could", "at", "in", "on", "of", "to", "for", "from", "with",
    "about", "as", "by", "into", "over", "after", "before", "again", "too",
    "this", "that", "it", "who", "which", "just", "really", "still", "all",
    "named", "called", "i", "me", "my", "we", "you", "he", "she", "they",
    "not", "never", "always", "lately", "today", "yesterday", "now",
})

# -- Importance scoring ------------------------------------------------------

PERSONAL_DISCLOSURES: tuple[str, ...] = (
    "my name is", "i am", "i work", "my job", "my family", "my relationship",
    "my partner", "my wife", "my husband", "my boyfriend", "my girlfriend",
    "my mom", "my dad", "my mother", "my father", "my sister", "my brother",
    "i live", "my home", "my address", "i study", "my school",
)

STRONG_EMOTIONS: tuple[str, ...] = (
    "depressed", "anxious", "panic", "suicidal", "hopeless", "overwhelmed",
    "excited", "amazing", "terrible", "wonderful", "devastated", "thrilled",
)

SIGNIFICANT_EVENTS: tuple[str, ...] = (
    "happened to me", "i experienced", "i went through", "i achieved",
    "i failed", "i succeeded", "i learned", "i realized", "i discovered",
    "i decided", "i changed", "i started", "i stopped", "i quit",
)

CRISIS_KEYWORDS: tuple[str, ...] = (
    "suicide", "kill myself", "end it all", "can't go on", "want to die",
)

# Compared for exact equality with the trimmed, lowercased message.
GENERIC_PHRASES: frozenset[str] = frozenset({
    "hi", "hello", "hey", "ok", "yes", "no", "thanks", "bye",
    "better now", "it's better now",
})

# -- Recall gating -----------------------------------------------------------

GENERIC_MESSAGE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(hi|hello|hey|good morning|good afternoon|good evening)$", re.IGNORECASE),
    re.compile(r"^(ok|okay|yes|no|thanks|thank you|bye|goodbye)$", re.IGNORECASE),
    re.compile(r"^(how are you|what's up|what's new)$", re.IGNORECASE),
    re.compile(r"^(it's better now|better now|good|fine|alright)$", re.IGNORECASE),
)

RELEVANCE_EMOTIONS: tuple[str, ...] = (
    "anxious", "anxiety", "worried", "stress", "stressed",
    "sad", "depressed", "happy", "excited", "angry",
    "frustrated", "overwhelmed", "calm", "peaceful",
)
