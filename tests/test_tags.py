"""Tests for tag extraction."""

from companion.memory.tags import extract_tags


def test_emotion_and_topic_tags() -> None:
    assert extract_tags("Work has me so stressed lately") == ["stress", "stressed", "work"]


def test_case_insensitive() -> None:
    assert extract_tags("ANXIOUS about SCHOOL") == ["anxious", "school"]


def test_no_matches_returns_empty() -> None:
    assert extract_tags("The weather is nice today") == []


def test_named_relationship_pattern() -> None:
    tags = extract_tags("I visited my sister named Ana")
    assert tags == ["person:ana", "relationship:sister"]


def test_is_my_pattern() -> None:
    tags = extract_tags("Sam is my roommate")
    assert tags == ["person:sam", "relationship:roommate"]


def test_my_x_y_pattern() -> None:
    tags = extract_tags("I called my brother Leo")
    assert tags == ["person:leo", "relationship:brother"]


def test_later_pattern_skips_claimed_span() -> None:
    tags = extract_tags("Ana is my sister Bea")
    assert tags == ["person:ana", "relationship:sister"]


def test_phrase_words_are_not_names() -> None:
    assert extract_tags("I hate my job at the bank") == ["job"]
    assert extract_tags("Exercise helps my mood a lot") == ["exercise"]
    assert extract_tags("It is my fault") == []


def test_never_more_than_five() -> None:
    text = "anxious depressed stressed sad angry about work family money school"
    tags = extract_tags(text)
    assert len(tags) == 5
    # Earliest vocabulary matches win.
    assert tags == ["anxious", "depressed", "stress", "stressed", "angry"]


def test_no_duplicates() -> None:
    tags = extract_tags("Tom is my friend. Tom is my friend.")
    assert len(tags) == len(set(tags))
    assert tags == ["person:tom", "relationship:friend"]


def test_pure_function() -> None:
    text = "My partner named Chris helps with my anxiety"
    assert extract_tags(text) == extract_tags(text)
