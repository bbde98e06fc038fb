"""Tests for the embedder and its synthetic fallback."""

import math
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from companion.memory.embeddings import (
    Embedder,
    _string_hash,
    synthetic_embedding,
)

# -- synthetic fallback ------------------------------------------------------


def test_string_hash_known_values() -> None:
    assert _string_hash("") == 0
    assert _string_hash("a") == 97
    assert _string_hash("ab") == 97 * 31 + 98


def test_string_hash_wraps_to_signed_32_bit() -> None:
    h = _string_hash("a considerably longer piece of text that overflows" * 3)
    assert -(2**31) <= h < 2**31


def test_synthetic_embedding_shape_and_range() -> None:
    vec = synthetic_embedding("I had a hard day at work")
    assert len(vec) == 768
    assert all(0.0 <= v <= 1.0 for v in vec)


def test_synthetic_embedding_is_deterministic() -> None:
    assert synthetic_embedding("same text") == synthetic_embedding("same text")
    assert synthetic_embedding("same text") != synthetic_embedding("other text")


def test_synthetic_embedding_formula() -> None:
    vec = synthetic_embedding("a", dimensions=3)
    assert vec == pytest.approx([math.sin(97 + i) * 0.5 + 0.5 for i in range(3)])


# -- Embedder ----------------------------------------------------------------


def _hosted_embedder(response=None, error: Exception | None = None) -> Embedder:
    e = Embedder(api_key="", dimensions=4)
    e._client = MagicMock()
    e._client.aio.models.embed_content = AsyncMock(return_value=response, side_effect=error)
    return e


async def test_embedder_without_key_uses_synthetic() -> None:
    e = Embedder(api_key="", dimensions=8)
    assert not e.hosted
    assert await e.embed("hello world") == synthetic_embedding("hello world", 8)


async def test_embedder_returns_api_values() -> None:
    response = SimpleNamespace(embeddings=[SimpleNamespace(values=[0.1, 0.2, 0.3, 0.4])])
    e = _hosted_embedder(response)
    assert await e.embed("hello") == [0.1, 0.2, 0.3, 0.4]
    _, kwargs = e._client.aio.models.embed_content.call_args
    assert kwargs["contents"] == "hello"


async def test_embedder_falls_back_on_error() -> None:
    e = _hosted_embedder(error=RuntimeError("quota exceeded"))
    assert await e.embed("hello") == synthetic_embedding("hello", 4)


async def test_embedder_falls_back_on_wrong_dimensions() -> None:
    response = SimpleNamespace(embeddings=[SimpleNamespace(values=[0.1, 0.2])])
    e = _hosted_embedder(response)
    assert await e.embed("hello") == synthetic_embedding("hello", 4)


async def test_embedder_falls_back_on_empty_response() -> None:
    e = _hosted_embedder(SimpleNamespace(embeddings=[]))
    assert await e.embed("hello") == synthetic_embedding("hello", 4)


def test_singleton() -> None:
    Embedder._reset()
    try:
        assert Embedder.get() is Embedder.get()
    finally:
        Embedder._reset()
