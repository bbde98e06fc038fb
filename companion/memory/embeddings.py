"""Text embeddings backed by Gemini, with a deterministic offline fallback.

Supports two modes controlled by environment variables:
- Hosted: Set GEMINI_API_KEY. Uses the Gemini embedding model.
- Degraded: No key, or any API failure. A hash-seeded synthetic vector of
  the same length is returned so stored rows keep a uniform schema.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from companion.config import settings

logger = logging.getLogger(__name__)


def _string_hash(text: str) -> int:
    """32-bit signed rolling hash (``h * 31 + c``)."""
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h - 0x100000000 if h >= 0x80000000 else h


def synthetic_embedding(text: str, dimensions: int | None = None) -> list[float]:
    """Pseudo-embedding in [0, 1]: ``sin(hash + i) * 0.5 + 0.5`` per dimension."""
    size = dimensions or settings.embedding_dimensions
    seed = _string_hash(text)
    return (np.sin(seed + np.arange(size, dtype=float)) * 0.5 + 0.5).tolist()


class Embedder:
    """Turns text into fixed-length vectors.

    Get the shared instance via ``Embedder.get()``, or construct one with
    explicit arguments in tests.
    """

    _instance: Embedder | None = None

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        dimensions: int | None = None,
    ) -> None:
        self._api_key = settings.gemini_api_key if api_key is None else api_key
        self._model = model or settings.embedding_model
        self._dimensions = dimensions or settings.embedding_dimensions
        self._client: Any = None
        if self._api_key:
            try:
                from google import genai

                self._client = genai.Client(api_key=self._api_key)
                logger.info("Embeddings: Gemini model %s", self._model)
            except Exception:
                logger.exception("Failed to init Gemini client, using synthetic embeddings")
        else:
            logger.warning("GEMINI_API_KEY not set, using synthetic embeddings")

    @classmethod
    def get(cls) -> Embedder:
        """Return the shared Embedder instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def hosted(self) -> bool:
        return self._client is not None

    async def embed(self, text: str) -> list[float]:
        """Embed *text*. Never raises; falls back to the synthetic vector."""
        if self._client is None:
            return synthetic_embedding(text, self._dimensions)

        try:
            from google.genai import types

            response = await self._client.aio.models.embed_content(
                model=self._model,
                contents=text,
                config=types.EmbedContentConfig(task_type="SEMANTIC_SIMILARITY"),
            )
            values = list(response.embeddings[0].values or []) if response.embeddings else []
        except Exception:
            logger.exception("Embedding request failed, using synthetic embedding")
            return synthetic_embedding(text, self._dimensions)

        if len(values) != self._dimensions:
            logger.warning(
                "Embedding had %d dimensions (expected %d), using synthetic embedding",
                len(values),
                self._dimensions,
            )
            return synthetic_embedding(text, self._dimensions)
        return values
