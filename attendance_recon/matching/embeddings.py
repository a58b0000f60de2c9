"""Embedding-based candidate selection.

Alternative to the rule-based selector: names are embedded with an
embedding model and ranked by cosine similarity. Attendee vectors are
kept per name for the life of the selector, so a run embeds its attendee
corpus once; that corpus is also cached by checksum when a cache
repository is supplied.
"""

import re
from collections.abc import Sequence
from typing import Protocol

import numpy as np
import structlog
from openai import AsyncOpenAI, OpenAIError

from attendance_recon.config import settings
from attendance_recon.matching.exceptions import ConfigurationError
from attendance_recon.matching.schemas import CandidateMatch
from attendance_recon.repositories.embedding_cache_repo import (
    EmbeddingCacheRepository,
    compute_checksum,
)

logger = structlog.get_logger()

DEFAULT_TOP_K = 6

_SEPARATORS = re.compile(r"[_\-()]")
_PROGRAM_PHRASES = re.compile(
    r"\b(?:web development|web dev|ai|artificial intelligence)\b", re.IGNORECASE
)
_WHITESPACE = re.compile(r"\s+")


class EmbeddingError(Exception):
    """Raised when the embedding provider fails."""


def normalize_for_embedding(text: str) -> str:
    """Lower-case, turn separators into spaces and drop program phrases."""
    text = _SEPARATORS.sub(" ", text.lower())
    text = _PROGRAM_PHRASES.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity, 0.0 for empty, mismatched or zero vectors."""
    if len(a) != len(b) or len(a) == 0:
        return 0.0
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    magnitude = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if magnitude == 0.0:
        return 0.0
    return float(np.dot(va, vb) / magnitude)


def top_k_candidates(
    query: Sequence[float],
    vectors: Sequence[Sequence[float]],
    names: Sequence[str],
    k: int = DEFAULT_TOP_K,
) -> list[CandidateMatch]:
    """Rank names by cosine similarity to the query vector.

    Ties keep pool order.

    Raises:
        ValueError: If vectors and names differ in length
    """
    if len(vectors) != len(names):
        raise ValueError("Embeddings and names must have the same length")

    scored = [
        CandidateMatch(name=name, score=cosine_similarity(query, vector))
        for name, vector in zip(names, vectors)
    ]
    scored.sort(key=lambda c: c.score, reverse=True)
    return scored[:k]


class EmbeddingProvider(Protocol):
    """Protocol for services that turn texts into vectors."""

    async def embed(self, texts: Sequence[str]) -> list[list[float]]: ...


class OpenAIEmbeddingProvider:
    """Embedding provider backed by the OpenAI embeddings API."""

    def __init__(self, client: AsyncOpenAI | None = None, model: str | None = None):
        if client is not None:
            self._client = client
        elif settings.openai_api_key:
            self._client = AsyncOpenAI(api_key=settings.openai_api_key)
        else:
            self._client = None
        self._model = model or settings.embedding_model

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed texts after normalize_for_embedding.

        Raises:
            ConfigurationError: If no OpenAI credential is configured
            EmbeddingError: If the API call fails
        """
        if not texts:
            return []
        if self._client is None:
            raise ConfigurationError(
                "OpenAI API key not found. Set OPENAI_API_KEY environment variable."
            )

        try:
            response = await self._client.embeddings.create(
                model=self._model,
                input=[normalize_for_embedding(t) for t in texts],
            )
        except OpenAIError as e:
            raise EmbeddingError(f"Failed to get embeddings: {e}") from e

        ordered = sorted(response.data, key=lambda d: d.index)
        return [list(d.embedding) for d in ordered]


class EmbeddingCandidateSelector:
    """Candidate selector ranking the pool by embedding similarity.

    Implements the same select() contract as RuleCandidateSelector.
    Cache failures are logged and fall through to the provider.
    Pools that are subsets of names already embedded (the unclaimed pool
    shrinking over a run) are served from memory.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        cache: EmbeddingCacheRepository | None = None,
        k: int = DEFAULT_TOP_K,
    ):
        self._provider = provider
        self._cache = cache
        self._k = k
        self._vectors: dict[str, list[float]] = {}

    async def top_k(
        self,
        target_name: str,
        pool: Sequence[str],
        k: int | None = None,
    ) -> list[CandidateMatch]:
        """Top-k pool entries by cosine similarity to target_name."""
        if not pool:
            return []
        pool_vectors = await self._pool_embeddings(pool)
        [query] = await self._provider.embed([target_name])
        return top_k_candidates(query, pool_vectors, list(pool), k or self._k)

    async def select(
        self, target_name: str, pool: Sequence[str]
    ) -> CandidateMatch | None:
        matches = await self.top_k(target_name, pool, k=1)
        return matches[0] if matches else None

    async def _pool_embeddings(self, pool: Sequence[str]) -> list[list[float]]:
        names = list(pool)
        if all(name in self._vectors for name in names):
            return [self._vectors[name] for name in names]

        vectors = await self._cached_or_embedded(names)
        self._vectors.update(zip(names, vectors))
        return vectors

    async def _cached_or_embedded(self, names: list[str]) -> list[list[float]]:
        checksum = compute_checksum(names)

        if self._cache is not None:
            try:
                cached = await self._cache.get(checksum)
            except Exception as e:
                logger.warning("embedding cache read failed", error=str(e))
                cached = None
            if cached is not None and cached.names == names:
                return cached.embeddings

        vectors = await self._provider.embed(names)

        if self._cache is not None:
            try:
                await self._cache.save(checksum, names, vectors)
            except Exception as e:
                logger.warning("embedding cache write failed", error=str(e))

        return vectors
