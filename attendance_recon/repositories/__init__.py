"""Repositories for persisted reconciliation data."""

from attendance_recon.repositories.embedding_cache_repo import (
    CachedEmbeddings,
    EmbeddingCacheRepository,
    compute_checksum,
)

__all__ = ["CachedEmbeddings", "EmbeddingCacheRepository", "compute_checksum"]
