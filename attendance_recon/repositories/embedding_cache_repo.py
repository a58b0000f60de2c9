"""Repository for cached name embeddings.

Content-addressed: entries are keyed by the SHA-256 of the name corpus
they were computed from, so a changed roster never hits a stale entry.
Persisted through CacheDatabase (libSQL).
"""

import hashlib
import json
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from attendance_recon.db.cache_db import CacheDatabase

logger = structlog.get_logger()


def compute_checksum(names: Sequence[str]) -> str:
    """SHA-256 hex digest of a name corpus (order-sensitive)."""
    return hashlib.sha256("\n".join(names).encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CachedEmbeddings:
    """Embedding vectors for a name corpus."""

    checksum: str
    names: list[str]
    embeddings: list[list[float]]
    created_at: float


class EmbeddingCacheRepository:
    """Repository for cached name embeddings with age-based expiry."""

    def __init__(
        self,
        db: "CacheDatabase",
        clock: Callable[[], float] = time.time,
    ):
        """Initialize repository with database client.

        Args:
            db: Open or lazily opened cache database
            clock: Returns current time in epoch seconds
        """
        self._db = db
        self._clock = clock

    async def initialize(self) -> None:
        """Create cache table if not exists."""
        await self._db.execute(
            """
            CREATE TABLE IF NOT EXISTS embedding_cache (
                checksum TEXT PRIMARY KEY,
                names TEXT NOT NULL,
                embeddings TEXT NOT NULL,
                created_at REAL NOT NULL
            )
            """
        )

    async def get(self, checksum: str) -> CachedEmbeddings | None:
        """Get cached embeddings for a corpus checksum.

        Entries that fail to decode, or whose name and vector counts
        differ, are treated as misses.

        Returns:
            CachedEmbeddings or None if not cached
        """
        result = await self._db.execute(
            """
            SELECT names, embeddings, created_at
            FROM embedding_cache
            WHERE checksum = ?
            """,
            [checksum],
        )
        if not result.rows:
            return None

        row = result.rows[0]
        try:
            names = json.loads(row[0])
            embeddings = json.loads(row[1])
        except (TypeError, ValueError) as e:
            logger.warning("corrupt embedding cache entry", checksum=checksum, error=str(e))
            return None

        if not isinstance(names, list) or not isinstance(embeddings, list):
            return None
        if len(names) != len(embeddings):
            logger.warning(
                "embedding cache size mismatch",
                checksum=checksum,
                names=len(names),
                embeddings=len(embeddings),
            )
            return None

        return CachedEmbeddings(
            checksum=checksum,
            names=names,
            embeddings=embeddings,
            created_at=float(row[2]),
        )

    async def save(
        self,
        checksum: str,
        names: Sequence[str],
        embeddings: Sequence[Sequence[float]],
    ) -> None:
        """Save embeddings for a corpus (upsert, refreshes the timestamp).

        Raises:
            ValueError: If names and embeddings differ in length
        """
        if len(names) != len(embeddings):
            raise ValueError("names and embeddings must have the same length")

        await self._db.execute(
            """
            INSERT INTO embedding_cache (checksum, names, embeddings, created_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(checksum)
            DO UPDATE SET
                names = excluded.names,
                embeddings = excluded.embeddings,
                created_at = excluded.created_at
            """,
            [
                checksum,
                json.dumps(list(names)),
                json.dumps([list(v) for v in embeddings]),
                self._clock(),
            ],
        )

    async def purge_older_than(self, max_age: timedelta) -> int:
        """Delete entries older than max_age.

        Returns:
            Number of entries removed
        """
        cutoff = self._clock() - max_age.total_seconds()
        result = await self._db.execute(
            "DELETE FROM embedding_cache WHERE created_at < ?",
            [cutoff],
        )
        if result.rows_affected:
            logger.info("embedding cache purged", entries_removed=result.rows_affected)
        return result.rows_affected
