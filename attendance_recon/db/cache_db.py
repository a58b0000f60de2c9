"""libSQL connection for the embedding cache.

The cache lives in a local SQLite file by default. A libsql:// (or
https://) URL together with TURSO_AUTH_TOKEN points it at a hosted
Turso database instead.
"""

import logging
from typing import Any

from libsql_client import Client, ResultSet, create_client

from attendance_recon.config import settings
from attendance_recon.matching.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_URL = "file:embedding_cache.db"
REMOTE_SCHEMES = ("libsql://", "https://", "wss://")


class CacheDatabase:
    """Lazily opened libSQL connection owned by the embedding cache.

    Usable as an async context manager; statements issued before open()
    open the connection first.
    """

    def __init__(
        self,
        url: str | None = None,
        auth_token: str | None = None,
    ):
        """Initialize with connection parameters.

        Args:
            url: Database URL. Defaults to TURSO_DATABASE_URL or a local file.
            auth_token: Token for hosted databases. Defaults to TURSO_AUTH_TOKEN.
        """
        self.url = url or settings.turso_database_url or DEFAULT_CACHE_URL
        self._auth_token = auth_token or settings.turso_auth_token
        self._client: Client | None = None

    @property
    def is_remote(self) -> bool:
        return self.url.startswith(REMOTE_SCHEMES)

    @property
    def is_open(self) -> bool:
        return self._client is not None

    async def open(self) -> None:
        """Open the connection; no-op when already open.

        Raises:
            ConfigurationError: If a hosted URL has no auth token
        """
        if self._client is not None:
            return

        if self.is_remote:
            if not self._auth_token:
                raise ConfigurationError(
                    f"TURSO_AUTH_TOKEN is required for hosted cache {self.url}"
                )
            self._client = create_client(url=self.url, auth_token=self._auth_token)
        else:
            self._client = create_client(url=self.url)

        logger.info(f"Embedding cache database opened: {self.url}")

    async def execute(
        self,
        sql: str,
        params: list[Any] | None = None,
    ) -> ResultSet:
        """Run one statement with ? placeholders."""
        await self.open()
        return await self._client.execute(sql, params or [])

    async def ping(self) -> bool:
        """True when an open connection answers a trivial query."""
        if self._client is None:
            return False
        try:
            result = await self._client.execute("SELECT 1")
        except Exception as e:
            logger.warning(f"Embedding cache ping failed: {e}")
            return False
        return len(result.rows) == 1

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("Embedding cache database closed")

    async def __aenter__(self) -> "CacheDatabase":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
