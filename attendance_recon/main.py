"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI

from attendance_recon.api.router import api_router
from attendance_recon.config import settings
from attendance_recon.matching.adjudicator import LLMAdjudicator
from attendance_recon.matching.candidate_selector import (
    CandidateSelector,
    RuleCandidateSelector,
)
from attendance_recon.matching.reconciler import AttendanceReconciler, RosterSource
from attendance_recon.services.llm_client import LLMClient

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def _initialize_selector(app: FastAPI) -> CandidateSelector:
    """Build the candidate selector named by settings.candidate_strategy.

    The embedding strategy also opens the cache database and sweeps
    entries older than the configured maximum age.
    """
    if settings.candidate_strategy != "embedding":
        return RuleCandidateSelector()

    from attendance_recon.db.cache_db import CacheDatabase
    from attendance_recon.matching.embeddings import (
        EmbeddingCandidateSelector,
        OpenAIEmbeddingProvider,
    )
    from attendance_recon.repositories.embedding_cache_repo import (
        EmbeddingCacheRepository,
    )

    db = CacheDatabase()
    await db.open()
    app.state.db = db

    cache = EmbeddingCacheRepository(db)
    await cache.initialize()
    removed = await cache.purge_older_than(
        timedelta(days=settings.embedding_cache_max_age_days)
    )
    logger.info(f"Embedding cache ready ({removed} stale entries removed)")

    return EmbeddingCandidateSelector(OpenAIEmbeddingProvider(), cache=cache)


def _initialize_roster_source() -> RosterSource | None:
    """Roster used by uploads that don't include one.

    A Google Sheet takes precedence over a CSV path.
    """
    if settings.roster_spreadsheet_id:
        from attendance_recon.adapters.roster_adapter import SheetRosterSource

        logger.info("Roster source: Google Sheets")
        return SheetRosterSource(settings.roster_spreadsheet_id)
    if settings.roster_csv_path:
        from attendance_recon.adapters.csv_sources import CsvRosterSource

        logger.info(f"Roster source: {settings.roster_csv_path}")
        return CsvRosterSource.from_path(settings.roster_csv_path)
    return None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan management.

    Startup:
    - Create LLM client and adjudicator
    - Build candidate selector (and embedding cache if enabled)
    - Resolve default roster source

    Shutdown:
    - Close cache database connection
    """
    logger.info(f"Starting {settings.app_name}...")

    adjudicator = LLMAdjudicator(LLMClient())
    app.state.adjudicator = adjudicator
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY not set; reconciliation requests will fail")

    selector = await _initialize_selector(app)
    app.state.reconciler = AttendanceReconciler(adjudicator, selector=selector)
    logger.info(f"Reconciler initialized ({settings.candidate_strategy} candidates)")

    app.state.roster_source = _initialize_roster_source()

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    db = getattr(app.state, "db", None)
    if db is not None:
        await db.close()


app = FastAPI(
    title=settings.app_name,
    description="Mentee attendance reconciliation against session-call exports",
    version=settings.app_version,
    lifespan=lifespan,
)

app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "attendance_recon.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
