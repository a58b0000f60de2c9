"""Health endpoints for probes and operators."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel

from attendance_recon.config import settings
from attendance_recon.matching.exceptions import ConfigurationError

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Service identity and clock."""

    status: str
    timestamp: datetime
    version: str
    environment: str
    candidate_strategy: str


class LivenessResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    """Dependency checks; "ready" only when every check is "ok"."""

    status: str
    checks: dict[str, str]


def _oracle_status(request: Request) -> str:
    adjudicator = getattr(request.app.state, "adjudicator", None)
    if adjudicator is None:
        return "not_configured"
    try:
        adjudicator.check_ready()
    except ConfigurationError:
        return "missing_credentials"
    return "ok"


async def _cache_status(request: Request) -> str | None:
    """None when no embedding cache is in use."""
    db = getattr(request.app.state, "db", None)
    if db is None:
        return None
    return "ok" if await db.ping() else "failed"


@router.get("/", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=settings.app_version,
        environment=settings.app_env,
        candidate_strategy=settings.candidate_strategy,
    )


@router.get("/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe - process is serving requests."""
    return LivenessResponse(status="alive")


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request) -> ReadinessResponse:
    """Readiness probe - reconciliation requests can succeed.

    Checks the oracle credential and, with the embedding strategy, the
    cache database.
    """
    checks = {"oracle": _oracle_status(request)}
    cache = await _cache_status(request)
    if cache is not None:
        checks["embedding_cache"] = cache

    ready = all(value == "ok" for value in checks.values())
    return ReadinessResponse(
        status="ready" if ready else "not_ready", checks=checks
    )
