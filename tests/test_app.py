"""Tests for application startup and wiring."""

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from attendance_recon.adapters.csv_sources import CsvRosterSource
from attendance_recon.config import settings
from attendance_recon.main import app, lifespan
from attendance_recon.matching.candidate_selector import RuleCandidateSelector
from attendance_recon.matching.reconciler import AttendanceReconciler


@pytest.fixture
def unconfigured_settings(monkeypatch) -> None:
    """Settings with no credentials and no roster source."""
    monkeypatch.setattr(settings, "anthropic_api_key", None)
    monkeypatch.setattr(settings, "candidate_strategy", "rule")
    monkeypatch.setattr(settings, "roster_spreadsheet_id", None)
    monkeypatch.setattr(settings, "roster_csv_path", None)


@pytest.fixture
async def client(unconfigured_settings) -> AsyncIterator[AsyncClient]:
    """Create async test client for the app with lifespan state."""
    async with lifespan(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest.mark.asyncio
async def test_lifespan_wires_reconciler(client: AsyncClient) -> None:
    """Startup should build a rule-based reconciler and no default roster."""
    assert isinstance(app.state.reconciler, AttendanceReconciler)
    assert isinstance(app.state.reconciler._selector, RuleCandidateSelector)
    assert app.state.roster_source is None


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    response = await client.get("/health/")
    assert response.status_code == 200
    assert response.json()["version"] == settings.app_version


@pytest.mark.asyncio
async def test_readiness_without_api_key(client: AsyncClient) -> None:
    response = await client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "not_ready"
    assert data["checks"]["oracle"] == "missing_credentials"


@pytest.mark.asyncio
async def test_reconcile_without_api_key_returns_503(client: AsyncClient) -> None:
    response = await client.post(
        "/attendance/reconcile",
        json={
            "mentees": [{"name": "Klaudio_AI"}],
            "attendees": [{"name": "Klaudio P.H", "duration_minutes": 45}],
        },
    )
    assert response.status_code == 503
    assert "ANTHROPIC_API_KEY" in response.json()["detail"]


@pytest.mark.asyncio
async def test_lifespan_loads_configured_roster_csv(
    unconfigured_settings, monkeypatch, tmp_path: Path, roster_csv: str
) -> None:
    path = tmp_path / "roster.csv"
    path.write_text(roster_csv, encoding="utf-8")
    monkeypatch.setattr(settings, "roster_csv_path", str(path))

    async with lifespan(app):
        assert isinstance(app.state.roster_source, CsvRosterSource)
        assert len(app.state.roster_source.load_mentees()) == 3
