"""Tests for attendance reconciliation API endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from attendance_recon.adapters.csv_sources import CsvRosterSource
from attendance_recon.api.attendance import router
from attendance_recon.matching.exceptions import ConfigurationError, InputDataError
from attendance_recon.matching.reconciler import AttendanceReconciler


@pytest.fixture
def app(mock_adjudicator: MagicMock) -> FastAPI:
    """App with a real reconciler over a mocked oracle."""
    app = FastAPI()
    app.include_router(router)
    app.state.reconciler = AttendanceReconciler(
        mock_adjudicator, admission_threshold=0.2, presence_threshold_minutes=30
    )
    return app


@pytest.fixture
def test_client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def failing_client() -> tuple[TestClient, MagicMock]:
    """Client whose reconciler is a mock, for error mapping tests."""
    reconciler = MagicMock(spec=AttendanceReconciler)
    reconciler.reconcile = AsyncMock()
    reconciler.run = AsyncMock()
    app = FastAPI()
    app.include_router(router)
    app.state.reconciler = reconciler
    return TestClient(app), reconciler


class TestReconcileEndpoint:
    """Tests for POST /attendance/reconcile endpoint."""

    def test_reconcile_returns_results(self, test_client: TestClient):
        response = test_client.post(
            "/attendance/reconcile",
            json={
                "mentees": [{"name": "Klaudio_AI"}, {"name": "Deny Wahyu"}],
                "attendees": [{"name": "Klaudio P.H", "duration_minutes": 45}],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["binary"] == "1\n0"
        assert data["summary"] == {"total": 2, "present": 1, "absent": 1}

        first, second = data["results"]
        assert first["mentee"]["name"] == "Klaudio_AI"
        assert first["matched_name"] == "Klaudio P.H"
        assert first["match_meta"]["source"] == "ai"
        assert first["match_meta"]["score"] == 0.8
        assert second["status"] == 0
        assert second["match_meta"]["source"] == "none"

    def test_reconcile_rejects_negative_duration(self, test_client: TestClient):
        response = test_client.post(
            "/attendance/reconcile",
            json={
                "mentees": [{"name": "Klaudio_AI"}],
                "attendees": [{"name": "Klaudio P.H", "duration_minutes": -1}],
            },
        )

        assert response.status_code == 422

    def test_reconcile_missing_credentials_returns_503(self, failing_client):
        test_client, reconciler = failing_client
        reconciler.reconcile.side_effect = ConfigurationError(
            "Anthropic API key not found."
        )

        response = test_client.post(
            "/attendance/reconcile",
            json={"mentees": [{"name": "Vanessa"}], "attendees": []},
        )

        assert response.status_code == 503
        assert "API key" in response.json()["detail"]


class TestUploadEndpoint:
    """Tests for POST /attendance/upload endpoint."""

    def test_upload_with_roster_file(
        self, test_client: TestClient, roster_csv: str, zoom_csv: str
    ):
        response = test_client.post(
            "/attendance/upload",
            files={
                "attendance_file": ("zoom.csv", zoom_csv.encode(), "text/csv"),
                "roster_file": ("roster.csv", roster_csv.encode(), "text/csv"),
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["binary"] == "1\n0\n0"
        assert [r["matched_name"] for r in data["results"]] == [
            "Klaudio P.H",
            None,
            "Bella",
        ]
        assert data["results"][2]["duration_minutes"] == 12

    def test_upload_uses_configured_roster(
        self, app: FastAPI, roster_csv: str, zoom_csv: str
    ):
        app.state.roster_source = CsvRosterSource(roster_csv)
        test_client = TestClient(app)

        response = test_client.post(
            "/attendance/upload",
            files={"attendance_file": ("zoom.csv", zoom_csv.encode(), "text/csv")},
        )

        assert response.status_code == 200
        assert response.json()["summary"]["total"] == 3

    def test_upload_accepts_bom_and_latin1(
        self, test_client: TestClient, roster_csv: str
    ):
        zoom = "Nama (nama asli),Total durasi (menit)\nKlaudio P.H,45\nJosé,10\n"

        response = test_client.post(
            "/attendance/upload",
            files={
                "attendance_file": ("zoom.csv", zoom.encode("latin-1"), "text/csv"),
                "roster_file": (
                    "roster.csv",
                    b"\xef\xbb\xbf" + roster_csv.encode(),
                    "text/csv",
                ),
            },
        )

        assert response.status_code == 200
        assert response.json()["results"][0]["mentee"]["name"] == "Klaudio_AI"

    def test_upload_without_any_roster_returns_400(
        self, test_client: TestClient, zoom_csv: str
    ):
        response = test_client.post(
            "/attendance/upload",
            files={"attendance_file": ("zoom.csv", zoom_csv.encode(), "text/csv")},
        )

        assert response.status_code == 400
        assert "roster" in response.json()["detail"]

    def test_upload_rejects_non_csv(self, test_client: TestClient, roster_csv: str):
        response = test_client.post(
            "/attendance/upload",
            files={
                "attendance_file": ("zoom.xlsx", b"PK\x03\x04", "application/zip"),
                "roster_file": ("roster.csv", roster_csv.encode(), "text/csv"),
            },
        )

        assert response.status_code == 415

    def test_upload_rejects_empty_file(self, test_client: TestClient, roster_csv: str):
        response = test_client.post(
            "/attendance/upload",
            files={
                "attendance_file": ("zoom.csv", b"", "text/csv"),
                "roster_file": ("roster.csv", roster_csv.encode(), "text/csv"),
            },
        )

        assert response.status_code == 400
        assert "empty" in response.json()["detail"]

    def test_upload_malformed_csv_returns_422(
        self, test_client: TestClient, roster_csv: str
    ):
        zoom = "Nama (nama asli),Email\nKlaudio P.H,\n"

        response = test_client.post(
            "/attendance/upload",
            files={
                "attendance_file": ("zoom.csv", zoom.encode(), "text/csv"),
                "roster_file": ("roster.csv", roster_csv.encode(), "text/csv"),
            },
        )

        assert response.status_code == 422
        assert "duration_minutes" in response.json()["detail"]

    def test_upload_error_detail_names_row(self, failing_client, roster_csv: str):
        test_client, reconciler = failing_client
        reconciler.run.side_effect = InputDataError(
            "Input should be a valid integer",
            source="attendance",
            row=3,
            field="duration_minutes",
        )

        response = test_client.post(
            "/attendance/upload",
            files={
                "attendance_file": ("zoom.csv", b"x", "text/csv"),
                "roster_file": ("roster.csv", roster_csv.encode(), "text/csv"),
            },
        )

        assert response.status_code == 422
        assert response.json()["detail"].startswith("attendance row 3")
