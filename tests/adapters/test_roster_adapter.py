"""Tests for SheetRosterSource - Google Sheets roster loading."""

from unittest.mock import MagicMock, patch

import pytest

from attendance_recon.adapters.roster_adapter import SheetRosterSource
from attendance_recon.config import settings
from attendance_recon.matching.exceptions import ConfigurationError, InputDataError


class TestSheetRosterSourceInit:
    """Tests for SheetRosterSource initialization."""

    def test_init_with_explicit_values(self):
        """Should store explicit sheet name and credentials path."""
        source = SheetRosterSource(
            "sheet-123", sheet_name="Batch 7", credentials_path="/path/to/creds.json"
        )
        assert source._sheet_name == "Batch 7"
        assert source._credentials_path == "/path/to/creds.json"

    def test_init_falls_back_to_settings(self, monkeypatch):
        """Should use configured sheet name and credentials when omitted."""
        monkeypatch.setattr(settings, "roster_sheet_name", "Mentee")
        monkeypatch.setattr(settings, "google_sheets_credentials", "/env/creds.json")

        source = SheetRosterSource("sheet-123")

        assert source._sheet_name == "Mentee"
        assert source._credentials_path == "/env/creds.json"


class TestSheetRosterSourceGetClient:
    """Tests for SheetRosterSource._get_client authentication."""

    def test_get_client_raises_without_credentials(self, monkeypatch):
        """Should raise ConfigurationError if no credentials configured."""
        monkeypatch.setattr(settings, "google_sheets_credentials", None)
        source = SheetRosterSource("sheet-123")

        with pytest.raises(ConfigurationError) as exc:
            source._get_client()

        assert "GOOGLE_SHEETS_CREDENTIALS" in str(exc.value)

    @patch("attendance_recon.adapters.roster_adapter.gspread.authorize")
    @patch(
        "attendance_recon.adapters.roster_adapter.Credentials.from_service_account_file"
    )
    def test_get_client_authenticates_with_scopes(
        self, mock_creds_from_file, mock_authorize
    ):
        """Should authenticate with read-only scopes and cache the client."""
        mock_creds = MagicMock()
        mock_creds_from_file.return_value = mock_creds
        mock_client = MagicMock()
        mock_authorize.return_value = mock_client

        source = SheetRosterSource("sheet-123", credentials_path="/path/to/creds.json")
        client1 = source._get_client()
        client2 = source._get_client()

        mock_creds_from_file.assert_called_once_with(
            "/path/to/creds.json",
            scopes=[
                "https://www.googleapis.com/auth/spreadsheets.readonly",
                "https://www.googleapis.com/auth/drive.readonly",
            ],
        )
        mock_authorize.assert_called_once_with(mock_creds)
        assert client1 is client2 is mock_client


class TestSheetRosterSourceLoadMentees:
    """Tests for SheetRosterSource.load_mentees."""

    def _create_source_with_mocked_client(
        self, records: list[dict], sheet_name: str = "Mentee"
    ) -> SheetRosterSource:
        """Create source with mocked gspread client returning given records."""
        mock_worksheet = MagicMock()
        mock_worksheet.get_all_records.return_value = records

        mock_spreadsheet = MagicMock()
        mock_spreadsheet.worksheet.return_value = mock_worksheet

        mock_client = MagicMock()
        mock_client.open_by_key.return_value = mock_spreadsheet

        return SheetRosterSource("sheet-123", sheet_name=sheet_name, client=mock_client)

    def test_load_mentees_returns_records_in_order(self):
        records = [
            {"Nama": "Klaudio_AI", "Program": "AI", "Mentor": "Rina"},
            {"Nama": "Deny Wahyu", "Program": "Web", "Mentor": ""},
        ]
        source = self._create_source_with_mocked_client(records)

        mentees = source.load_mentees()

        assert [m.name for m in mentees] == ["Klaudio_AI", "Deny Wahyu"]
        assert mentees[0].program == "AI"
        assert mentees[0].mentor == "Rina"

    def test_load_mentees_opens_configured_worksheet(self):
        source = self._create_source_with_mocked_client([], sheet_name="Batch 7")

        source.load_mentees()

        source._client.open_by_key.assert_called_once_with("sheet-123")
        mock_spreadsheet = source._client.open_by_key.return_value
        mock_spreadsheet.worksheet.assert_called_once_with("Batch 7")

    def test_load_mentees_handles_empty_sheet(self):
        source = self._create_source_with_mocked_client([])

        assert source.load_mentees() == []

    def test_load_mentees_requires_nama_column(self):
        source = self._create_source_with_mocked_client([{"Name": "Vanessa"}])

        with pytest.raises(InputDataError) as exc:
            source.load_mentees()

        assert "Nama" in str(exc.value)
        assert exc.value.field == "name"

    def test_load_mentees_rejects_blank_name(self):
        """Malformed rows abort the load with their row number."""
        records = [{"Nama": "Vanessa"}, {"Nama": ""}]
        source = self._create_source_with_mocked_client(records)

        with pytest.raises(InputDataError) as exc:
            source.load_mentees()

        assert exc.value.row == 2

    def test_load_mentees_coerces_numeric_cells(self):
        """gspread returns numbers for numeric-looking cells."""
        source = self._create_source_with_mocked_client([{"Nama": 2024, "Program": 1}])

        mentees = source.load_mentees()

        assert mentees[0].name == "2024"
        assert mentees[0].program == "1"
