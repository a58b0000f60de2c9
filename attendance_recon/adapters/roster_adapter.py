"""Adapter for loading the mentee roster from Google Sheets.

Uses gspread library with service account authentication to read
roster data from Google Sheets.
"""

import gspread
import structlog
from google.oauth2.service_account import Credentials

from attendance_recon.config import settings
from attendance_recon.matching.exceptions import ConfigurationError, InputDataError
from attendance_recon.matching.schemas import MENTEE_COLUMNS, MenteeRecord

logger = structlog.get_logger()


class SheetRosterSource:
    """Roster source backed by a Google Sheet.

    Expected sheet format:
    - Required column: Nama
    - Optional columns: Program, Mentor
    """

    SCOPES = [
        "https://www.googleapis.com/auth/spreadsheets.readonly",
        "https://www.googleapis.com/auth/drive.readonly",
    ]

    def __init__(
        self,
        spreadsheet_id: str,
        sheet_name: str | None = None,
        credentials_path: str | None = None,
        client: gspread.Client | None = None,
    ):
        """Initialize with sheet location and service account credentials.

        Args:
            spreadsheet_id: Google Sheets ID (from URL)
            sheet_name: Worksheet name (default from settings)
            credentials_path: Path to service account JSON.
                             Falls back to GOOGLE_SHEETS_CREDENTIALS.
            client: Optional pre-authorized gspread client
        """
        self._spreadsheet_id = spreadsheet_id
        self._sheet_name = sheet_name or settings.roster_sheet_name
        self._credentials_path = credentials_path or settings.google_sheets_credentials
        self._client = client

    def _get_client(self) -> gspread.Client:
        """Get or create authenticated gspread client.

        Raises:
            ConfigurationError: If no credentials path configured
        """
        if self._client is None:
            if not self._credentials_path:
                raise ConfigurationError(
                    "No credentials. Set GOOGLE_SHEETS_CREDENTIALS env var "
                    "or pass credentials_path to constructor."
                )
            creds = Credentials.from_service_account_file(
                self._credentials_path,
                scopes=self.SCOPES,
            )
            self._client = gspread.authorize(creds)
        return self._client

    def load_mentees(self) -> list[MenteeRecord]:
        """Load the roster worksheet.

        Returns:
            MenteeRecords in sheet row order

        Raises:
            InputDataError: If the Nama column is missing or a row is malformed
        """
        client = self._get_client()
        spreadsheet = client.open_by_key(self._spreadsheet_id)
        worksheet = spreadsheet.worksheet(self._sheet_name)

        # Header row becomes keys
        records = worksheet.get_all_records()
        if not records:
            return []

        first_row = records[0]
        name_headers = [h for h, f in MENTEE_COLUMNS.items() if f == "name"]
        if not any(h in first_row for h in name_headers):
            raise InputDataError(
                f"roster sheet must have a 'Nama' column. "
                f"Found columns: {list(first_row.keys())}",
                source="roster",
                field="name",
            )

        mentees = [
            MenteeRecord.from_row(row, i) for i, row in enumerate(records, start=1)
        ]
        logger.info(
            "roster loaded",
            source="sheets",
            spreadsheet_id=self._spreadsheet_id,
            mentees=len(mentees),
        )
        return mentees
