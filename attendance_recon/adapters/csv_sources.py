"""CSV roster and attendance sources.

Parses the mentee roster export and the Zoom participants export into
records. Parsing is strict: the first malformed row aborts the load
with the row number and field in the error.
"""

import csv
import io
from pathlib import Path

import structlog

from attendance_recon.matching.exceptions import InputDataError
from attendance_recon.matching.schemas import (
    ATTENDEE_COLUMNS,
    MENTEE_COLUMNS,
    AttendeeRecord,
    MenteeRecord,
)

logger = structlog.get_logger()


def _read_rows(
    content: str,
    source: str,
    columns: dict[str, str],
    required: tuple[str, ...],
) -> list[dict[str, str]]:
    """Read CSV text into dict rows and check required columns exist."""
    reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")))
    headers = [h.strip() for h in reader.fieldnames or []]
    mapped = {columns.get(h, h.lower()) for h in headers}
    for field in required:
        if field not in mapped:
            wanted = " or ".join(repr(h) for h, f in columns.items() if f == field)
            raise InputDataError(
                f"missing column {wanted}; found columns: {headers}",
                source=source,
                field=field,
            )

    rows = []
    try:
        for row in reader:
            # Skip rows with only empty cells (trailing ",,," lines)
            if any(isinstance(v, str) and v.strip() for v in row.values()):
                rows.append(row)
    except csv.Error as e:
        raise InputDataError(
            f"CSV parsing failed: {e}", source=source, row=reader.line_num
        ) from e
    return rows


class CsvRosterSource:
    """Mentee roster from CSV text (columns: Nama, Program, Mentor)."""

    def __init__(self, content: str | None = None, path: str | Path | None = None):
        if content is None and path is None:
            raise ValueError("content or path is required")
        self._content = content
        self._path = Path(path) if path is not None else None

    @classmethod
    def from_path(cls, path: str | Path) -> "CsvRosterSource":
        """Roster read from a CSV file on every load (UTF-8, BOM tolerated)."""
        return cls(path=path)

    def _read(self) -> str:
        if self._content is not None:
            return self._content
        try:
            return self._path.read_text(encoding="utf-8-sig")
        except OSError as e:
            raise InputDataError(f"cannot read roster file: {e}", source="roster") from e

    def load_mentees(self) -> list[MenteeRecord]:
        """Parse all rows; blank rows are skipped.

        Raises:
            InputDataError: On a missing column or malformed row
        """
        rows = _read_rows(self._read(), "roster", MENTEE_COLUMNS, ("name",))
        mentees = [
            MenteeRecord.from_row(row, i) for i, row in enumerate(rows, start=1)
        ]
        logger.info("roster loaded", source="csv", mentees=len(mentees))
        return mentees


class CsvAttendanceSource:
    """Zoom participants export from CSV text.

    Columns: Nama (nama asli), Email, Total durasi (menit), Tamu.
    """

    def __init__(self, content: str):
        self._content = content

    def load_attendees(self) -> list[AttendeeRecord]:
        """Parse all rows; blank rows are skipped.

        Raises:
            InputDataError: On a missing column or malformed row
        """
        rows = _read_rows(
            self._content, "attendance", ATTENDEE_COLUMNS, ("name", "duration_minutes")
        )
        attendees = [
            AttendeeRecord.from_row(row, i) for i, row in enumerate(rows, start=1)
        ]
        logger.info("attendance loaded", source="csv", attendees=len(attendees))
        return attendees
