"""Adapters for roster and attendance data sources.

- CsvRosterSource: Mentee roster from CSV exports
- CsvAttendanceSource: Zoom participants export
- SheetRosterSource: Mentee roster from Google Sheets
"""

from attendance_recon.adapters.csv_sources import CsvAttendanceSource, CsvRosterSource
from attendance_recon.adapters.roster_adapter import SheetRosterSource

__all__ = [
    "CsvAttendanceSource",
    "CsvRosterSource",
    "SheetRosterSource",
]
