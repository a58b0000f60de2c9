"""Attendance reconciliation API endpoints.

Reconciles a mentee roster against session-call attendees and returns
per-mentee attendance with match provenance, summary counts and the
0/1 status export.
"""

from pathlib import Path

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from pydantic import BaseModel, Field

from attendance_recon.adapters.csv_sources import CsvAttendanceSource, CsvRosterSource
from attendance_recon.matching.exceptions import (
    ConfigurationError,
    InputDataError,
    ReconciliationError,
)
from attendance_recon.matching.reconciler import AttendanceReconciler, RosterSource
from attendance_recon.matching.schemas import (
    AttendanceResult,
    AttendanceSummary,
    AttendeeRecord,
    MenteeRecord,
    ReconciliationReport,
)

logger = structlog.get_logger()

# Constants
ALLOWED_EXTENSIONS = {".csv"}
MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024  # 5 MB

router = APIRouter(prefix="/attendance", tags=["attendance"])


class ReconcileRequest(BaseModel):
    """Request to reconcile already-parsed records."""

    mentees: list[MenteeRecord] = Field(description="Roster, in display order")
    attendees: list[AttendeeRecord] = Field(description="Session-call participants")


class ReconcileResponse(BaseModel):
    """Reconciliation outcome for one run."""

    results: list[AttendanceResult] = Field(description="One entry per mentee")
    summary: AttendanceSummary = Field(description="Total/present/absent counts")
    binary: str = Field(description="Newline-joined 0/1 statuses in roster order")

    @classmethod
    def from_report(cls, report: ReconciliationReport) -> "ReconcileResponse":
        """Convert internal ReconciliationReport to API response model."""
        return cls(
            results=report.results,
            summary=report.summary,
            binary=report.binary_export(),
        )


def get_reconciler(request: Request) -> AttendanceReconciler:
    """Dependency to get AttendanceReconciler from app state."""
    return request.app.state.reconciler


def get_roster_source(request: Request) -> RosterSource | None:
    """Dependency to get the configured roster source, if any."""
    return getattr(request.app.state, "roster_source", None)


def _http_error(error: ReconciliationError) -> HTTPException:
    if isinstance(error, InputDataError):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, ConfigurationError):
        return HTTPException(status_code=503, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


async def read_csv_upload(file: UploadFile) -> str:
    """Validate and decode an uploaded CSV file.

    Raises:
        HTTPException: 400 missing name/empty/undecodable, 413 too large,
            415 not a CSV
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="Filename is required")

    ext = Path(file.filename).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported file format. Allowed: {', '.join(ALLOWED_EXTENSIONS)}",
        )

    content_bytes = await file.read()
    if len(content_bytes) == 0:
        raise HTTPException(status_code=400, detail=f"{file.filename} is empty")
    if len(content_bytes) > MAX_FILE_SIZE_BYTES:
        max_mb = MAX_FILE_SIZE_BYTES // (1024 * 1024)
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {max_mb}MB",
        )

    # UTF-8 first (handles BOM); Latin-1 decodes any byte sequence
    try:
        return content_bytes.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content_bytes.decode("latin-1")


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_attendance(
    request: ReconcileRequest,
    reconciler: AttendanceReconciler = Depends(get_reconciler),
) -> ReconcileResponse:
    """Reconcile a roster against session-call attendees.

    Returns one result per mentee in roster order. Input errors return
    422, a missing oracle credential returns 503.
    """
    try:
        report = await reconciler.reconcile(request.mentees, request.attendees)
    except ReconciliationError as e:
        raise _http_error(e) from e
    return ReconcileResponse.from_report(report)


@router.post("/upload", response_model=ReconcileResponse)
async def upload_attendance(
    attendance_file: UploadFile = File(description="Zoom participants CSV"),
    roster_file: UploadFile | None = File(
        default=None, description="Roster CSV (defaults to configured roster)"
    ),
    reconciler: AttendanceReconciler = Depends(get_reconciler),
    configured_roster: RosterSource | None = Depends(get_roster_source),
) -> ReconcileResponse:
    """Reconcile an uploaded Zoom export against the roster.

    The roster comes from roster_file when given, otherwise from the
    configured roster source (Google Sheet or CSV path).
    """
    attendance_source = CsvAttendanceSource(await read_csv_upload(attendance_file))

    roster_source: RosterSource
    if roster_file is not None:
        roster_source = CsvRosterSource(await read_csv_upload(roster_file))
    elif configured_roster is not None:
        roster_source = configured_roster
    else:
        raise HTTPException(
            status_code=400,
            detail="No roster_file uploaded and no roster source configured",
        )

    logger.info("attendance upload received", attendance_file=attendance_file.filename)
    try:
        report = await reconciler.run(roster_source, attendance_source)
    except ReconciliationError as e:
        raise _http_error(e) from e
    return ReconcileResponse.from_report(report)
