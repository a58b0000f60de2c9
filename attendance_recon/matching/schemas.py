"""Reconciliation schemas.

Defines the roster and attendance records, the oracle verdict, and the
per-mentee results produced by a reconciliation run.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from attendance_recon.matching.exceptions import InputDataError

# Source column header -> record field (other headers are lower-cased)
MENTEE_COLUMNS = {
    "Nama": "name",
    "Program": "program",
    "Mentor": "mentor",
}
ATTENDEE_COLUMNS = {
    "Nama (nama asli)": "name",
    "Email": "email",
    "Total durasi (menit)": "duration_minutes",
    "Total durasi (menit)s": "duration_minutes",
    "Tamu": "guest_flag",
}


def _canonical_row(row: dict[str, Any], columns: dict[str, str]) -> dict[str, Any]:
    canonical: dict[str, Any] = {}
    for header, value in row.items():
        if header is None:
            continue
        header = header.strip()
        key = columns.get(header, header.lower())
        canonical[key] = value.strip() if isinstance(value, str) else value
    return canonical


def _input_error(
    exc: ValidationError, source: str, row_number: int | None
) -> InputDataError:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or None
    return InputDataError(first["msg"], source=source, row=row_number, field=field)


class MenteeRecord(BaseModel):
    """Enrolled participant from the roster.

    Identity is the position in the roster; names are not guaranteed
    to be unique.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Full name as registered")
    program: str = Field(default="", description="Program track (Web, AI, ...)")
    mentor: str = Field(default="", description="Assigned mentor")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value

    @classmethod
    def from_row(cls, row: dict[str, Any], row_number: int | None = None) -> "MenteeRecord":
        """Parse from a roster sheet or CSV row.

        Expected columns: Nama, Program (optional), Mentor (optional).

        Args:
            row: Dictionary of column header -> value
            row_number: 1-based data row, used in error messages

        Returns:
            MenteeRecord parsed from row data

        Raises:
            InputDataError: If a required field is missing or invalid
        """
        data = _canonical_row(row, MENTEE_COLUMNS)
        if data.get("name") is None:
            raise InputDataError(
                "missing required field", source="roster", row=row_number, field="name"
            )
        try:
            return cls(
                name=str(data["name"]),
                program=str(data.get("program") or ""),
                mentor=str(data.get("mentor") or ""),
            )
        except ValidationError as e:
            raise _input_error(e, "roster", row_number) from e


class AttendeeRecord(BaseModel):
    """Participant entry from the session-call (Zoom) export."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name in the call")
    email: str = Field(default="", description="Email, often empty for guests")
    duration_minutes: int = Field(ge=0, description="Total minutes in the call")
    guest_flag: str = Field(default="", description="Guest marker from the export")

    @classmethod
    def from_row(
        cls, row: dict[str, Any], row_number: int | None = None
    ) -> "AttendeeRecord":
        """Parse from a Zoom participants export row.

        Expected columns: Nama (nama asli), Email, Total durasi (menit), Tamu.

        Raises:
            InputDataError: If a required field is missing or invalid
        """
        data = _canonical_row(row, ATTENDEE_COLUMNS)
        for required in ("name", "duration_minutes"):
            if data.get(required) in (None, ""):
                raise InputDataError(
                    "missing required field",
                    source="attendance",
                    row=row_number,
                    field=required,
                )
        try:
            return cls(
                name=str(data["name"]),
                email=str(data.get("email") or ""),
                duration_minutes=data["duration_minutes"],
                guest_flag=str(data.get("guest_flag") or ""),
            )
        except ValidationError as e:
            raise _input_error(e, "attendance", row_number) from e


class MatchSource(str, Enum):
    """How an attendance decision was reached."""

    SEMANTIC = "semantic"
    AI = "ai"
    RULE = "rule"
    NONE = "none"


class MatchType(str, Enum):
    """Kind of name correspondence reported by the oracle."""

    EXACT = "exact"
    NICKNAME = "nickname"
    SPELLING = "spelling"
    ORDER_VARIANT = "order-variant"
    TOKEN_TRIM = "token-trim"
    AI_INFERRED = "ai-inferred"


class MatchMeta(BaseModel):
    """Provenance and strength of a match decision."""

    model_config = ConfigDict(frozen=True)

    source: MatchSource = Field(description="How the match was determined")
    score: float | None = Field(
        default=None, description="Rule-based candidate score (not clamped)"
    )
    confidence: float | None = Field(
        default=None, ge=0.0, le=1.0, description="Oracle confidence (0-1)"
    )


class CandidateMatch(BaseModel):
    """Best candidate from a pool, with its similarity score."""

    model_config = ConfigDict(frozen=True)

    name: str
    score: float


class Adjudication(BaseModel):
    """Oracle verdict for one attendee name against its candidates.

    Serialized with the camelCase keys the oracle is asked to return.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    zoom_name: str = Field(alias="zoomName", description="Name being adjudicated")
    best_match: str | None = Field(
        default=None,
        alias="bestMatch",
        description="Exact candidate string, or null if no match",
    )
    confidence: float = Field(ge=0.0, le=1.0, description="Confidence (0.0-1.0)")
    reason: str | None = Field(default=None, description="Brief explanation")
    match_type: MatchType | None = Field(
        default=None, alias="matchType", description="Kind of correspondence"
    )

    @field_validator("match_type", mode="before")
    @classmethod
    def _unknown_match_type_is_none(cls, value: Any) -> Any:
        if value is None or isinstance(value, MatchType):
            return value
        if value in {m.value for m in MatchType}:
            return value
        return None


class AttendanceResult(BaseModel):
    """Final attendance decision for one mentee."""

    model_config = ConfigDict(frozen=True)

    mentee: MenteeRecord
    duration_minutes: int = Field(ge=0)
    status: Literal[0, 1] = Field(description="1 = present, 0 = absent")
    matched_name: str | None = Field(
        default=None,
        description="Attendee name when it differs from the mentee name",
    )
    match_meta: MatchMeta = Field(
        default_factory=lambda: MatchMeta(source=MatchSource.NONE)
    )


class AttendanceSummary(BaseModel):
    """Aggregate counts for one run."""

    total: int
    present: int
    absent: int

    @classmethod
    def from_results(cls, results: list[AttendanceResult]) -> "AttendanceSummary":
        total = len(results)
        present = sum(1 for r in results if r.status == 1)
        return cls(total=total, present=present, absent=total - present)


class RunState(str, Enum):
    """Lifecycle of one reconciliation run."""

    IDLE = "idle"
    LOADING_ROSTER = "loading_roster"
    LOADING_ATTENDEES = "loading_attendees"
    MATCHING = "matching"
    SUMMARIZING = "summarizing"
    DONE = "done"
    FAILED = "failed"


class ReconciliationReport(BaseModel):
    """Outcome of a completed reconciliation run."""

    state: RunState = RunState.DONE
    results: list[AttendanceResult] = Field(default_factory=list)
    summary: AttendanceSummary

    def binary_export(self) -> str:
        """Status values as newline-joined 0/1 in roster order."""
        return "\n".join(str(r.status) for r in self.results)
